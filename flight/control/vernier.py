"""Vernier attitude control: differential thrust plus gimbal.

Two independent allocations of the same torque request:

- Differential thrust. With every engine at the base thrust b, a normalised
  command c_i moves engine i to b * (1 + c_i). The distribution is the
  torque-per-newton matrix scaled by b, so at zero base thrust there is
  nothing to allocate and c = 0.
- Gimbal. Over the gimbaled engines only, a normalised command c_i deflects
  servo i to c_i * max_deflection_i. The distribution is the torque per unit
  command at the base thrust.

Both normalised commands are clipped to [-1, 1] before conversion, and engine
thrusts are kept inside each engine's [min_thrust, max_thrust].

Three engines parallel to the roll axis give no roll authority, so the
differential distribution is allowed to be rank-deficient.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from flight.control.distribution import gimbal_sensitivity, pseudo_inverse, torque_per_newton
from surveyor.config import ThrusterConfig
from surveyor.exceptions import ConfigurationError


class VernierOutput(NamedTuple):
    """Engine commands from one allocation."""
    thrusts: NDArray[np.float64]  # per engine [N]
    gimbal_angles: NDArray[np.float64]  # per gimbaled engine [rad]
    differential: NDArray[np.float64]  # normalised, in [-1, 1]
    gimbal: NDArray[np.float64]  # normalised, in [-1, 1]


@dataclass
class VernierAttitudeController:
    """Differential-thrust and gimbal allocator for the vernier engines.

    Attributes:
        diff_matrix_inv: Nx3 pseudo-inverse of the torque-per-newton matrix
        gimbal_matrix_inv: Mx3 pseudo-inverse of the gimbal distribution at
            1 N (None without gimbaled engines)
        min_thrusts: Engine minimum thrusts [N]
        max_thrusts: Engine maximum thrusts [N]
        max_angles: Servo limits of the gimbaled engines [rad]
    """
    diff_matrix_inv: NDArray[np.float64]
    gimbal_matrix_inv: NDArray[np.float64] | None
    min_thrusts: NDArray[np.float64]
    max_thrusts: NDArray[np.float64]
    max_angles: NDArray[np.float64]
    last_output: VernierOutput | None = field(default=None, init=False)

    @classmethod
    def from_engines(cls, engines: list[ThrusterConfig], tol: float = 1e-6) -> "VernierAttitudeController":
        if not engines:
            raise ConfigurationError("Vernier allocation needs at least one engine")
        diff_matrix = np.column_stack([torque_per_newton(e) for e in engines])

        gimbaled = [e for e in engines if e.tvc is not None]
        gimbal_matrix_inv = None
        if gimbaled:
            gimbal_matrix = np.column_stack([
                gimbal_sensitivity(e) * e.tvc.max_deflection for e in gimbaled
            ])
            gimbal_matrix_inv = pseudo_inverse(gimbal_matrix, tol=tol, min_rank=1)

        return cls(
            diff_matrix_inv=pseudo_inverse(diff_matrix, tol=tol, min_rank=1),
            gimbal_matrix_inv=gimbal_matrix_inv,
            min_thrusts=np.array([e.min_thrust for e in engines]),
            max_thrusts=np.array([e.max_thrust for e in engines]),
            max_angles=np.array([e.tvc.max_deflection for e in gimbaled]),
        )

    @property
    def n_engines(self) -> int:
        return len(self.max_thrusts)

    def allocate(self, torque_b: NDArray[np.float64], base_thrust: float) -> VernierOutput:
        """Engine thrusts and gimbal angles for a torque request.

        Args:
            torque_b: Body torque request [N*m]
            base_thrust: Current throttle level [N]; zero means engines off

        Returns:
            VernierOutput with physical and normalised commands
        """
        n_gimbal = len(self.max_angles)
        if base_thrust <= 0.0:
            output = VernierOutput(
                thrusts=np.zeros(self.n_engines),
                gimbal_angles=np.zeros(n_gimbal),
                differential=np.zeros(self.n_engines),
                gimbal=np.zeros(n_gimbal),
            )
            self.last_output = output
            return output

        # pinv(D * b) = pinv(D) / b
        differential = np.clip(self.diff_matrix_inv @ torque_b / base_thrust, -1.0, 1.0)
        thrusts = np.clip(base_thrust * (1.0 + differential), self.min_thrusts, self.max_thrusts)

        if self.gimbal_matrix_inv is not None:
            gimbal = np.clip(self.gimbal_matrix_inv @ torque_b / base_thrust, -1.0, 1.0)
        else:
            gimbal = np.zeros(0)

        output = VernierOutput(
            thrusts=thrusts,
            gimbal_angles=gimbal * self.max_angles,
            differential=differential,
            gimbal=gimbal,
        )
        self.last_output = output
        return output

    def reset(self) -> None:
        self.last_output = None
