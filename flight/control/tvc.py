"""TVC torque allocation.

Small gimbal deflections of a single-axis servo tilt the thrust by
``angle * (axis x z)`` in the component frame, so each gimbaled engine has a
fixed torque-per-radian sensitivity s at full thrust. The allocator projects
the torque request on d = s / |s|^2 to get the angle that would produce the
requested torque component along s, and clamps it to the servo's limit.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from flight.control.distribution import gimbal_sensitivity
from surveyor.config import ThrusterConfig
from surveyor.exceptions import ConfigurationError


@dataclass
class TVCController:
    """Projection allocator for gimbaled engines.

    Attributes:
        distribution_matrix: 3xM, column i is s_i / |s_i|^2 [rad/(N*m)]
        max_angles: Maximum deflection of each servo [rad]
        current_angles: Last commanded angles [rad]
    """
    distribution_matrix: NDArray[np.float64]
    max_angles: NDArray[np.float64]
    current_angles: NDArray[np.float64] = field(init=False)

    def __post_init__(self) -> None:
        self.current_angles = np.zeros(len(self.max_angles))

    @classmethod
    def from_engines(cls, engines: list[ThrusterConfig]) -> "TVCController":
        gimbaled = [e for e in engines if e.tvc is not None]
        if not gimbaled:
            raise ConfigurationError("TVC allocation needs at least one gimbaled engine")
        columns = []
        for engine in gimbaled:
            s = gimbal_sensitivity(engine, engine.max_thrust)
            norm_sq = float(np.dot(s, s))
            if norm_sq < 1e-12:
                raise ConfigurationError("Gimbaled engine produces no torque; check its offset and TVC axis")
            columns.append(s / norm_sq)
        return cls(
            distribution_matrix=np.column_stack(columns),
            max_angles=np.array([e.tvc.max_deflection for e in gimbaled]),
        )

    def allocate(self, torque_b: NDArray[np.float64]) -> NDArray[np.float64]:
        """Gimbal angles [rad] for a body torque request [N*m]."""
        angles = torque_b @ self.distribution_matrix
        self.current_angles = np.clip(angles, -self.max_angles, self.max_angles)
        return self.current_angles.copy()

    def reset(self) -> None:
        self.current_angles = np.zeros(len(self.max_angles))
