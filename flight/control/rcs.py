"""RCS torque allocation.

Each column of the distribution matrix is the body torque produced by one
newton of a thruster's thrust (offset x direction). A torque request is mapped
to per-thruster thrust through the pseudo-inverse and converted to duty
cycles: duty_i = clip(|u_i| / max_thrust_i, 0, 1).
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from flight.control.distribution import pseudo_inverse, torque_per_newton
from surveyor.config import ThrusterConfig
from surveyor.exceptions import ConfigurationError


@dataclass
class RCSController:
    """Pseudo-inverse RCS allocator.

    Attributes:
        distribution_matrix: 3xN torque per newton of each thruster
        distribution_matrix_inv: Nx3 pseudo-inverse
        max_thrusts: Maximum thrust of each thruster [N]
    """
    distribution_matrix: NDArray[np.float64]
    distribution_matrix_inv: NDArray[np.float64]
    max_thrusts: NDArray[np.float64]

    @classmethod
    def from_thrusters(cls, thrusters: list[ThrusterConfig], tol: float = 1e-6) -> "RCSController":
        """Build the allocator; raises ConfigurationError unless the jets span all three axes."""
        if not thrusters:
            raise ConfigurationError("RCS allocation needs at least one thruster")
        matrix = np.column_stack([torque_per_newton(t) for t in thrusters])
        return cls(
            distribution_matrix=matrix,
            distribution_matrix_inv=pseudo_inverse(matrix, tol=tol, min_rank=3),
            max_thrusts=np.array([t.max_thrust for t in thrusters]),
        )

    @property
    def n_thrusters(self) -> int:
        return len(self.max_thrusts)

    def allocate(self, torque_b: NDArray[np.float64]) -> NDArray[np.float64]:
        """Duty cycles in [0, 1] for a body torque request [N*m]."""
        thrusts = self.distribution_matrix_inv @ torque_b
        return np.clip(np.abs(thrusts) / self.max_thrusts, 0.0, 1.0)
