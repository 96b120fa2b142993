"""Distribution matrices for torque allocation.

Helpers that turn thruster mounting geometry into body torque per unit
actuator command, and a rank-checked pseudo-inverse. Allocators build their
matrices once at startup; a matrix that cannot deliver the required rank is a
configuration error.
"""

import numpy as np
from numpy.typing import NDArray

from surveyor.config import ThrusterConfig
from surveyor.dynamics.state import transform_vector
from surveyor.exceptions import ConfigurationError

Z_CF = np.array([0.0, 0.0, 1.0])


def pseudo_inverse(
    matrix: NDArray[np.float64],
    tol: float = 1e-6,
    min_rank: int | None = None,
) -> NDArray[np.float64]:
    """Moore-Penrose pseudo-inverse with a rank check.

    Singular values below ``tol`` times the largest are treated as zero.

    Args:
        matrix: Distribution matrix (3xN)
        tol: Relative singular value tolerance
        min_rank: Required rank (default: full rank, min(shape))

    Returns:
        Pseudo-inverse (Nx3)

    Raises:
        ConfigurationError: If the matrix rank is below ``min_rank``
    """
    if min_rank is None:
        min_rank = min(matrix.shape)
    singular_values = np.linalg.svd(matrix, compute_uv=False)
    if singular_values.size == 0 or singular_values[0] <= 0.0:
        rank = 0
    else:
        rank = int(np.sum(singular_values > tol * singular_values[0]))
    if rank < min_rank:
        raise ConfigurationError(
            f"Distribution matrix of shape {matrix.shape} has rank {rank}, need at least {min_rank}"
        )
    return np.linalg.pinv(matrix, rcond=tol)


def torque_per_newton(config: ThrusterConfig) -> NDArray[np.float64]:
    """Body torque [N*m] from 1 N of thrust along the component +Z axis."""
    direction_b = transform_vector(config.geometry.q_cf2b, Z_CF)
    return np.cross(config.geometry.cf_offset_com_b, direction_b)


def gimbal_sensitivity(config: ThrusterConfig, thrust: float = 1.0) -> NDArray[np.float64]:
    """Body torque per radian of deflection at ``thrust`` newtons [N*m/rad].

    A small deflection about ``axis_cf`` tilts the thrust by angle * (axis x z)
    in the component frame.
    """
    if config.tvc is None:
        raise ConfigurationError("Engine has no TVC servo")
    deflection_cf = np.cross(config.tvc.axis_cf, Z_CF)
    deflection_b = transform_vector(config.geometry.q_cf2b, deflection_cf)
    return np.cross(config.geometry.cf_offset_com_b, deflection_b) * thrust
