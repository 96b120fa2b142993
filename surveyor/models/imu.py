"""Truth-side IMU model.

Samples the body rate and the non-gravitational specific force from a state
snapshot and expresses both in the IMU component frame. The model is ideal:
no noise, bias or scale-factor error.
"""

from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import ImuConfig
from surveyor.dynamics.state import SpacecraftDiscreteState, inverse_transform_vector


class ImuOutput(NamedTuple):
    omega_cf: NDArray[np.float64]  # [rad/s]
    accel_cf: NDArray[np.float64]  # [m/s^2]


@beartype
class ImuModel:
    def __init__(self, config: ImuConfig) -> None:
        self.q_cf2b = config.geometry.q_cf2b
        self.omega_cf = np.zeros(3)
        self.accel_cf = np.zeros(3)

    def update_discrete(self, discrete_state: SpacecraftDiscreteState) -> None:
        self.omega_cf = inverse_transform_vector(self.q_cf2b, discrete_state.omega_b())
        self.accel_cf = inverse_transform_vector(self.q_cf2b, discrete_state.accel_b)

    def output(self) -> ImuOutput:
        return ImuOutput(self.omega_cf.copy(), self.accel_cf.copy())
