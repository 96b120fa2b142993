"""Truth-side star tracker model.

Reports the attitude of its own component frame, q_i2cf = q_cf2b^-1 * q_i2b.
The flight software recovers the body attitude with q_i2b = q_cf2b * q_i2cf.
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import StarTrackerConfig
from surveyor.dynamics.state import (
    SpacecraftDiscreteState,
    quaternion_conjugate,
    quaternion_multiply,
)


@beartype
class StarTrackerModel:
    def __init__(self, config: StarTrackerConfig) -> None:
        self.q_cf2b = config.geometry.q_cf2b
        self.q_i2cf = np.array([1.0, 0.0, 0.0, 0.0])

    def update_discrete(self, discrete_state: SpacecraftDiscreteState) -> None:
        self.q_i2cf = quaternion_multiply(quaternion_conjugate(self.q_cf2b), discrete_state.q_i2b())

    def output(self) -> NDArray[np.float64]:
        return self.q_i2cf.copy()
