"""Truth-side model of a sensor that tracks a single star.

Returns the unit vector to the star in the sensor frame (boresight along the
component +Z axis) and whether the star lies inside the field of view. The
Surveyor missions tracked Canopus this way for roll reference.

Example:
    >>> sensor = StarSensorModel(config)   # fov_deg=22.5
    >>> sensor.update_discrete(snapshot)
    >>> star_vec_cf, valid = sensor.output()
"""

from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import StarSensorConfig
from surveyor.dynamics.state import (
    SpacecraftDiscreteState,
    inverse_transform_vector,
    transform_vector,
)


class StarSensorOutput(NamedTuple):
    star_vec_cf: NDArray[np.float64]
    valid: bool


@beartype
def star_unit_vector(ra: float, dec: float) -> NDArray[np.float64]:
    """Inertial unit vector from right ascension and declination [rad]."""
    return np.array([
        np.cos(dec) * np.cos(ra),
        np.cos(dec) * np.sin(ra),
        np.sin(dec),
    ])


@beartype
class StarSensorModel:
    """Single-star sensor.

    Attributes:
        star_vec_i: Inertial unit vector to the star
        cos_fov: Cosine of the field-of-view half-angle
        star_vec_cf: Latest line of sight in the sensor frame
        in_fov: Whether the star was inside the field of view
    """

    def __init__(self, config: StarSensorConfig) -> None:
        self.name = config.name
        self.q_cf2b = config.geometry.q_cf2b
        self.cos_fov = float(np.cos(np.radians(config.fov_deg)))
        self.star_vec_i = star_unit_vector(float(np.radians(config.ra_deg)), float(np.radians(config.dec_deg)))
        self.star_vec_cf = np.zeros(3)
        self.in_fov = False

    def update_discrete(self, discrete_state: SpacecraftDiscreteState) -> None:
        star_vec_b = transform_vector(discrete_state.q_i2b(), self.star_vec_i)
        self.star_vec_cf = inverse_transform_vector(self.q_cf2b, star_vec_b)
        self.in_fov = bool(self.star_vec_cf[2] >= self.cos_fov)

    def output(self) -> StarSensorOutput:
        return StarSensorOutput(self.star_vec_cf.copy(), self.in_fov)
