"""Sensor front end of the flight software.

Turns raw sensor events (component frame) into body-frame readings using the
mounting geometry loaded at startup. Events addressed to a unit that does not
exist are logged and dropped; when one unit reports several times in a tick
only its last event is kept.
"""

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from surveyor.config import GeometryConfig, SpacecraftConfig, SubsystemKind
from surveyor.dynamics.state import normalize_quaternion, quaternion_multiply, transform_vector
from surveyor.interfaces import SensorPacket

logger = logging.getLogger(__name__)


class ImuReading(NamedTuple):
    """IMU output rotated into the body frame."""
    omega_b: NDArray[np.float64]  # [rad/s]
    accel_b: NDArray[np.float64]  # [m/s^2]


class StarSensorReading(NamedTuple):
    """Star line of sight in the body frame and the sensor's own validity flag."""
    star_vec_b: NDArray[np.float64]
    valid: bool


@dataclass
class ProcessedSensors:
    """Body-frame readings from one packet, keyed by unit id."""
    imu: dict[int, ImuReading] = field(default_factory=dict)
    star_tracker: dict[int, NDArray[np.float64]] = field(default_factory=dict)
    star_sensor: dict[int, StarSensorReading] = field(default_factory=dict)


def _unit_geometries(config: SpacecraftConfig, kind: SubsystemKind) -> list[GeometryConfig]:
    geometries = []
    for subsystem in config.subsystems_of(kind):
        geometries.extend(unit.geometry for unit in subsystem.units)
    return geometries


@dataclass
class SensorProcessor:
    """Mounting geometry of every sensor unit, indexed by unit id.

    Attributes:
        imu: IMU mounts
        star_tracker: Star tracker mounts
        star_sensor: Star sensor mounts
    """
    imu: list[GeometryConfig] = field(default_factory=list)
    star_tracker: list[GeometryConfig] = field(default_factory=list)
    star_sensor: list[GeometryConfig] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: SpacecraftConfig) -> "SensorProcessor":
        return cls(
            imu=_unit_geometries(config, SubsystemKind.IMU),
            star_tracker=_unit_geometries(config, SubsystemKind.STAR_TRACKER),
            star_sensor=_unit_geometries(config, SubsystemKind.STAR_SENSOR),
        )

    def _lookup(self, geometries: list[GeometryConfig], unit_id: int, what: str) -> GeometryConfig | None:
        if 0 <= unit_id < len(geometries):
            return geometries[unit_id]
        logger.error("Dropping %s event: id %d out of range (%d configured)", what, unit_id, len(geometries))
        return None

    def process(self, packet: SensorPacket) -> ProcessedSensors:
        """Convert every event in the packet to the body frame."""
        out = ProcessedSensors()

        for event in packet.imu:
            geometry = self._lookup(self.imu, event.id, "IMU")
            if geometry is not None:
                out.imu[event.id] = ImuReading(
                    omega_b=transform_vector(geometry.q_cf2b, event.omega_cf),
                    accel_b=transform_vector(geometry.q_cf2b, event.accel_cf),
                )

        for event in packet.star_tracker:
            geometry = self._lookup(self.star_tracker, event.id, "star tracker")
            if geometry is not None:
                # q_i2b = q_cf2b * q_i2cf
                q_i2b = quaternion_multiply(geometry.q_cf2b, event.q_i2cf)
                out.star_tracker[event.id] = normalize_quaternion(q_i2b)

        for event in packet.star_sensor:
            geometry = self._lookup(self.star_sensor, event.id, "star sensor")
            if geometry is not None:
                out.star_sensor[event.id] = StarSensorReading(
                    star_vec_b=transform_vector(geometry.q_cf2b, event.star_vec_cf),
                    valid=bool(event.valid),
                )

        return out
