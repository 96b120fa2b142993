"""Sensor subsystems.

Each subsystem samples its units from the truth snapshot and appends one event
per unit to the sensor packet, tagged with the unit's index.
"""

from beartype import beartype

from surveyor.config import (
    ImuSubsystemConfig,
    StarSensorSubsystemConfig,
    StarTrackerSubsystemConfig,
)
from surveyor.dynamics.state import SpacecraftDiscreteState
from surveyor.interfaces import IMUInput, SensorPacket, StarSensorInput, StarTrackerInput
from surveyor.models.imu import ImuModel
from surveyor.models.star_sensor import StarSensorModel
from surveyor.models.star_tracker import StarTrackerModel


@beartype
class ImuSubsystem:
    def __init__(self, config: ImuSubsystemConfig) -> None:
        self.units = [ImuModel(c) for c in config.units]

    def update_discrete(self, snapshot: SpacecraftDiscreteState, packet: SensorPacket) -> None:
        for i, unit in enumerate(self.units):
            unit.update_discrete(snapshot)
            out = unit.output()
            packet.imu.append(IMUInput(id=i, omega_cf=out.omega_cf, accel_cf=out.accel_cf))


@beartype
class StarTrackerSubsystem:
    def __init__(self, config: StarTrackerSubsystemConfig) -> None:
        self.units = [StarTrackerModel(c) for c in config.units]

    def update_discrete(self, snapshot: SpacecraftDiscreteState, packet: SensorPacket) -> None:
        for i, unit in enumerate(self.units):
            unit.update_discrete(snapshot)
            packet.star_tracker.append(StarTrackerInput(id=i, q_i2cf=unit.output()))


@beartype
class StarSensorSubsystem:
    def __init__(self, config: StarSensorSubsystemConfig) -> None:
        self.units = [StarSensorModel(c) for c in config.units]

    def update_discrete(self, snapshot: SpacecraftDiscreteState, packet: SensorPacket) -> None:
        for i, unit in enumerate(self.units):
            unit.update_discrete(snapshot)
            out = unit.output()
            packet.star_sensor.append(StarSensorInput(id=i, star_vec_cf=out.star_vec_cf, valid=out.valid))
