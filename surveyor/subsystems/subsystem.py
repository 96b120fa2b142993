"""Closed collection of spacecraft subsystems.

A :class:`Subsystem` pairs a :class:`SubsystemKind` with the concrete model
and dispatches every update on the kind. Kinds that have nothing to do in a
given update are listed explicitly so that adding a kind forces a decision in
every dispatcher.
"""

from beartype import beartype

from surveyor.config import (
    ImuSubsystemConfig,
    PropulsionConfig,
    RcsConfig,
    StarSensorSubsystemConfig,
    StarTrackerSubsystemConfig,
    SubsystemConfig,
    SubsystemKind,
)
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftDiscreteState, SpacecraftState
from surveyor.interfaces import ActuatorCommands, SensorPacket
from surveyor.subsystems.propulsion import PropulsionSubsystem
from surveyor.subsystems.rcs import RcsSubsystem
from surveyor.subsystems.sensors import ImuSubsystem, StarSensorSubsystem, StarTrackerSubsystem

SubsystemModel = (
    PropulsionSubsystem
    | RcsSubsystem
    | ImuSubsystem
    | StarTrackerSubsystem
    | StarSensorSubsystem
)


@beartype
class Subsystem:
    """A tagged subsystem."""

    def __init__(self, kind: SubsystemKind, model: SubsystemModel) -> None:
        self.kind = kind
        self.model = model

    @classmethod
    def from_config(cls, config: SubsystemConfig) -> "Subsystem":
        if isinstance(config, PropulsionConfig):
            return cls(SubsystemKind.PROPULSION, PropulsionSubsystem(config))
        elif isinstance(config, RcsConfig):
            return cls(SubsystemKind.RCS, RcsSubsystem(config))
        elif isinstance(config, ImuSubsystemConfig):
            return cls(SubsystemKind.IMU, ImuSubsystem(config))
        elif isinstance(config, StarTrackerSubsystemConfig):
            return cls(SubsystemKind.STAR_TRACKER, StarTrackerSubsystem(config))
        elif isinstance(config, StarSensorSubsystemConfig):
            return cls(SubsystemKind.STAR_SENSOR, StarSensorSubsystem(config))
        else:
            raise ValueError(f"Unknown subsystem config: {config}")

    def update_discrete(self, snapshot: SpacecraftDiscreteState, packet: SensorPacket) -> None:
        """Zero-order-hold update at a GNC tick; sensors publish into ``packet``."""
        if self.kind in (SubsystemKind.PROPULSION, SubsystemKind.RCS):
            pass
        elif self.kind in (SubsystemKind.IMU, SubsystemKind.STAR_TRACKER, SubsystemKind.STAR_SENSOR):
            self.model.update_discrete(snapshot, packet)
        else:
            raise ValueError(f"Unknown subsystem kind: {self.kind}")

    def update_continuous(self, dt: float) -> None:
        """Once-per-physics-tick update (servo slewing)."""
        if self.kind == SubsystemKind.PROPULSION:
            self.model.update_continuous(dt)
        elif self.kind in (
            SubsystemKind.RCS,
            SubsystemKind.IMU,
            SubsystemKind.STAR_TRACKER,
            SubsystemKind.STAR_SENSOR,
        ):
            pass
        else:
            raise ValueError(f"Unknown subsystem kind: {self.kind}")

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        """Add actuator force and torque at an RK4 stage."""
        if self.kind in (SubsystemKind.PROPULSION, SubsystemKind.RCS):
            self.model.update_dynamics(state, properties, inputs)
        elif self.kind in (SubsystemKind.IMU, SubsystemKind.STAR_TRACKER, SubsystemKind.STAR_SENSOR):
            pass
        else:
            raise ValueError(f"Unknown subsystem kind: {self.kind}")

    def handle_commands(self, commands: ActuatorCommands) -> None:
        if self.kind in (SubsystemKind.PROPULSION, SubsystemKind.RCS):
            self.model.handle_commands(commands)
        elif self.kind in (SubsystemKind.IMU, SubsystemKind.STAR_TRACKER, SubsystemKind.STAR_SENSOR):
            pass
        else:
            raise ValueError(f"Unknown subsystem kind: {self.kind}")

    def reset(self) -> None:
        if self.kind in (SubsystemKind.PROPULSION, SubsystemKind.RCS):
            self.model.reset()
        elif self.kind in (SubsystemKind.IMU, SubsystemKind.STAR_TRACKER, SubsystemKind.STAR_SENSOR):
            pass
        else:
            raise ValueError(f"Unknown subsystem kind: {self.kind}")
