"""The lander: mass properties, truth state and subsystems in one aggregate.

The spacecraft owns its :class:`SpacecraftState` exclusively. Subsystems see
the live state only inside derivative evaluations and otherwise receive
read-only :class:`SpacecraftDiscreteState` snapshots.

Example:
    >>> from surveyor.spacecraft import Spacecraft
    >>>
    >>> spacecraft = Spacecraft.from_config(config.spacecraft)
    >>> spacecraft.step(0.01, universe)
"""

from datetime import datetime

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import InitialState, SpacecraftConfig, SubsystemKind
from surveyor.dynamics.rigid_body import RigidBodyDynamics, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftDiscreteState, SpacecraftState
from surveyor.environment.gravity import Universe
from surveyor.interfaces import ActuatorCommands, SensorPacket
from surveyor.subsystems import PropulsionSubsystem, RcsSubsystem, Subsystem


@beartype
class Spacecraft:
    def __init__(
        self,
        properties: SpacecraftProperties,
        state: SpacecraftState,
        subsystems: list[Subsystem],
    ) -> None:
        self.properties = properties
        self.state = state
        self.subsystems = subsystems
        self.dynamics = RigidBodyDynamics(properties)

    @classmethod
    def from_config(cls, config: SpacecraftConfig) -> "Spacecraft":
        properties = SpacecraftProperties(mass=config.mass, inertia=config.inertia)
        return cls(
            properties=properties,
            state=SpacecraftState.from_initial_state(config.initial_state),
            subsystems=[Subsystem.from_config(s) for s in config.subsystems],
        )

    def models_of(self, kind: SubsystemKind) -> list:
        """Models of every subsystem of one kind, in configuration order."""
        return [s.model for s in self.subsystems if s.kind == kind]

    @property
    def propulsion(self) -> PropulsionSubsystem | None:
        models = self.models_of(SubsystemKind.PROPULSION)
        return models[0] if models else None

    @property
    def rcs(self) -> RcsSubsystem | None:
        models = self.models_of(SubsystemKind.RCS)
        return models[0] if models else None

    # -------------------------------------------------------------------------
    # Physics tick
    # -------------------------------------------------------------------------

    def update_continuous(self, dt: float) -> None:
        for subsystem in self.subsystems:
            subsystem.update_continuous(dt)

    def step(self, dt: float, universe: Universe) -> SpacecraftState:
        """Integrate the truth state over one physics step."""
        self.state = self.dynamics.step(self.state, dt, [universe, *self.subsystems])
        return self.state

    def specific_force_b(self) -> NDArray[np.float64]:
        """Actuator (non-gravitational) acceleration at the current state [m/s^2]."""
        return self.dynamics.specific_force_b(self.state, self.subsystems)

    # -------------------------------------------------------------------------
    # GNC tick
    # -------------------------------------------------------------------------

    def snapshot(self, epoch: datetime) -> SpacecraftDiscreteState:
        return SpacecraftDiscreteState.from_state(self.state, epoch, self.specific_force_b())

    def update_discrete(self, snapshot: SpacecraftDiscreteState, packet: SensorPacket) -> None:
        for subsystem in self.subsystems:
            subsystem.update_discrete(snapshot, packet)

    def handle_commands(self, commands: ActuatorCommands) -> None:
        for subsystem in self.subsystems:
            subsystem.handle_commands(commands)

    def reset(self, initial_state: InitialState) -> None:
        """Rebuild the truth state and return every actuator to rest."""
        self.state = SpacecraftState.from_initial_state(initial_state)
        self.dynamics.inputs.reset()
        for subsystem in self.subsystems:
            subsystem.reset()
