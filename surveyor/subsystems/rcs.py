"""Reaction control subsystem: the cold-gas jets in configuration order."""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import RcsConfig
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftState
from surveyor.interfaces import ActuatorCommands
from surveyor.models.rcs import RcsThruster


@beartype
class RcsSubsystem:
    def __init__(self, config: RcsConfig) -> None:
        self.thrusters = [RcsThruster(c) for c in config.thrusters]

    def handle_commands(self, commands: ActuatorCommands) -> None:
        if commands.rcs_duty_cycles is None:
            return
        for thruster, duty in zip(self.thrusters, commands.rcs_duty_cycles):
            thruster.handle_command(float(duty))

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        for thruster in self.thrusters:
            thruster.update_dynamics(state, properties, inputs)

    def reset(self) -> None:
        for thruster in self.thrusters:
            thruster.reset()

    def duty_cycles(self) -> NDArray[np.float64]:
        return np.array([t.duty_cycle for t in self.thrusters])
