"""Vernier engine subsystem.

Holds the engines in configuration order. Engine thrust commands index every
engine; gimbal commands index only the engines that carry a TVC servo, in the
same order.
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import PropulsionConfig
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftState
from surveyor.interfaces import ActuatorCommands
from surveyor.models.vernier import VernierRocket


@beartype
class PropulsionSubsystem:
    def __init__(self, config: PropulsionConfig) -> None:
        self.engines = [VernierRocket(c) for c in config.engines]
        self.gimbaled = [e for e in self.engines if e.servo is not None]

    def handle_commands(self, commands: ActuatorCommands) -> None:
        if commands.engine_thrusts is not None:
            for engine, thrust in zip(self.engines, commands.engine_thrusts):
                engine.handle_command(float(thrust))
        if commands.tvc_angles is not None:
            for engine, angle in zip(self.gimbaled, commands.tvc_angles):
                engine.handle_gimbal_command(float(angle))

    def update_continuous(self, dt: float) -> None:
        for engine in self.engines:
            engine.update_continuous(dt)

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        for engine in self.engines:
            engine.update_dynamics(state, properties, inputs)

    def reset(self) -> None:
        for engine in self.engines:
            engine.reset()

    def thrusts(self) -> NDArray[np.float64]:
        return np.array([e.thrust for e in self.engines])

    def gimbal_angles(self) -> NDArray[np.float64]:
        return np.array([e.servo.angle for e in self.gimbaled])
