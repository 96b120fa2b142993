"""Vernier rocket engine model.

The Surveyor verniers produced roughly 130-460 N each. Thrust acts along the
component +Z axis, optionally deflected by a single-axis TVC servo, and is
clamped to [min_thrust, max_thrust] while the engine is lit. A command of zero
or less shuts the engine down.

Example:
    >>> engine = VernierRocket(config)
    >>> engine.handle_command(300.0)
    >>> force_b, torque_b = engine.force_torque()
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import ThrusterConfig
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftState, transform_vector
from surveyor.models.tvc import TVCServo


@beartype
class VernierRocket:
    """A throttleable engine with an optional gimbal."""

    def __init__(self, config: ThrusterConfig) -> None:
        self.config = config
        self.thrust = 0.0
        self.servo = TVCServo(config.tvc) if config.tvc is not None else None

    @property
    def ignited(self) -> bool:
        return self.thrust > 0.0

    def handle_command(self, thrust: float) -> None:
        """Throttle to ``thrust`` [N]; zero or negative shuts the engine down."""
        if thrust <= 0.0:
            self.thrust = 0.0
        else:
            self.thrust = float(np.clip(thrust, self.config.min_thrust, self.config.max_thrust))

    def handle_gimbal_command(self, angle: float) -> None:
        if self.servo is not None:
            self.servo.handle_command(angle)

    def update_continuous(self, dt: float) -> None:
        if self.servo is not None:
            self.servo.update_continuous(dt)

    def reset(self) -> None:
        self.thrust = 0.0
        if self.servo is not None:
            self.servo.reset()

    def thrust_cf(self) -> NDArray[np.float64]:
        """Thrust vector in the component frame [N]."""
        thrust_nozzle = np.array([0.0, 0.0, self.thrust])
        if self.servo is None:
            return thrust_nozzle
        return transform_vector(self.servo.q_nozzle(), thrust_nozzle)

    def force_torque(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Body-frame force [N] and torque about the center of mass [N*m]."""
        force_b = transform_vector(self.config.geometry.q_cf2b, self.thrust_cf())
        torque_b = np.cross(self.config.geometry.cf_offset_com_b, force_b)
        return force_b, torque_b

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        force_b, torque_b = self.force_torque()
        inputs.add(force_b, torque_b)
