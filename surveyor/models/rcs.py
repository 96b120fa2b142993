"""Reaction control system thruster model.

Thrust is max_thrust * duty_cycle along the component +Z axis, rotated into
the body frame by the mount quaternion. Torque is offset x force.
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import ThrusterConfig
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftState, transform_vector


@beartype
class RcsThruster:
    """A single on/off cold-gas jet driven by a duty cycle.

    Example:
        >>> jet = RcsThruster(config)
        >>> jet.handle_command(0.5)
        >>> force_b, torque_b = jet.force_torque()
    """

    def __init__(self, config: ThrusterConfig) -> None:
        self.config = config
        self.duty_cycle = 0.0

    @property
    def thrust(self) -> float:
        """Current thrust [N]."""
        return self.config.max_thrust * self.duty_cycle

    def handle_command(self, duty_cycle: float) -> None:
        """Set the duty cycle, clamped to [0, 1]."""
        self.duty_cycle = float(np.clip(duty_cycle, 0.0, 1.0))

    def reset(self) -> None:
        self.duty_cycle = 0.0

    def force_torque(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Body-frame force [N] and torque about the center of mass [N*m]."""
        thrust_cf = np.array([0.0, 0.0, self.thrust])
        force_b = transform_vector(self.config.geometry.q_cf2b, thrust_cf)
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
