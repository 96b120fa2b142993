"""Single-axis thrust vector control servo.

The servo rotates its engine's nozzle about ``axis_cf`` (component frame).
Commands are clamped to the maximum deflection; when a slew rate is
configured the actual angle moves toward the command at most
``slew_rate * dt`` per continuous update.
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import TVCConfig
from surveyor.dynamics.state import quaternion_from_axis_angle


@beartype
class TVCServo:
    """Gimbal servo state.

    Attributes:
        commanded_angle: Latest clamped command [rad]
        angle: Actual gimbal angle [rad]
    """

    def __init__(self, config: TVCConfig) -> None:
        self.config = config
        self.commanded_angle = 0.0
        self.angle = 0.0

    def handle_command(self, angle: float) -> None:
        """Set the target angle, clamped to +/- max_deflection."""
        limit = self.config.max_deflection
        self.commanded_angle = float(np.clip(angle, -limit, limit))
        if self.config.slew_rate is None:
            self.angle = self.commanded_angle

    def update_continuous(self, dt: float) -> None:
        """Slew the actual angle toward the command."""
        if self.config.slew_rate is None:
            self.angle = self.commanded_angle
            return
        max_delta = self.config.slew_rate * dt
        delta = np.clip(self.commanded_angle - self.angle, -max_delta, max_delta)
        self.angle = float(self.angle + delta)

    def reset(self) -> None:
        self.commanded_angle = 0.0
        self.angle = 0.0

    def q_nozzle(self) -> NDArray[np.float64]:
        """Quaternion rotating the undeflected nozzle frame into the component frame."""
        return quaternion_from_axis_angle(self.config.axis_cf, self.angle)
