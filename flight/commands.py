"""Ground commands understood by the flight software.

These travel through the simulation's command channel like the run-control
commands; the simulation forwards every kind it does not handle itself.
Arguments are checked on construction, so a malformed command never reaches
the channel.
"""

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from flight.guidance import AttitudeTarget, GuidanceMode


@dataclass(frozen=True)
class SetGuidanceMode:
    """Switch guidance mode.

    Attributes:
        mode: New mode (enum member or its name, e.g. "Detumble")
        target: Attitude target held by Pointing mode

    Raises:
        ValueError: For an unknown mode name, or Pointing without a target
    """
    mode: GuidanceMode | str
    target: AttitudeTarget | None = None
    kind: ClassVar[str] = "guidance_mode"

    def __post_init__(self) -> None:
        mode = GuidanceMode(self.mode) if isinstance(self.mode, str) else self.mode
        if mode == GuidanceMode.POINTING and self.target is None:
            raise ValueError("Pointing mode requires an attitude target")
        object.__setattr__(self, "mode", mode)


@dataclass(frozen=True)
class SetBaseThrust:
    """Set the vernier throttle level [N]. Zero shuts the engines down."""
    thrust: float
    kind: ClassVar[str] = "base_thrust"

    def __post_init__(self) -> None:
        if not np.isfinite(self.thrust) or self.thrust < 0:
            raise ValueError(f"Base thrust must be finite and non-negative, got {self.thrust}")
