"""Descent trajectory phases.

The phase is published in telemetry for ground displays. Nothing in the
flight software switches phases automatically yet; ``advance`` is driven by
the caller.
"""

import logging
from enum import IntEnum

logger = logging.getLogger(__name__)


class TrajectoryPhase(IntEnum):
    """Surveyor descent phases."""
    BEFORE_RETRO_BURN = 0  # Coasting toward the retro-rocket ignition point
    DESCENT_CONTOUR = 1    # Vernier-controlled descent along the contour
    TERMINAL_DESCENT = 2   # Constant-velocity final approach
    LANDED = 3             # On the surface


class TrajectoryPhaseTracker:
    """Current trajectory phase, moving forward only."""

    def __init__(self, phase: TrajectoryPhase = TrajectoryPhase.BEFORE_RETRO_BURN) -> None:
        self.phase = phase

    def advance(self, phase: TrajectoryPhase) -> None:
        if phase < self.phase:
            raise ValueError(f"Cannot go back from {self.phase.name} to {phase.name}")
        if phase != self.phase:
            logger.info("Trajectory phase %s -> %s", self.phase.name, phase.name)
            self.phase = phase

    def reset(self) -> None:
        self.phase = TrajectoryPhase.BEFORE_RETRO_BURN
