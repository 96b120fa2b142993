"""Guidance for the lander.

Guidance turns the commanded mode into an attitude target every GNC cycle.

Available components:
    GuidanceModeStateMachine: Idle / Manual / Detumble / Pointing modes
    AttitudeTarget: Tagged target consumed by the attitude controller
    TrajectoryPhase: Published descent phase
"""

from flight.guidance.modes import (
    AttitudeTarget,
    GuidanceMode,
    GuidanceModeStateMachine,
    TargetKind,
)
from flight.guidance.phases import TrajectoryPhase, TrajectoryPhaseTracker

__all__ = [
    "AttitudeTarget",
    "GuidanceMode",
    "GuidanceModeStateMachine",
    "TargetKind",
    "TrajectoryPhase",
    "TrajectoryPhaseTracker",
]
