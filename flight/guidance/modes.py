"""Guidance modes and attitude targets.

The guidance mode only changes on a ground command. Every GNC cycle the state
machine turns the current mode into a fresh attitude target:

- Idle: no target (controller outputs zero torque)
- Manual: a fixed 0.1 rad roll offset from the inertial frame
- Detumble: hold zero body rate
- Pointing: the target that came with the mode command

Example:
    >>> machine = GuidanceModeStateMachine(GuidanceMode.IDLE)
    >>> machine.set_mode(GuidanceMode.DETUMBLE)
    True
    >>> machine.update().kind
    <TargetKind.BODY_RATE: 'BodyRate'>
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from surveyor.dynamics.state import euler_to_quaternion, normalize_quaternion

logger = logging.getLogger(__name__)

MANUAL_ROLL = 0.1  # rad


# =============================================================================
# Attitude Targets
# =============================================================================


class TargetKind(Enum):
    NONE = "None"
    ATTITUDE = "Attitude"
    BODY_RATE = "BodyRate"
    ALIGN = "Align"


@dataclass(frozen=True, eq=False)
class AttitudeTarget:
    """Tagged attitude target.

    Use the constructors rather than building one directly.

    Attributes:
        kind: Which variant this is
        q_i2b: Target attitude (ATTITUDE)
        omega_b: Target body rate [rad/s] (BODY_RATE)
        align_with_b: Body-frame axis to align (ALIGN)
        align_to_i: Inertial direction to align it with (ALIGN)
    """
    kind: TargetKind
    q_i2b: NDArray[np.float64] | None = None
    omega_b: NDArray[np.float64] | None = None
    align_with_b: NDArray[np.float64] | None = None
    align_to_i: NDArray[np.float64] | None = None

    @classmethod
    def none(cls) -> "AttitudeTarget":
        return cls(TargetKind.NONE)

    @classmethod
    def attitude(cls, q_i2b: NDArray[np.float64]) -> "AttitudeTarget":
        return cls(TargetKind.ATTITUDE, q_i2b=normalize_quaternion(np.asarray(q_i2b, dtype=np.float64)))

    @classmethod
    def body_rate(cls, omega_b: NDArray[np.float64]) -> "AttitudeTarget":
        return cls(TargetKind.BODY_RATE, omega_b=np.asarray(omega_b, dtype=np.float64))

    @classmethod
    def align(cls, align_with_b: NDArray[np.float64], align_to_i: NDArray[np.float64]) -> "AttitudeTarget":
        """Point body axis ``align_with_b`` along inertial direction ``align_to_i``."""
        with_b = np.asarray(align_with_b, dtype=np.float64)
        to_i = np.asarray(align_to_i, dtype=np.float64)
        if np.linalg.norm(with_b) < 1e-12 or np.linalg.norm(to_i) < 1e-12:
            raise ValueError("Align target directions must be non-zero")
        return cls(
            TargetKind.ALIGN,
            align_with_b=with_b / np.linalg.norm(with_b),
            align_to_i=to_i / np.linalg.norm(to_i),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttitudeTarget):
            return NotImplemented
        if self.kind != other.kind:
            return False
        for name in ("q_i2b", "omega_b", "align_with_b", "align_to_i"):
            a, b = getattr(self, name), getattr(other, name)
            if (a is None) != (b is None):
                return False
            if a is not None and not np.array_equal(a, b):
                return False
        return True

    __hash__ = None


# =============================================================================
# Guidance Mode State Machine
# =============================================================================


class GuidanceMode(Enum):
    IDLE = "Idle"
    MANUAL = "Manual"
    DETUMBLE = "Detumble"
    POINTING = "Pointing"


class GuidanceModeStateMachine:
    """Holds the guidance mode and produces the per-cycle attitude target."""

    def __init__(self, mode: GuidanceMode = GuidanceMode.IDLE, target: AttitudeTarget | None = None) -> None:
        self.initial_mode = mode
        self.initial_target = target
        self.mode = mode
        self.target = target
        self._check(mode, target)

    @staticmethod
    def _check(mode: GuidanceMode, target: AttitudeTarget | None) -> None:
        if mode == GuidanceMode.POINTING and target is None:
            raise ValueError("Pointing mode requires an attitude target")

    def set_mode(self, mode: GuidanceMode | str, target: AttitudeTarget | None = None) -> bool:
        """Switch mode; returns False when the mode value is unchanged.

        Args:
            mode: New mode, or its name ("Idle", "Manual", ...)
            target: Attitude target, required for Pointing

        Returns:
            True if the mode value changed
        """
        mode = GuidanceMode(mode) if isinstance(mode, str) else mode
        if mode != GuidanceMode.POINTING:
            target = None
        self._check(mode, target)

        if mode == self.mode and target == self.target:
            return False

        logger.info("Guidance mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode
        self.target = target
        return True

    def update(self) -> AttitudeTarget:
        """Attitude target for this cycle."""
        if self.mode == GuidanceMode.IDLE:
            return AttitudeTarget.none()
        elif self.mode == GuidanceMode.MANUAL:
            return AttitudeTarget.attitude(euler_to_quaternion(MANUAL_ROLL, 0.0, 0.0))
        elif self.mode == GuidanceMode.DETUMBLE:
            return AttitudeTarget.body_rate(np.zeros(3))
        elif self.mode == GuidanceMode.POINTING:
            return self.target
        else:
            raise ValueError(f"Unknown guidance mode: {self.mode}")

    def reset(self) -> None:
        self.mode = self.initial_mode
        self.target = self.initial_target
