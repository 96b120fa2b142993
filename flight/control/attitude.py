"""Attitude control for the lander.

Turns the guidance target and the attitude estimate into a body-frame torque
request. All laws are proportional-derivative:

- Attitude(q): tau = kp * phi - kd * omega, phi the rotation vector from the
  current to the target attitude
- Align(a_b, t_i): same law with phi rotating body axis a_b onto t_i
- BodyRate(w): tau = kd * (w - omega)
- None: zero torque

The torque is limited by magnitude to ``max_torque`` so its direction is kept.
Without a valid attitude estimate the attitude laws fall back to rate
damping; without a valid rate the controller outputs zero.

Example:
    >>> from flight.control import AttitudeController
    >>>
    >>> controller = AttitudeController(kp=100.0, kd=400.0, max_torque=20.0)
    >>> torque_b = controller.compute(target, estimate)
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from flight.guidance import AttitudeTarget, TargetKind
from flight.navigation import AttitudeEstimate
from surveyor.dynamics.state import attitude_error, transform_vector

# =============================================================================
# Helpers
# =============================================================================


def align_error(
    q_i2b: NDArray[np.float64],
    align_with_b: NDArray[np.float64],
    align_to_i: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Rotation vector (body frame) turning ``align_with_b`` onto ``align_to_i``.

    Rotation about the aligned axis is left free.
    """
    target_b = transform_vector(q_i2b, align_to_i)
    axis = np.cross(align_with_b, target_b)
    sin_angle = np.linalg.norm(axis)
    cos_angle = np.clip(np.dot(align_with_b, target_b), -1.0, 1.0)
    angle = np.arctan2(sin_angle, cos_angle)

    if sin_angle < 1e-12:
        if cos_angle > 0:
            return np.zeros(3)
        # Anti-aligned: any axis normal to align_with_b works
        axis = np.cross(align_with_b, np.array([1.0, 0.0, 0.0]))
        if np.linalg.norm(axis) < 1e-6:
            axis = np.cross(align_with_b, np.array([0.0, 1.0, 0.0]))
        return np.pi * axis / np.linalg.norm(axis)

    return angle * axis / sin_angle


def limit_magnitude(vector: NDArray[np.float64], limit: float) -> NDArray[np.float64]:
    """Scale ``vector`` down to ``limit`` if it is longer."""
    norm = np.linalg.norm(vector)
    if norm > limit > 0:
        return vector * (limit / norm)
    return vector


# =============================================================================
# Attitude Controller
# =============================================================================


@dataclass
class AttitudeController:
    """Quaternion-feedback PD attitude controller.

    Attributes:
        kp: Proportional gain on attitude error [N*m/rad]
        kd: Derivative gain on body rate [N*m*s/rad]
        max_torque: Torque magnitude limit [N*m]
    """
    kp: float = 100.0
    kd: float = 400.0
    max_torque: float = 20.0

    def compute(self, target: AttitudeTarget | None, estimate: AttitudeEstimate) -> NDArray[np.float64]:
        """Torque request for this cycle.

        Args:
            target: Attitude target from guidance (None is the same as no target)
            estimate: Current attitude estimate

        Returns:
            Body-frame torque request [N*m]
        """
        if target is None or target.kind == TargetKind.NONE:
            return np.zeros(3)

        omega = estimate.omega_b if estimate.rate_valid else np.zeros(3)

        if target.kind == TargetKind.BODY_RATE:
            if not estimate.rate_valid:
                return np.zeros(3)
            torque = self.kd * (target.omega_b - omega)

        elif target.kind in (TargetKind.ATTITUDE, TargetKind.ALIGN):
            if not estimate.attitude_valid:
                # Damp rates until the attitude is known
                torque = -self.kd * omega
            elif target.kind == TargetKind.ATTITUDE:
                error = attitude_error(estimate.q_i2b, target.q_i2b)
                torque = self.kp * error - self.kd * omega
            else:
                error = align_error(estimate.q_i2b, target.align_with_b, target.align_to_i)
                torque = self.kp * error - self.kd * omega

        else:
            raise ValueError(f"Unknown attitude target: {target.kind}")

        return limit_magnitude(torque, self.max_torque)
