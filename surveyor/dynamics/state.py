"""13-element state vector for lander attitude and orbit simulation.

The state vector contains:
- Position (3): [x, y, z] in the inertial frame of the central body [m]
- Velocity (3): [vx, vy, vz] in the inertial frame [m/s]
- Quaternion (4): [q0, q1, q2, q3] inertial-to-body attitude (scalar-first)
- Angular velocity (3): [p, q, r] body rates in body frame [rad/s]

Total: 13 state variables

Quaternion convention (used everywhere in this package and in flight/):
- Scalar-first Hamilton quaternion: q = [q0, q1, q2, q3], q0 is the scalar part
- q_a2b describes the orientation of frame b relative to frame a, and its
  DCM (``quaternion_to_dcm(q_a2b)``) transforms vector coordinates from
  frame a into frame b: v_b = C(q_a2b) @ v_a
- Composition: q_a2c = quaternion_multiply(q_b2c, q_a2b)

So the attitude q_i2b maps inertial vectors into the body frame, and a
mount quaternion q_cf2b maps component-frame vectors into the body frame.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import InitialState

# =============================================================================
# Quaternion Utilities
# =============================================================================


@beartype
def normalize_quaternion(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length."""
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


@beartype
def quaternion_multiply(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """Multiply two quaternions (Hamilton product).

    Args:
        q1: First quaternion [q0, q1, q2, q3]
        q2: Second quaternion [q0, q1, q2, q3]

    Returns:
        Product quaternion q1 * q2
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ])


@beartype
def quaternion_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compute quaternion conjugate (inverse for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


@beartype
def quaternion_to_dcm(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert quaternion to Direction Cosine Matrix (DCM).

    Args:
        q: Quaternion [q0, q1, q2, q3] representing frame B relative to frame A

    Returns:
        3x3 DCM that transforms vectors from frame A to frame B
    """
    q = normalize_quaternion(q)
    q0, q1, q2, q3 = q

    return np.array([
        [1 - 2*(q2**2 + q3**2), 2*(q1*q2 - q0*q3), 2*(q1*q3 + q0*q2)],
        [2*(q1*q2 + q0*q3), 1 - 2*(q1**2 + q3**2), 2*(q2*q3 - q0*q1)],
        [2*(q1*q3 - q0*q2), 2*(q2*q3 + q0*q1), 1 - 2*(q1**2 + q2**2)],
    ])


@beartype
def transform_vector(q_a2b: NDArray[np.float64], v_a: NDArray[np.float64]) -> NDArray[np.float64]:
    """Transform a vector from frame A into frame B."""
    return quaternion_to_dcm(q_a2b) @ v_a


@beartype
def inverse_transform_vector(q_a2b: NDArray[np.float64], v_b: NDArray[np.float64]) -> NDArray[np.float64]:
    """Transform a vector from frame B back into frame A."""
    return quaternion_to_dcm(q_a2b).T @ v_b


@beartype
def quaternion_from_axis_angle(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """Quaternion for a rotation of ``angle`` radians about ``axis``.

    Args:
        axis: Rotation axis (need not be normalized)
        angle: Rotation angle [rad]

    Returns:
        Quaternion [q0, q1, q2, q3]
    """
    norm = np.linalg.norm(axis)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    half = 0.5 * angle
    return np.concatenate([[np.cos(half)], np.sin(half) * axis / norm])


@beartype
def euler_to_quaternion(
    roll: float,
    pitch: float,
    yaw: float,
    sequence: Literal["ZYX", "XYZ"] = "ZYX",
) -> NDArray[np.float64]:
    """Convert Euler angles to quaternion.

    Args:
        roll: Roll angle (rotation about X) in radians
        pitch: Pitch angle (rotation about Y) in radians
        yaw: Yaw angle (rotation about Z) in radians
        sequence: Euler angle sequence (default ZYX = yaw-pitch-roll)

    Returns:
        Quaternion [q0, q1, q2, q3]
    """
    cr, sr = np.cos(roll / 2), np.sin(roll / 2)
    cp, sp = np.cos(pitch / 2), np.sin(pitch / 2)
    cy, sy = np.cos(yaw / 2), np.sin(yaw / 2)

    if sequence == "ZYX":
        q0 = cr * cp * cy + sr * sp * sy
        q1 = sr * cp * cy - cr * sp * sy
        q2 = cr * sp * cy + sr * cp * sy
        q3 = cr * cp * sy - sr * sp * cy
    else:  # XYZ
        q0 = cr * cp * cy - sr * sp * sy
        q1 = sr * cp * cy + cr * sp * sy
        q2 = cr * sp * cy - sr * cp * sy
        q3 = cr * cp * sy + sr * sp * cy

    return normalize_quaternion(np.array([q0, q1, q2, q3]))


@beartype
def attitude_error(
    q_current: NDArray[np.float64],
    q_target: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Rotation vector taking the current body frame onto the target frame.

    The result is expressed in the current body frame; a positive body rate
    along it reduces the error.

    Args:
        q_current: Current inertial-to-body quaternion
        q_target: Target inertial-to-body quaternion

    Returns:
        Error rotation vector [rad], shortest path
    """
    q_err = quaternion_multiply(q_current, quaternion_conjugate(q_target))
    if q_err[0] < 0:
        q_err = -q_err

    vec = q_err[1:4]
    sin_half = np.linalg.norm(vec)
    if sin_half < 1e-12:
        return 2.0 * vec
    angle = 2.0 * np.arctan2(sin_half, q_err[0])
    return angle * vec / sin_half


# =============================================================================
# State Classes
# =============================================================================


@beartype
@dataclass
class SpacecraftState:
    """13-element rigid body state.

    The integrator owns and mutates this object. Subsystems only ever see
    :class:`SpacecraftDiscreteState` snapshots.

    Attributes:
        position: [x, y, z] position in inertial frame [m]
        velocity: [vx, vy, vz] velocity in inertial frame [m/s]
        quaternion: [q0, q1, q2, q3] inertial-to-body attitude (scalar-first)
        angular_velocity: [p, q, r] body angular rates [rad/s]
        time: elapsed simulation time since the start epoch [s]
    """
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    quaternion: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]
    time: float = 0.0

    def __post_init__(self) -> None:
        """Validate state shapes.

        The quaternion is deliberately left as given; renormalizing here would
        hide integrator drift.
        """
        if self.position.shape != (3,):
            raise ValueError(f"Position must be shape (3,), got {self.position.shape}")
        if self.velocity.shape != (3,):
            raise ValueError(f"Velocity must be shape (3,), got {self.velocity.shape}")
        if self.quaternion.shape != (4,):
            raise ValueError(f"Quaternion must be shape (4,), got {self.quaternion.shape}")
        if self.angular_velocity.shape != (3,):
            raise ValueError(f"Angular velocity must be shape (3,), got {self.angular_velocity.shape}")

    @classmethod
    def from_initial_state(cls, initial: InitialState) -> "SpacecraftState":
        """Create the state at the start epoch from a configuration record."""
        return cls(
            position=initial.position.copy(),
            velocity=initial.velocity.copy(),
            quaternion=normalize_quaternion(initial.q_i2b.copy()),
            angular_velocity=initial.omega_b.copy(),
            time=0.0,
        )

    def to_array(self) -> NDArray[np.float64]:
        """Convert state to flat array for integration."""
        return np.concatenate([
            self.position,
            self.velocity,
            self.quaternion,
            self.angular_velocity,
        ])

    @classmethod
    def from_array(cls, arr: NDArray[np.float64], time: float = 0.0) -> "SpacecraftState":
        """Create state from flat array."""
        return cls(
            position=arr[0:3].copy(),
            velocity=arr[3:6].copy(),
            quaternion=arr[6:10].copy(),
            angular_velocity=arr[10:13].copy(),
            time=time,
        )

    def copy(self) -> "SpacecraftState":
        """Create a copy of this state."""
        return SpacecraftState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            quaternion=self.quaternion.copy(),
            angular_velocity=self.angular_velocity.copy(),
            time=self.time,
        )

    @property
    def quaternion_norm(self) -> float:
        """Norm of the (unnormalized) attitude quaternion."""
        return float(np.linalg.norm(self.quaternion))

    @property
    def radius(self) -> float:
        """Distance from the inertial origin [m]."""
        return float(np.linalg.norm(self.position))

    def angular_momentum_inertial(self, inertia: NDArray[np.float64]) -> NDArray[np.float64]:
        """Angular momentum about the center of mass in the inertial frame.

        Args:
            inertia: 3x3 inertia tensor in body frame [kg*m^2]

        Returns:
            Angular momentum [kg*m^2/s]
        """
        h_b = inertia @ self.angular_velocity
        return quaternion_to_dcm(self.quaternion).T @ h_b


@beartype
@dataclass(frozen=True)
class SpacecraftDiscreteState:
    """Read-only snapshot of the truth state handed to subsystems.

    Attributes:
        time: elapsed simulation time [s]
        epoch: absolute simulation epoch
        state: copy of the 13-element state vector
        accel_b: non-gravitational specific force in body frame [m/s^2]
    """
    time: float
    epoch: datetime
    state: NDArray[np.float64]
    accel_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def from_state(
        cls,
        state: SpacecraftState,
        epoch: datetime,
        accel_b: NDArray[np.float64] | None = None,
    ) -> "SpacecraftDiscreteState":
        """Snapshot a live state."""
        return cls(
            time=state.time,
            epoch=epoch,
            state=state.to_array(),
            accel_b=np.zeros(3) if accel_b is None else accel_b.copy(),
        )

    def pos(self) -> NDArray[np.float64]:
        return self.state[0:3].copy()

    def vel(self) -> NDArray[np.float64]:
        return self.state[3:6].copy()

    def q_i2b(self) -> NDArray[np.float64]:
        return normalize_quaternion(self.state[6:10].copy())

    def omega_b(self) -> NDArray[np.float64]:
        return self.state[10:13].copy()


@beartype
@dataclass
class StateDerivative:
    """Time derivative of the state vector.

    Attributes:
        position_dot: d(position)/dt = velocity [m/s]
        velocity_dot: d(velocity)/dt = acceleration [m/s^2]
        quaternion_dot: d(quaternion)/dt
        angular_velocity_dot: d(omega)/dt = angular acceleration [rad/s^2]
    """
    position_dot: NDArray[np.float64]
    velocity_dot: NDArray[np.float64]
    quaternion_dot: NDArray[np.float64]
    angular_velocity_dot: NDArray[np.float64]

    def to_array(self) -> NDArray[np.float64]:
        """Convert to flat array for integration."""
        return np.concatenate([
            self.position_dot,
            self.velocity_dot,
            self.quaternion_dot,
            self.angular_velocity_dot,
        ])
