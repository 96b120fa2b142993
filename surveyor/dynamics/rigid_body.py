"""Rigid body equations of motion for the 13-state lander.

Implements the equations of motion for a rigid spacecraft, computing state
derivatives from the forces and torques accumulated at each evaluation.

The equations use:
- Newton's second law for translational motion: F = m * a
- Euler's equations for rotational motion: dh/dt = tau - omega x (I * omega)
- Quaternion kinematics for attitude propagation

Forces and torques are gathered by zeroing an :class:`OrbitalDynamicsInputs`
accumulator and letting every :class:`DynamicsContributor` (environment and
actuators) add its share. This happens at each of the four RK4 stages, so
contributions are re-evaluated at the perturbed state and time.

Example:
    >>> from surveyor.dynamics import RigidBodyDynamics, SpacecraftProperties
    >>>
    >>> props = SpacecraftProperties(mass=1000.0, inertia=np.diag([400.0, 400.0, 300.0]))
    >>> dynamics = RigidBodyDynamics(props)
    >>> state = dynamics.step(state, 0.01, [universe, *subsystems])
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from surveyor.dynamics.state import SpacecraftState, StateDerivative, quaternion_to_dcm
from surveyor.exceptions import ConfigurationError, NumericalInstabilityError

# =============================================================================
# Mass Properties and Inputs
# =============================================================================


@beartype
@dataclass
class SpacecraftProperties:
    """Constant mass properties.

    Attributes:
        mass: Spacecraft mass [kg]
        inertia: 3x3 inertia tensor about the center of mass, body frame [kg*m^2]
        inertia_inv: Inverse inertia, computed once at construction
    """
    mass: float
    inertia: NDArray[np.float64]
    inertia_inv: NDArray[np.float64] = field(init=False)

    def __post_init__(self) -> None:
        """Validate mass and inertia, precompute the inverse."""
        if not np.isfinite(self.mass) or self.mass <= 0:
            raise ConfigurationError(f"Mass must be positive, got {self.mass}")
        if self.inertia.shape != (3, 3):
            raise ConfigurationError(f"Inertia must be shape (3, 3), got {self.inertia.shape}")
        if not np.all(np.isfinite(self.inertia)):
            raise ConfigurationError("Inertia must be finite")

        scale = max(float(np.max(np.abs(self.inertia))), 1.0)
        if not np.allclose(self.inertia, self.inertia.T, atol=1e-9 * scale):
            raise ConfigurationError("Inertia tensor must be symmetric")
        if np.min(np.linalg.eigvalsh(self.inertia)) <= 0:
            raise ConfigurationError("Inertia tensor must be positive definite")

        self.inertia_inv = np.linalg.inv(self.inertia)


@beartype
@dataclass
class OrbitalDynamicsInputs:
    """Force and torque accumulator for one derivative evaluation.

    Attributes:
        total_force_b: Sum of forces in body frame [N]
        total_torque_b: Sum of torques about the center of mass, body frame [N*m]
    """
    total_force_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    total_torque_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def reset(self) -> None:
        """Zero both accumulators."""
        self.total_force_b = np.zeros(3)
        self.total_torque_b = np.zeros(3)

    def add(
        self,
        force_b: NDArray[np.float64] | None = None,
        torque_b: NDArray[np.float64] | None = None,
    ) -> None:
        """Add a contribution in the body frame."""
        if force_b is not None:
            self.total_force_b = self.total_force_b + force_b
        if torque_b is not None:
            self.total_torque_b = self.total_torque_b + torque_b


@runtime_checkable
class DynamicsContributor(Protocol):
    """Anything that adds forces or torques to a derivative evaluation."""

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        """Add this contributor's force and torque at ``state``."""
        ...


# =============================================================================
# Equations of Motion
# =============================================================================


@njit(cache=True, fastmath=True)
def _quaternion_derivative(
    q0: float, q1: float, q2: float, q3: float,
    p: float, q: float, r: float,
) -> tuple[float, float, float, float]:
    """Numba-optimized inertial-to-body quaternion kinematics."""
    return (
        0.5 * (p*q1 + q*q2 + r*q3),
        0.5 * (-p*q0 + r*q2 - q*q3),
        0.5 * (-q*q0 - r*q1 + p*q3),
        0.5 * (-r*q0 + q*q1 - p*q2),
    )


@beartype
def quaternion_derivative(
    q: NDArray[np.float64],
    omega: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Compute the inertial-to-body quaternion time derivative.

    dq/dt = 0.5 * Omega(omega) @ q with

        Omega = [[ 0,  p,  q,  r],
                 [-p,  0,  r, -q],
                 [-q, -r,  0,  p],
                 [-r,  q, -p,  0]]

    Args:
        q: Current quaternion [q0, q1, q2, q3]
        omega: Angular velocity in body frame [p, q, r] [rad/s]

    Returns:
        Quaternion derivative dq/dt
    """
    return np.array(_quaternion_derivative(
        float(q[0]), float(q[1]), float(q[2]), float(q[3]),
        float(omega[0]), float(omega[1]), float(omega[2]),
    ))


@beartype
def euler_rotational_dynamics(
    omega: NDArray[np.float64],
    torque: NDArray[np.float64],
    inertia: NDArray[np.float64],
    inertia_inv: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Compute angular acceleration from Euler's equations.

    Args:
        omega: Angular velocity in body frame [rad/s]
        torque: Applied torque in body frame [N*m]
        inertia: 3x3 inertia tensor [kg*m^2]
        inertia_inv: Inverse of ``inertia``

    Returns:
        Angular acceleration [rad/s^2]
    """
    h_dot = torque - np.cross(omega, inertia @ omega)
    return inertia_inv @ h_dot


@beartype
def rigid_body_derivatives(
    state: SpacecraftState,
    properties: SpacecraftProperties,
    inputs: OrbitalDynamicsInputs,
) -> StateDerivative:
    """Compute state derivatives from accumulated body-frame inputs.

    Args:
        state: Current state
        properties: Mass properties
        inputs: Total force and torque in body frame

    Returns:
        State derivatives for integration
    """
    # Body force back to inertial
    force_i = quaternion_to_dcm(state.quaternion).T @ inputs.total_force_b

    return StateDerivative(
        position_dot=state.velocity.copy(),
        velocity_dot=force_i / properties.mass,
        quaternion_dot=quaternion_derivative(state.quaternion, state.angular_velocity),
        angular_velocity_dot=euler_rotational_dynamics(
            state.angular_velocity,
            inputs.total_torque_b,
            properties.inertia,
            properties.inertia_inv,
        ),
    )


# =============================================================================
# Integration
# =============================================================================


@beartype
def rk4_step(
    state: SpacecraftState,
    dt: float,
    derivatives_fn: Callable[[SpacecraftState], NDArray[np.float64]],
) -> SpacecraftState:
    """Perform one classical RK4 step.

    The quaternion is not renormalized.

    Args:
        state: Current state
        dt: Time step [s]
        derivatives_fn: Function computing the flat derivative array from a state

    Returns:
        State at t + dt

    Raises:
        NumericalInstabilityError: If the new state is not finite
    """
    y0 = state.to_array()
    t0 = state.time

    def f(t: float, y: NDArray[np.float64]) -> NDArray[np.float64]:
        return derivatives_fn(SpacecraftState.from_array(y, t))

    k1 = f(t0, y0)
    k2 = f(t0 + dt/2, y0 + dt/2 * k1)
    k3 = f(t0 + dt/2, y0 + dt/2 * k2)
    k4 = f(t0 + dt, y0 + dt * k3)

    y1 = y0 + (dt / 6) * (k1 + 2*k2 + 2*k3 + k4)

    if not np.all(np.isfinite(y1)):
        raise NumericalInstabilityError(f"Non-finite state after step from t={t0:.6f} s: {y1}")

    return SpacecraftState.from_array(y1, t0 + dt)


@beartype
def integrate(
    initial_state: SpacecraftState,
    derivatives_fn: Callable[[SpacecraftState], NDArray[np.float64]],
    t_final: float,
    dt: float = 0.01,
    max_steps: int = 1000000,
) -> list[SpacecraftState]:
    """Integrate equations of motion over time.

    Args:
        initial_state: Initial state
        derivatives_fn: Function computing the flat derivative array from a state
        t_final: Final simulation time [s]
        dt: Time step [s]
        max_steps: Maximum number of steps

    Returns:
        List of states at each time step
    """
    states = [initial_state]
    state = initial_state.copy()

    n_steps = min(int(round((t_final - initial_state.time) / dt)), max_steps)

    for _ in range(n_steps):
        state = rk4_step(state, dt, derivatives_fn)
        states.append(state)

    return states


# =============================================================================
# Complete Dynamics Model
# =============================================================================


@beartype
class RigidBodyDynamics:
    """Sums every contributor's force and torque and integrates the state.

    Example:
        >>> dynamics = RigidBodyDynamics(SpacecraftProperties(1000.0, np.diag([400.0, 400.0, 300.0])))
        >>> new_state = dynamics.step(state, 0.01, [universe, propulsion, rcs])
    """

    def __init__(self, properties: SpacecraftProperties) -> None:
        self.properties = properties
        self.inputs = OrbitalDynamicsInputs()

    def accumulate(
        self,
        state: SpacecraftState,
        contributors: Sequence[DynamicsContributor],
    ) -> OrbitalDynamicsInputs:
        """Zero the accumulator and collect every contribution at ``state``."""
        self.inputs.reset()
        for contributor in contributors:
            contributor.update_dynamics(state, self.properties, self.inputs)
        return self.inputs

    def derivatives(
        self,
        state: SpacecraftState,
        contributors: Sequence[DynamicsContributor],
    ) -> StateDerivative:
        """Compute state derivatives with freshly accumulated inputs."""
        inputs = self.accumulate(state, contributors)
        return rigid_body_derivatives(state, self.properties, inputs)

    def step(
        self,
        state: SpacecraftState,
        dt: float,
        contributors: Sequence[DynamicsContributor],
    ) -> SpacecraftState:
        """Advance ``state`` by ``dt`` with RK4."""
        return rk4_step(
            state,
            dt,
            lambda s: self.derivatives(s, contributors).to_array(),
        )

    def specific_force_b(
        self,
        state: SpacecraftState,
        contributors: Sequence[DynamicsContributor],
    ) -> NDArray[np.float64]:
        """Non-gravitational acceleration in body frame [m/s^2].

        Only the given contributors are summed, so callers pass actuators and
        leave out the gravity field.
        """
        inputs = self.accumulate(state, contributors)
        return inputs.total_force_b / self.properties.mass
