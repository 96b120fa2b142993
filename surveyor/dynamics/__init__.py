"""Dynamics module for the 13-state lander simulation.

This module provides the equations of motion and state representation
for simulating lander orbit and attitude dynamics.

Example:
    >>> from surveyor.dynamics import RigidBodyDynamics, SpacecraftProperties, SpacecraftState
    >>> import numpy as np
    >>>
    >>> props = SpacecraftProperties(mass=1000.0, inertia=np.diag([400.0, 400.0, 300.0]))
    >>> dynamics = RigidBodyDynamics(props)
    >>> new_state = dynamics.step(state, 0.01, contributors)
"""

from surveyor.dynamics.rigid_body import (
    DynamicsContributor,
    OrbitalDynamicsInputs,
    RigidBodyDynamics,
    SpacecraftProperties,
    euler_rotational_dynamics,
    integrate,
    quaternion_derivative,
    rigid_body_derivatives,
    rk4_step,
)
from surveyor.dynamics.state import (
    SpacecraftDiscreteState,
    SpacecraftState,
    StateDerivative,
    attitude_error,
    euler_to_quaternion,
    inverse_transform_vector,
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_from_axis_angle,
    quaternion_multiply,
    quaternion_to_dcm,
    transform_vector,
)

__all__ = [
    # State
    "SpacecraftState",
    "SpacecraftDiscreteState",
    "StateDerivative",
    # Quaternion utilities
    "quaternion_to_dcm",
    "quaternion_from_axis_angle",
    "euler_to_quaternion",
    "quaternion_multiply",
    "quaternion_conjugate",
    "normalize_quaternion",
    "transform_vector",
    "inverse_transform_vector",
    "attitude_error",
    # Rigid body dynamics
    "SpacecraftProperties",
    "OrbitalDynamicsInputs",
    "DynamicsContributor",
    "RigidBodyDynamics",
    "rigid_body_derivatives",
    "quaternion_derivative",
    "euler_rotational_dynamics",
    # Integration
    "integrate",
    "rk4_step",
]
