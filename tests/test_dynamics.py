"""Unit tests for dynamics module - state, quaternions, rigid body dynamics.

These tests verify the fundamental mechanics of the 13-state simulation.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from surveyor.dynamics.rigid_body import (
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
    SpacecraftState,
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
from surveyor.environment import CelestialBody, StaticEphemeris, Universe
from surveyor.exceptions import ConfigurationError, NumericalInstabilityError

MU_EARTH = 3.986004418e14


def make_state(
    position=(0.0, 0.0, 0.0),
    velocity=(0.0, 0.0, 0.0),
    quaternion=(1.0, 0.0, 0.0, 0.0),
    omega=(0.0, 0.0, 0.0),
) -> SpacecraftState:
    return SpacecraftState(
        position=np.array(position, dtype=np.float64),
        velocity=np.array(velocity, dtype=np.float64),
        quaternion=np.array(quaternion, dtype=np.float64),
        angular_velocity=np.array(omega, dtype=np.float64),
    )


# =============================================================================
# Quaternion Tests
# =============================================================================

class TestQuaternionOperations:
    """Test quaternion math operations."""

    def test_normalize_unit_length(self):
        """Normalized quaternion should have unit length."""
        q = normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0]))
        assert_allclose(np.linalg.norm(q), 1.0, atol=1e-12)

    def test_normalize_zero_gives_identity(self):
        q = normalize_quaternion(np.zeros(4))
        assert_allclose(q, [1.0, 0.0, 0.0, 0.0])

    def test_quaternion_multiply_identity(self):
        """Multiplying by identity should give same quaternion."""
        identity = np.array([1.0, 0.0, 0.0, 0.0])
        q = normalize_quaternion(np.array([0.7, 0.1, -0.3, 0.2]))

        assert_allclose(quaternion_multiply(identity, q), q, atol=1e-12)
        assert_allclose(quaternion_multiply(q, identity), q, atol=1e-12)

    def test_quaternion_conjugate_inverse(self):
        """Quaternion times its conjugate should give identity."""
        q = normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0]))
        result = quaternion_multiply(q, quaternion_conjugate(q))
        assert_allclose(result, [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_dcm_orthonormal(self):
        """DCM should be orthonormal (R @ R.T = I, det(R) = 1)."""
        dcm = quaternion_to_dcm(normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0])))
        assert_allclose(dcm @ dcm.T, np.eye(3), atol=1e-12)
        assert_allclose(np.linalg.det(dcm), 1.0, atol=1e-12)

    def test_axis_angle_transform(self):
        """A 90 deg rotation about Z maps X coordinates onto Y."""
        q = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2)
        assert_allclose(transform_vector(q, np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0], atol=1e-12)

    def test_transform_roundtrip(self):
        q = normalize_quaternion(np.array([0.9, -0.2, 0.3, 0.1]))
        v = np.array([1.0, -2.0, 0.5])
        assert_allclose(inverse_transform_vector(q, transform_vector(q, v)), v, atol=1e-12)

    def test_composition_order(self):
        """q_a2c = q_b2c * q_a2b composes frame transformations."""
        q_a2b = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), 0.4)
        q_b2c = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), -0.7)
        v_a = np.array([0.3, 0.5, -1.0])

        direct = transform_vector(quaternion_multiply(q_b2c, q_a2b), v_a)
        chained = transform_vector(q_b2c, transform_vector(q_a2b, v_a))
        assert_allclose(direct, chained, atol=1e-12)

    def test_euler_identity(self):
        """Zero Euler angles should give identity quaternion."""
        assert_allclose(euler_to_quaternion(0.0, 0.0, 0.0), [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_euler_roll_only(self):
        q = euler_to_quaternion(0.1, 0.0, 0.0)
        assert_allclose(q, [np.cos(0.05), np.sin(0.05), 0.0, 0.0], atol=1e-12)


class TestAttitudeError:
    """Rotation vector between two attitudes."""

    def test_zero_error(self):
        q = normalize_quaternion(np.array([0.5, 0.5, -0.5, 0.5]))
        assert_allclose(attitude_error(q, q), np.zeros(3), atol=1e-12)

    def test_single_axis_error(self):
        q_current = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), 0.2)
        q_target = np.array([1.0, 0.0, 0.0, 0.0])
        assert_allclose(attitude_error(q_current, q_target), [0.0, 0.0, 0.2], atol=1e-12)

    def test_sign_ambiguity(self):
        """q and -q are the same attitude."""
        q_current = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), -0.3)
        q_target = np.array([1.0, 0.0, 0.0, 0.0])
        assert_allclose(
            attitude_error(-q_current, q_target),
            attitude_error(q_current, q_target),
            atol=1e-12,
        )

    def test_rate_along_error_reduces_it(self):
        """Rotating the body along the error vector moves it toward the target."""
        q_current = quaternion_from_axis_angle(np.array([1.0, 2.0, -1.0]), 0.5)
        q_target = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), 0.1)
        error = attitude_error(q_current, q_target)

        q_dot = quaternion_derivative(q_current, 0.1 * error / np.linalg.norm(error))
        q_next = normalize_quaternion(q_current + 0.1 * q_dot)
        assert np.linalg.norm(attitude_error(q_next, q_target)) < np.linalg.norm(error)


# =============================================================================
# State Tests
# =============================================================================

class TestSpacecraftState:
    """Test state container."""

    def test_array_roundtrip(self):
        state = make_state((1.0, 2.0, 3.0), (4.0, 5.0, 6.0), (1.0, 0.0, 0.0, 0.0), (0.1, 0.2, 0.3))
        restored = SpacecraftState.from_array(state.to_array(), time=2.5)

        assert_allclose(restored.to_array(), state.to_array())
        assert restored.time == 2.5

    def test_shape_validation(self):
        with pytest.raises(ValueError, match="Position"):
            SpacecraftState(
                position=np.zeros(2),
                velocity=np.zeros(3),
                quaternion=np.array([1.0, 0.0, 0.0, 0.0]),
                angular_velocity=np.zeros(3),
            )

    def test_quaternion_not_renormalized(self):
        state = make_state(quaternion=(2.0, 0.0, 0.0, 0.0))
        assert state.quaternion_norm == pytest.approx(2.0)

    def test_copy_is_independent(self):
        state = make_state(position=(1.0, 0.0, 0.0))
        clone = state.copy()
        clone.position[0] = 5.0
        assert state.position[0] == 1.0


# =============================================================================
# Rigid Body Dynamics Tests
# =============================================================================

class TestSpacecraftProperties:
    """Mass properties validation."""

    def test_inverse_precomputed(self):
        props = SpacecraftProperties(mass=1000.0, inertia=np.diag([400.0, 400.0, 300.0]))
        assert_allclose(props.inertia @ props.inertia_inv, np.eye(3), atol=1e-12)

    def test_rejects_nonpositive_mass(self):
        with pytest.raises(ConfigurationError, match="Mass"):
            SpacecraftProperties(mass=0.0, inertia=np.eye(3))

    def test_rejects_asymmetric_inertia(self):
        inertia = np.array([[1.0, 0.5, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
        with pytest.raises(ConfigurationError, match="symmetric"):
            SpacecraftProperties(mass=1.0, inertia=inertia)

    def test_rejects_singular_inertia(self):
        with pytest.raises(ConfigurationError, match="positive definite"):
            SpacecraftProperties(mass=1.0, inertia=np.diag([1.0, 1.0, 0.0]))


class TestRigidBodyDynamics:
    """Test rigid body equations of motion."""

    def test_body_force_rotated_to_inertial(self):
        """A body-X force on a body yawed 90 deg accelerates along inertial -Y."""
        props = SpacecraftProperties(mass=10.0, inertia=np.eye(3))
        q = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2)
        state = make_state(quaternion=tuple(q))
        inputs = OrbitalDynamicsInputs(total_force_b=np.array([20.0, 0.0, 0.0]))

        deriv = rigid_body_derivatives(state, props, inputs)
        assert_allclose(deriv.velocity_dot, [0.0, -2.0, 0.0], atol=1e-12)

    def test_pure_torque_angular_acceleration(self):
        props = SpacecraftProperties(mass=1000.0, inertia=np.diag([100.0, 200.0, 100.0]))
        inputs = OrbitalDynamicsInputs(total_torque_b=np.array([0.0, 1000.0, 0.0]))

        deriv = rigid_body_derivatives(make_state(), props, inputs)
        assert_allclose(deriv.angular_velocity_dot, [0.0, 5.0, 0.0], atol=1e-12)

    def test_principal_axis_spin_has_no_coupling(self):
        inertia = np.diag([100.0, 200.0, 300.0])
        alpha = euler_rotational_dynamics(
            np.array([10.0, 0.0, 0.0]), np.zeros(3), inertia, np.linalg.inv(inertia),
        )
        assert_allclose(alpha, np.zeros(3), atol=1e-12)

    def test_quaternion_derivative_identity(self):
        """Inertial-to-body kinematics: q_dot = -0.5 * [0, omega] * q."""
        q_dot = quaternion_derivative(np.array([1.0, 0.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]))
        assert_allclose(q_dot, [0.0, 0.0, 0.0, -0.5], atol=1e-12)

    def test_accumulator_add_and_reset(self):
        inputs = OrbitalDynamicsInputs()
        inputs.add(np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
        inputs.add(force_b=np.array([1.0, 0.0, 0.0]))
        assert_allclose(inputs.total_force_b, [2.0, 0.0, 0.0])
        assert_allclose(inputs.total_torque_b, [0.0, 1.0, 0.0])

        inputs.reset()
        assert_allclose(inputs.total_force_b, np.zeros(3))
        assert_allclose(inputs.total_torque_b, np.zeros(3))


class _TimeRecorder:
    """Contributor that records the state time of every evaluation."""

    def __init__(self):
        self.times = []

    def update_dynamics(self, state, properties, inputs):
        self.times.append(state.time)


class TestRK4Integration:
    """Test RK4 integration step."""

    def test_constant_acceleration_exact(self):
        """RK4 integrates a constant acceleration exactly."""
        accel = np.array([10.0, 0.0, 0.0])

        def derivatives_fn(s):
            return np.concatenate([s.velocity, accel, np.zeros(4), np.zeros(3)])

        new_state = rk4_step(make_state(), 1.0, derivatives_fn)
        assert_allclose(new_state.position, [5.0, 0.0, 0.0], atol=1e-12)
        assert_allclose(new_state.velocity, [10.0, 0.0, 0.0], atol=1e-12)
        assert new_state.time == pytest.approx(1.0)

    def test_non_finite_is_fatal(self):
        def derivatives_fn(s):
            return np.full(13, np.inf)

        with pytest.raises(NumericalInstabilityError):
            rk4_step(make_state(), 0.1, derivatives_fn)

    def test_contributors_evaluated_at_each_stage(self):
        """Forces are re-evaluated at t, t+dt/2 (twice) and t+dt."""
        dynamics = RigidBodyDynamics(SpacecraftProperties(mass=1.0, inertia=np.eye(3)))
        recorder = _TimeRecorder()

        dynamics.step(make_state(), 0.2, [recorder])
        assert_allclose(recorder.times, [0.0, 0.1, 0.1, 0.2])

    def test_integrate_returns_history(self):
        def derivatives_fn(s):
            return np.concatenate([s.velocity, np.zeros(3), np.zeros(4), np.zeros(3)])

        states = integrate(make_state(velocity=(1.0, 0.0, 0.0)), derivatives_fn, t_final=1.0, dt=0.1)
        assert len(states) == 11
        assert_allclose(states[-1].position, [1.0, 0.0, 0.0], atol=1e-12)


class TestConservation:
    """Physical invariants of the integrator."""

    def test_torque_free_angular_momentum(self):
        """Inertial angular momentum is conserved without external torque."""
        inertia = np.diag([400.0, 300.0, 200.0])
        dynamics = RigidBodyDynamics(SpacecraftProperties(mass=1000.0, inertia=inertia))
        state = make_state(omega=(0.1, 0.05, -0.2))
        h0 = state.angular_momentum_inertial(inertia)

        for _ in range(2000):
            state = dynamics.step(state, 0.01, [])

        assert_allclose(state.angular_momentum_inertial(inertia), h0, rtol=1e-6, atol=1e-9)
        # Energy too
        e0 = 0.5 * np.array([0.1, 0.05, -0.2]) @ inertia @ np.array([0.1, 0.05, -0.2])
        e1 = 0.5 * state.angular_velocity @ inertia @ state.angular_velocity
        assert e1 == pytest.approx(e0, rel=1e-6)

    def test_circular_orbit_one_period(self):
        """A circular orbit returns to its start with unit quaternion norm."""
        r0 = 7.0e6
        v0 = np.sqrt(MU_EARTH / r0)
        period = 2 * np.pi * np.sqrt(r0**3 / MU_EARTH)
        n_steps = 1200
        dt = float(period / n_steps)

        universe = Universe([CelestialBody("Earth", MU_EARTH, 6.371e6, StaticEphemeris())])
        dynamics = RigidBodyDynamics(SpacecraftProperties(mass=500.0, inertia=np.diag([50.0, 60.0, 70.0])))
        state = make_state(position=(r0, 0.0, 0.0), velocity=(0.0, v0, 0.0), omega=(0.005, 0.01, -0.002))

        max_norm_error = 0.0
        for _ in range(n_steps):
            state = dynamics.step(state, dt, [universe])
            max_norm_error = max(max_norm_error, abs(state.quaternion_norm - 1.0))

        assert max_norm_error < 1e-6
        assert_allclose(state.position, [r0, 0.0, 0.0], atol=10.0)
        assert_allclose(state.velocity, [0.0, v0, 0.0], atol=0.01)
