"""Tests for guidance modes, attitude targets and trajectory phases."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from flight import FlightSoftware, SetGuidanceMode
from flight.guidance import (
    AttitudeTarget,
    GuidanceMode,
    GuidanceModeStateMachine,
    TargetKind,
    TrajectoryPhase,
    TrajectoryPhaseTracker,
)
from flight.guidance.modes import MANUAL_ROLL
from surveyor.config import default_config
from surveyor.dynamics.state import euler_to_quaternion
from surveyor.simulation import Simulation

X = np.array([1.0, 0.0, 0.0])
Z = np.array([0.0, 0.0, 1.0])


# =============================================================================
# Attitude Targets
# =============================================================================

class TestAttitudeTarget:
    """Tagged target constructors."""

    def test_attitude_normalised(self):
        target = AttitudeTarget.attitude(np.array([2.0, 0.0, 0.0, 0.0]))
        assert target.kind == TargetKind.ATTITUDE
        assert_allclose(target.q_i2b, [1.0, 0.0, 0.0, 0.0])

    def test_align_normalised(self):
        target = AttitudeTarget.align(np.array([0.0, 0.0, 3.0]), np.array([2.0, 0.0, 0.0]))
        assert_allclose(target.align_with_b, Z)
        assert_allclose(target.align_to_i, X)

    def test_align_rejects_zero_vector(self):
        with pytest.raises(ValueError, match="non-zero"):
            AttitudeTarget.align(np.zeros(3), X)

    def test_equality_compares_arrays(self):
        assert AttitudeTarget.body_rate(np.zeros(3)) == AttitudeTarget.body_rate(np.zeros(3))
        assert AttitudeTarget.body_rate(np.zeros(3)) != AttitudeTarget.body_rate(np.ones(3))
        assert AttitudeTarget.none() != AttitudeTarget.body_rate(np.zeros(3))


# =============================================================================
# Mode State Machine
# =============================================================================

class TestGuidanceModeStateMachine:
    """Mode to target mapping and mode transitions."""

    def test_idle_has_no_target(self):
        assert GuidanceModeStateMachine().update().kind == TargetKind.NONE

    def test_manual_roll_offset(self):
        machine = GuidanceModeStateMachine(GuidanceMode.MANUAL)
        target = machine.update()
        assert target.kind == TargetKind.ATTITUDE
        assert_allclose(target.q_i2b, euler_to_quaternion(MANUAL_ROLL, 0.0, 0.0))

    def test_detumble_targets_zero_rate(self):
        target = GuidanceModeStateMachine(GuidanceMode.DETUMBLE).update()
        assert target.kind == TargetKind.BODY_RATE
        assert_allclose(target.omega_b, np.zeros(3))

    def test_pointing_returns_commanded_target(self):
        machine = GuidanceModeStateMachine()
        target = AttitudeTarget.align(Z, X)
        assert machine.set_mode(GuidanceMode.POINTING, target)
        assert machine.update() == target

    def test_pointing_requires_target(self):
        with pytest.raises(ValueError, match="requires an attitude target"):
            GuidanceModeStateMachine().set_mode("Pointing")
        with pytest.raises(ValueError):
            GuidanceModeStateMachine(GuidanceMode.POINTING)

    def test_unchanged_mode_returns_false(self):
        machine = GuidanceModeStateMachine(GuidanceMode.DETUMBLE)
        assert not machine.set_mode(GuidanceMode.DETUMBLE)
        assert machine.set_mode("Idle")
        assert machine.mode == GuidanceMode.IDLE

    def test_mode_by_name(self):
        machine = GuidanceModeStateMachine()
        machine.set_mode("Manual")
        assert machine.mode == GuidanceMode.MANUAL

    def test_unknown_mode_name(self):
        with pytest.raises(ValueError):
            GuidanceModeStateMachine().set_mode("Hover")

    def test_leaving_pointing_drops_target(self):
        machine = GuidanceModeStateMachine()
        machine.set_mode(GuidanceMode.POINTING, AttitudeTarget.align(Z, X))
        machine.set_mode(GuidanceMode.DETUMBLE, AttitudeTarget.align(Z, X))
        assert machine.target is None

    def test_reset_restores_initial_mode(self):
        machine = GuidanceModeStateMachine(GuidanceMode.DETUMBLE)
        machine.set_mode("Manual")
        machine.reset()
        assert machine.mode == GuidanceMode.DETUMBLE


class TestTrajectoryPhaseTracker:
    """Forward-only descent phase."""

    def test_starts_before_retro_burn(self):
        assert TrajectoryPhaseTracker().phase == TrajectoryPhase.BEFORE_RETRO_BURN

    def test_advance_forward(self):
        tracker = TrajectoryPhaseTracker()
        tracker.advance(TrajectoryPhase.DESCENT_CONTOUR)
        tracker.advance(TrajectoryPhase.LANDED)
        assert tracker.phase == TrajectoryPhase.LANDED

    def test_cannot_go_back(self):
        tracker = TrajectoryPhaseTracker()
        tracker.advance(TrajectoryPhase.TERMINAL_DESCENT)
        with pytest.raises(ValueError):
            tracker.advance(TrajectoryPhase.DESCENT_CONTOUR)

    def test_reset(self):
        tracker = TrajectoryPhaseTracker()
        tracker.advance(TrajectoryPhase.LANDED)
        tracker.reset()
        assert tracker.phase == TrajectoryPhase.BEFORE_RETRO_BURN


# =============================================================================
# Mode Commands Through the Simulation
# =============================================================================

class TestGuidanceCommands:
    """Mode commands travel through the command channel."""

    def make_sim(self) -> tuple[Simulation, FlightSoftware]:
        config = default_config()
        fsw = FlightSoftware.from_config(config)
        return Simulation(config, fsw), fsw

    def test_mode_applied_on_next_tick(self):
        sim, fsw = self.make_sim()
        assert fsw.guidance.mode == GuidanceMode.DETUMBLE

        sim.send(SetGuidanceMode("Idle"))
        assert fsw.guidance.mode == GuidanceMode.DETUMBLE
        sim.tick()
        assert fsw.guidance.mode == GuidanceMode.IDLE

    def test_idle_then_manual_seen_at_gnc_tick(self):
        sim, fsw = self.make_sim()
        ticks_per_gnc = sim.scheduler.ticks_per_gnc

        sim.send(SetGuidanceMode("Idle"))
        for _ in range(ticks_per_gnc):
            sim.tick()
        assert fsw.telemetry()["guidance_mode"] == "Idle"
        assert_allclose(fsw.torque_request, np.zeros(3))

        sim.send(SetGuidanceMode("Manual"))
        for _ in range(ticks_per_gnc):
            sim.tick()
        telemetry = fsw.telemetry()
        assert telemetry["guidance_mode"] == "Manual"
        assert telemetry["gnc_ticks"] == 2
        assert np.linalg.norm(telemetry["torque_request"]) > 0.0
        assert sim.snapshot().guidance_mode == "Manual"

    def test_latest_mode_command_wins(self):
        sim, fsw = self.make_sim()
        sim.send(SetGuidanceMode("Manual"))
        sim.send(SetGuidanceMode("Idle"))
        sim.tick()
        assert fsw.guidance.mode == GuidanceMode.IDLE
