"""Tests for the scheduler, command channel and simulation loop."""

import copy
import logging

import numpy as np
import polars as pl
import pytest
from numpy.testing import assert_allclose

from flight import FlightSoftware, SetBaseThrust, SetGuidanceMode
from flight.guidance import GuidanceMode
from flight.guidance.modes import MANUAL_ROLL
from surveyor.config import R_MOON, SurveyorConfig, default_config_dict
from surveyor.dynamics.state import attitude_error, euler_to_quaternion
from surveyor.exceptions import ConfigurationError
from surveyor.simulation import (
    CommandChannel,
    MultiRateScheduler,
    Pause,
    Reset,
    Resume,
    SetSimulationRate,
    Simulation,
    SimulationStatus,
)


def make_config(**overrides) -> SurveyorConfig:
    """Default lander with selected sections patched."""
    data = copy.deepcopy(default_config_dict())
    for section, values in overrides.items():
        data[section].update(values)
    return SurveyorConfig.from_dict(data)


def make_sim(config: SurveyorConfig | None = None) -> tuple[Simulation, FlightSoftware]:
    config = config or make_config()
    fsw = FlightSoftware.from_config(config)
    return Simulation(config, fsw), fsw


# =============================================================================
# Scheduler and Commands
# =============================================================================

class TestMultiRateScheduler:
    """Integer-ratio GNC scheduling."""

    def test_fires_every_nth_tick(self):
        scheduler = MultiRateScheduler(sim_rate_hz=100.0, gnc_rate_hz=10.0)
        fired = [scheduler.advance() for _ in range(30)]
        assert [i for i, f in enumerate(fired) if f] == [9, 19, 29]
        assert scheduler.gnc_count == 3

    def test_periods(self):
        scheduler = MultiRateScheduler(sim_rate_hz=100.0, gnc_rate_hz=10.0)
        assert scheduler.dt == pytest.approx(0.01)
        assert scheduler.gnc_dt == pytest.approx(0.1)

    def test_non_integer_ratio(self):
        with pytest.raises(ConfigurationError, match="integer multiple"):
            MultiRateScheduler(sim_rate_hz=100.0, gnc_rate_hz=30.0)

    def test_gnc_faster_than_physics(self):
        with pytest.raises(ConfigurationError):
            MultiRateScheduler(sim_rate_hz=10.0, gnc_rate_hz=100.0)

    def test_reset(self):
        scheduler = MultiRateScheduler(sim_rate_hz=100.0, gnc_rate_hz=50.0)
        scheduler.advance()
        scheduler.reset()
        assert scheduler.tick_count == 0
        assert not scheduler.advance()


class TestCommandChannel:
    """Latest command of each kind wins."""

    def test_latest_per_kind(self):
        channel = CommandChannel()
        channel.send(SetSimulationRate(2.0))
        channel.send(Pause())
        channel.send(SetSimulationRate(4.0))
        assert channel.drain() == [Pause(), SetSimulationRate(4.0)]
        assert len(channel) == 0

    def test_pause_and_resume_share_kind(self):
        channel = CommandChannel()
        channel.send(Pause())
        channel.send(Resume())
        assert channel.drain() == [Resume()]

    def test_rejects_commands_without_kind(self):
        with pytest.raises(TypeError):
            CommandChannel().send("pause")


# =============================================================================
# Simulation Loop
# =============================================================================

class TestSimulationLoop:
    """Tick-driven physics plus GNC."""

    def test_tick_advances_time(self):
        sim, _ = make_sim()
        assert sim.tick()
        assert sim.time == pytest.approx(0.01)

    def test_gnc_runs_at_its_rate(self):
        sim, fsw = make_sim()
        for _ in range(25):
            sim.tick()
        assert fsw.telemetry()["gnc_ticks"] == 2
        assert fsw.clock.time == pytest.approx(0.2)

    def test_commands_held_between_gnc_ticks(self):
        sim, _ = make_sim()
        for _ in range(9):
            sim.tick()
        assert sim.snapshot().engine_thrusts is None

        sim.tick()
        snapshot = sim.snapshot()
        assert snapshot.rcs_duty_cycles is None
        assert snapshot.tvc_angles.shape == (1,)
        assert np.mean(snapshot.engine_thrusts) == pytest.approx(295.0)
        assert snapshot.guidance_mode == "Detumble"

    def test_base_thrust_command(self):
        sim, fsw = make_sim()
        sim.send(SetBaseThrust(300.0))
        for _ in range(10):
            sim.tick()
        assert fsw.base_thrust == 300.0
        assert np.mean(sim.held_commands.engine_thrusts) == pytest.approx(300.0)

    def test_rejected_flight_command_skipped(self, caplog):
        """A command the flight software refuses does not drop the rest of the drain."""
        sim, _ = make_sim()

        class Beep:
            kind = "beep"

        sim.send(Beep())
        sim.send(Pause())
        with caplog.at_level(logging.ERROR):
            assert not sim.tick()
        assert sim.status == SimulationStatus.PAUSED
        assert "rejected" in caplog.text
        assert "Unknown flight software command" in caplog.text

    def test_invalid_commands_never_queued(self):
        sim, _ = make_sim()
        with pytest.raises(ValueError):
            sim.send(SetGuidanceMode("Pointing"))
        sim.send(Pause())
        assert len(sim.commands) == 1
        assert not sim.tick()
        assert sim.status == SimulationStatus.PAUSED

    def test_non_integer_rates_rejected(self):
        with pytest.raises(ConfigurationError):
            make_sim(make_config(gnc={"update_rate_hz": 30.0}))

    def test_unknown_collision_body_rejected(self):
        config = make_config(simulation={"stopping_conditions": [{"type": "CollisionWith", "body": "Earth"}]})
        with pytest.raises(ConfigurationError, match="Unknown celestial body"):
            make_sim(config)


class TestRunControl:
    """Pause, resume, reset and rate commands."""

    def test_pause_and_resume(self):
        sim, _ = make_sim()
        sim.tick()
        sim.send(Pause())
        assert not sim.tick()
        assert sim.status == SimulationStatus.PAUSED
        assert sim.time == pytest.approx(0.01)

        sim.send(Resume())
        assert sim.tick()
        assert sim.time == pytest.approx(0.02)

    def test_pause_keeps_held_commands(self):
        sim, _ = make_sim()
        for _ in range(sim.scheduler.ticks_per_gnc):
            sim.tick()
        held = sim.held_commands
        thrusts = sim.spacecraft.propulsion.thrusts()
        gimbal = sim.spacecraft.propulsion.gimbal_angles()
        duty = sim.spacecraft.rcs.duty_cycles()

        sim.send(Pause())
        for _ in range(5):
            assert not sim.tick()
        assert sim.held_commands is held
        assert_allclose(sim.spacecraft.propulsion.thrusts(), thrusts)
        assert_allclose(sim.spacecraft.propulsion.gimbal_angles(), gimbal)
        assert_allclose(sim.spacecraft.rcs.duty_cycles(), duty)

        sim.send(Resume())
        assert sim.tick()
        assert sim.held_commands is held
        assert_allclose(sim.spacecraft.propulsion.thrusts(), thrusts)
        assert_allclose(sim.spacecraft.rcs.duty_cycles(), duty)
        assert_allclose(sim.held_commands.engine_thrusts, thrusts)

    def test_pause_then_resume_in_one_tick(self):
        sim, _ = make_sim()
        sim.send(Pause())
        sim.send(Resume())
        assert sim.tick()
        assert sim.status == SimulationStatus.RUNNING

    def test_reset(self):
        sim, fsw = make_sim()
        sim.send(SetGuidanceMode("Idle"))
        for _ in range(20):
            sim.tick()
        sim.send(Pause())
        sim.tick()

        sim.send(Reset())
        assert sim.tick()
        assert sim.status == SimulationStatus.RUNNING
        assert sim.time == pytest.approx(0.01)
        assert fsw.guidance.mode == GuidanceMode.DETUMBLE
        assert fsw.telemetry()["gnc_ticks"] == 0
        assert len(sim.result().times) == 2
        assert_allclose(sim.result().states[0, 0:3], sim.config.spacecraft.initial_state.position)

    def test_rate_clamped(self, caplog):
        sim, _ = make_sim()
        sim.send(SetSimulationRate(1000.0))
        with caplog.at_level(logging.WARNING):
            sim.tick()
        assert sim.time_acceleration == 100.0
        assert "clamped" in caplog.text

        sim.send(SetSimulationRate(0.001))
        sim.tick()
        assert sim.time_acceleration == 0.1

    @pytest.mark.parametrize("multiplier", [float("nan"), float("inf")])
    def test_non_finite_rate_rejected(self, multiplier):
        sim, _ = make_sim()
        with pytest.raises(ValueError, match="finite"):
            sim.send(SetSimulationRate(multiplier))
        assert len(sim.commands) == 0
        assert sim.advance(0.1) == 10

    def test_advance_uses_time_acceleration(self):
        sim, _ = make_sim()
        assert sim.advance(0.1) == 10

        sim.send(SetSimulationRate(2.0))
        sim.tick()
        assert sim.advance(0.05) == 10
        assert sim.time == pytest.approx(0.21)

    def test_advance_carries_remainder(self):
        sim, _ = make_sim()
        assert sim.advance(0.015) == 1
        assert sim.advance(0.005) == 1

    def test_advance_rejects_negative(self):
        sim, _ = make_sim()
        with pytest.raises(ValueError):
            sim.advance(-1.0)


class TestClosedLoop:
    """The built-in lander flies its attitude on the verniers."""

    def test_detumble_nulls_body_rates(self):
        sim, _ = make_sim()
        start = np.linalg.norm(sim.state.angular_velocity)
        for _ in range(1500):
            sim.tick()
        assert np.linalg.norm(sim.state.angular_velocity) < 0.1 * start

    def test_manual_holds_roll_offset(self):
        sim, _ = make_sim()
        sim.send(SetGuidanceMode("Manual"))
        for _ in range(3000):
            sim.tick()

        target = euler_to_quaternion(MANUAL_ROLL, 0.0, 0.0)
        assert np.linalg.norm(attitude_error(sim.state.quaternion, target)) < 0.01
        assert np.linalg.norm(sim.state.angular_velocity) < 0.01


class TestStoppingConditions:
    """MaxDuration and CollisionWith."""

    def test_max_duration(self):
        sim, _ = make_sim(make_config(simulation={"stopping_conditions": [{"type": "MaxDuration", "seconds": 0.5}]}))
        result = sim.run()

        assert result.stop_reason == "MaxDuration(0.5 s)"
        assert result.times[-1] == pytest.approx(0.5)
        assert result.states.shape == (51, 13)
        assert not sim.tick()

    def test_collision(self):
        config = make_config(simulation={"stopping_conditions": [
            {"type": "MaxDuration", "seconds": 10.0},
            {"type": "CollisionWith", "body": "Moon"},
        ]})
        config.spacecraft.initial_state.position = np.array([R_MOON + 10.0, 0.0, 0.0])
        config.spacecraft.initial_state.velocity = np.array([-100.0, 0.0, 0.0])
        sim, _ = make_sim(config)
        result = sim.run()

        assert sim.status == SimulationStatus.STOPPED
        assert result.stop_reason == "CollisionWith(Moon)"
        assert result.times[-1] < 0.2

    def test_run_needs_a_bound(self):
        sim, _ = make_sim(make_config(simulation={"stopping_conditions": [{"type": "CollisionWith", "body": "Moon"}]}))
        with pytest.raises(ConfigurationError, match="MaxDuration"):
            sim.run()
        assert len(sim.run(max_ticks=5).times) == 6


class TestSimulationResult:
    """State history export."""

    def test_dataframe(self):
        sim, _ = make_sim()
        df = sim.run(max_ticks=10).to_dataframe()

        assert isinstance(df, pl.DataFrame)
        assert df.height == 11
        for column in ("time", "epoch", "x", "vy", "q0", "wz", "radius", "q_norm"):
            assert column in df.columns
        assert_allclose(df["q_norm"].to_numpy(), 1.0, atol=1e-9)

    def test_orbit_radius_held(self):
        """A 100 km circular orbit keeps its radius over a few seconds of coasting."""
        sim, _ = make_sim(make_config(gnc={"base_thrust": 0.0}))
        result = sim.run(max_ticks=300)
        radius = np.linalg.norm(result.position, axis=1)
        assert_allclose(radius, R_MOON + 100e3, rtol=1e-6)

    def test_parquet(self, tmp_path):
        sim, _ = make_sim()
        path = sim.run(max_ticks=5).write_parquet(tmp_path / "out" / "run.parquet")
        assert path.exists()
        assert pl.read_parquet(path).height == 6
