"""Tick-driven lander simulation.

Couples the truth plant (universe + spacecraft) with a flight computer.
Each call to :meth:`Simulation.tick`:

1. Drains the command channel (newest command of each kind wins)
2. Returns immediately while paused or stopped
3. Refreshes celestial body ephemerides for the current epoch
4. Runs continuous subsystem updates (servo slewing)
5. Integrates the truth state over one physics step with RK4
6. Every N-th tick: snapshots the truth state, samples sensors, runs the
   flight computer and hands its commands to the actuators, which hold them
   until the next GNC tick
7. Evaluates stopping conditions

Example:
    >>> from surveyor.config import default_config
    >>> from surveyor.simulation import Simulation
    >>> from flight import FlightSoftware
    >>>
    >>> config = default_config()
    >>> sim = Simulation(config, FlightSoftware.from_config(config))
    >>> result = sim.run()
    >>> df = result.to_dataframe()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from pathlib import Path
from typing import Any, NamedTuple

import numpy as np
import polars as pl
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import CollisionWith, MaxDuration, SurveyorConfig
from surveyor.dynamics.state import SpacecraftState
from surveyor.environment.gravity import Universe
from surveyor.exceptions import ConfigurationError
from surveyor.interfaces import ActuatorCommands, FlightComputer, SensorPacket
from surveyor.simulation.commands import (
    SIMULATION_COMMAND_KINDS,
    CommandChannel,
    Pause,
    Reset,
    Resume,
    SetSimulationRate,
)
from surveyor.simulation.scheduler import MultiRateScheduler
from surveyor.spacecraft import Spacecraft

logger = logging.getLogger(__name__)

STATE_COLUMNS = [
    "x", "y", "z",
    "vx", "vy", "vz",
    "q0", "q1", "q2", "q3",
    "wx", "wy", "wz",
]


# =============================================================================
# Published Data
# =============================================================================


class SimulationStatus(Enum):
    RUNNING = auto()
    PAUSED = auto()
    STOPPED = auto()


class SimulationSnapshot(NamedTuple):
    """Published simulation state for external consumers (displays, loggers)."""
    time: float                                  # Elapsed time [s]
    epoch: datetime                              # Simulation epoch
    position: NDArray[np.float64]                # Inertial position [m]
    velocity: NDArray[np.float64]                # Inertial velocity [m/s]
    q_i2b: NDArray[np.float64]                   # Attitude quaternion
    omega_b: NDArray[np.float64]                 # Body rates [rad/s]
    status: SimulationStatus
    stop_reason: str | None
    guidance_mode: str | None
    rcs_duty_cycles: NDArray[np.float64] | None  # Held RCS commands
    tvc_angles: NDArray[np.float64] | None       # Held gimbal commands [rad]
    engine_thrusts: NDArray[np.float64] | None   # Held engine commands [N]


@beartype
@dataclass
class SimulationResult:
    """State history of a simulation run.

    Attributes:
        start_epoch: Epoch at time zero
        times: Elapsed time per sample [s], shape (N,)
        states: 13-element state per sample, shape (N, 13)
        stop_reason: Why the run ended, if it did
    """
    start_epoch: datetime
    times: NDArray[np.float64]
    states: NDArray[np.float64]
    stop_reason: str | None = None

    @property
    def position(self) -> NDArray[np.float64]:
        """Position history [m], shape (N, 3)."""
        return self.states[:, 0:3]

    @property
    def velocity(self) -> NDArray[np.float64]:
        """Velocity history [m/s], shape (N, 3)."""
        return self.states[:, 3:6]

    @property
    def quaternion(self) -> NDArray[np.float64]:
        """Attitude history, shape (N, 4)."""
        return self.states[:, 6:10]

    @property
    def angular_velocity(self) -> NDArray[np.float64]:
        """Body rate history [rad/s], shape (N, 3)."""
        return self.states[:, 10:13]

    @property
    def epochs(self) -> list[datetime]:
        return [self.start_epoch + timedelta(seconds=float(t)) for t in self.times]

    def to_dataframe(self) -> pl.DataFrame:
        """Convert to Polars DataFrame."""
        data: dict[str, Any] = {
            "time": self.times,
            "epoch": self.epochs,
        }
        for i, name in enumerate(STATE_COLUMNS):
            data[name] = self.states[:, i]
        data["radius"] = np.linalg.norm(self.position, axis=1)
        data["q_norm"] = np.linalg.norm(self.quaternion, axis=1)
        return pl.DataFrame(data)

    def write_parquet(self, path: str | Path) -> Path:
        """Write the history to a Parquet file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().write_parquet(path)
        return path


# =============================================================================
# Simulation
# =============================================================================


@beartype
class Simulation:
    """Truth plant plus flight computer, advanced tick by tick.

    Args:
        config: Complete configuration document
        flight_computer: Flight software driven at the GNC rate
    """

    def __init__(self, config: SurveyorConfig, flight_computer: FlightComputer) -> None:
        self.config = config
        self.flight_computer = flight_computer
        self.scheduler = MultiRateScheduler(config.simulation.sim_rate_hz, config.gnc.update_rate_hz)
        self.universe = Universe.from_config(config.universe)
        self.spacecraft = Spacecraft.from_config(config.spacecraft)
        self.commands = CommandChannel()

        for condition in config.simulation.stopping_conditions:
            if isinstance(condition, CollisionWith):
                self.universe.body(condition.body)

        self.start_epoch = config.spacecraft.initial_state.epoch
        self.time_acceleration = config.simulation.time_acceleration
        self.status = SimulationStatus.RUNNING
        self.stop_reason: str | None = None
        self.held_commands = ActuatorCommands()

        self._wall_remainder = 0.0
        self._times: list[float] = []
        self._states: list[NDArray[np.float64]] = []

        self.universe.update(self.start_epoch, 0.0)
        self._record(self.spacecraft.state)
        logger.info(
            "Simulation initialized at %s (physics %.1f Hz, GNC every %d ticks)",
            self.start_epoch.isoformat(),
            self.scheduler.sim_rate_hz,
            self.scheduler.ticks_per_gnc,
        )

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SpacecraftState:
        """Current truth state (a copy)."""
        return self.spacecraft.state.copy()

    @property
    def time(self) -> float:
        """Elapsed simulation time [s]."""
        return self.spacecraft.state.time

    @property
    def epoch(self) -> datetime:
        """Current simulation epoch."""
        return self.start_epoch + timedelta(seconds=self.time)

    @property
    def dt(self) -> float:
        return self.scheduler.dt

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def send(self, command: Any) -> None:
        """Queue a command; it is applied at the start of the next tick."""
        self.commands.send(command)

    def _apply_commands(self) -> None:
        for command in self.commands.drain():
            if command.kind not in SIMULATION_COMMAND_KINDS:
                try:
                    self.flight_computer.handle_command(command)
                except ValueError as exc:
                    logger.error("Flight computer rejected %r: %s", command, exc)
            elif isinstance(command, SetSimulationRate):
                self._set_time_acceleration(command.multiplier)
            elif isinstance(command, Pause):
                if self.status == SimulationStatus.RUNNING:
                    self.status = SimulationStatus.PAUSED
                    logger.info("Simulation paused at t=%.3f s", self.time)
            elif isinstance(command, Resume):
                if self.status == SimulationStatus.PAUSED:
                    self.status = SimulationStatus.RUNNING
                    logger.info("Simulation resumed at t=%.3f s", self.time)
            elif isinstance(command, Reset):
                self.reset()
            else:
                raise ValueError(f"Unknown simulation command: {command}")

    def _set_time_acceleration(self, multiplier: float) -> None:
        lo = self.config.simulation.min_time_acceleration
        hi = self.config.simulation.max_time_acceleration
        clamped = float(np.clip(multiplier, lo, hi))
        if clamped != multiplier:
            logger.warning("Time acceleration %.3g clamped to %.3g (range [%.3g, %.3g])", multiplier, clamped, lo, hi)
        self.time_acceleration = clamped

    def reset(self) -> None:
        """Reinitialize truth state, history, scheduler and flight software."""
        self.spacecraft.reset(self.config.spacecraft.initial_state)
        self.scheduler.reset()
        self.flight_computer.reset()
        self.held_commands = ActuatorCommands()
        self.status = SimulationStatus.RUNNING
        self.stop_reason = None
        self._wall_remainder = 0.0
        self._times.clear()
        self._states.clear()
        self.universe.update(self.start_epoch, 0.0)
        self._record(self.spacecraft.state)
        logger.info("Simulation reset to %s", self.start_epoch.isoformat())

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """Run one physics tick.

        Returns:
            True if physics advanced, False while paused or stopped
        """
        self._apply_commands()
        if self.status != SimulationStatus.RUNNING:
            return False

        dt = self.scheduler.dt
        self.universe.update(self.epoch, self.time)
        self.spacecraft.update_continuous(dt)
        state = self.spacecraft.step(dt, self.universe)
        self._record(state)

        if self.scheduler.advance():
            self._run_gnc()

        self._check_stopping_conditions()
        return True

    def _run_gnc(self) -> None:
        epoch = self.epoch
        snapshot = self.spacecraft.snapshot(epoch)
        packet = SensorPacket(time=snapshot.time, epoch=epoch)
        self.spacecraft.update_discrete(snapshot, packet)

        commands = self.flight_computer.step(packet)
        self.spacecraft.handle_commands(commands)

        self.held_commands = ActuatorCommands(
            rcs_duty_cycles=(
                commands.rcs_duty_cycles if commands.rcs_duty_cycles is not None
                else self.held_commands.rcs_duty_cycles
            ),
            tvc_angles=(
                commands.tvc_angles if commands.tvc_angles is not None
                else self.held_commands.tvc_angles
            ),
            engine_thrusts=(
                commands.engine_thrusts if commands.engine_thrusts is not None
                else self.held_commands.engine_thrusts
            ),
        )
        logger.debug("GNC tick %d at t=%.3f s: %s", self.scheduler.gnc_count, snapshot.time, commands)

    def _check_stopping_conditions(self) -> None:
        for condition in self.config.simulation.stopping_conditions:
            if isinstance(condition, MaxDuration):
                if self.time >= condition.seconds - 0.5 * self.dt:
                    self._stop(f"MaxDuration({condition.seconds} s)")
                    return
            elif isinstance(condition, CollisionWith):
                body = self.universe.body(condition.body)
                r_rel = self.spacecraft.state.position - body.position_at(self.time - self.universe.time)
                if np.linalg.norm(r_rel) <= body.radius:
                    self._stop(f"CollisionWith({condition.body})")
                    return
            else:
                raise ValueError(f"Unknown stopping condition: {condition}")

    def _stop(self, reason: str) -> None:
        self.status = SimulationStatus.STOPPED
        self.stop_reason = reason
        logger.info("Simulation stopped at t=%.3f s: %s", self.time, reason)

    def advance(self, wall_dt: float) -> int:
        """Run as many ticks as ``wall_dt`` seconds of wall clock allow.

        Simulated time advances by ``wall_dt * time_acceleration``; the
        fraction of a tick left over carries into the next call.

        Returns:
            Number of physics ticks executed
        """
        if wall_dt < 0:
            raise ValueError(f"wall_dt must be non-negative, got {wall_dt}")

        budget = self._wall_remainder + wall_dt * self.time_acceleration
        n = int(np.floor(budget / self.dt + 1e-9))
        self._wall_remainder = max(budget - n * self.dt, 0.0)

        ticks = 0
        for _ in range(n):
            if not self.tick():
                break
            ticks += 1

        if self.status != SimulationStatus.RUNNING:
            self._wall_remainder = 0.0
        return ticks

    def run(self, max_ticks: int | None = None) -> SimulationResult:
        """Tick until a stopping condition (or ``max_ticks``) is reached."""
        if max_ticks is None and not any(
            isinstance(c, MaxDuration) for c in self.config.simulation.stopping_conditions
        ):
            raise ConfigurationError("run() without max_ticks requires a MaxDuration stopping condition")

        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if not self.tick():
                break
            ticks += 1
        return self.result()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def _record(self, state: SpacecraftState) -> None:
        self._times.append(state.time)
        self._states.append(state.to_array())

    def result(self) -> SimulationResult:
        return SimulationResult(
            start_epoch=self.start_epoch,
            times=np.array(self._times),
            states=np.array(self._states),
            stop_reason=self.stop_reason,
        )

    def snapshot(self) -> SimulationSnapshot:
        state = self.spacecraft.state
        telemetry = self.flight_computer.telemetry()
        return SimulationSnapshot(
            time=state.time,
            epoch=self.epoch,
            position=state.position.copy(),
            velocity=state.velocity.copy(),
            q_i2b=state.quaternion.copy(),
            omega_b=state.angular_velocity.copy(),
            status=self.status,
            stop_reason=self.stop_reason,
            guidance_mode=telemetry.get("guidance_mode"),
            rcs_duty_cycles=self.held_commands.rcs_duty_cycles,
            tvc_angles=self.held_commands.tvc_angles,
            engine_thrusts=self.held_commands.engine_thrusts,
        )
