"""Data exchanged between the truth simulation and the flight software.

The simulation hands the flight computer a :class:`SensorPacket` at every GNC
tick and receives :class:`ActuatorCommands` back. Commands are held by the
actuators (zero-order hold) until the next GNC tick.

Sensor events carry the id of the physical unit that produced them, which is
the unit's index in configuration order within its subsystem.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray


class IMUInput(NamedTuple):
    """Body rate and specific force in the IMU frame."""
    id: int
    omega_cf: NDArray[np.float64]  # [rad/s]
    accel_cf: NDArray[np.float64]  # [m/s^2]


class StarTrackerInput(NamedTuple):
    """Inertial-to-component attitude reported by a star tracker."""
    id: int
    q_i2cf: NDArray[np.float64]


class StarSensorInput(NamedTuple):
    """Line of sight to the tracked star in the sensor frame."""
    id: int
    star_vec_cf: NDArray[np.float64]
    valid: bool


@dataclass
class SensorPacket:
    """All sensor events produced during one GNC tick.

    Attributes:
        time: Elapsed simulation time [s]
        epoch: Simulation epoch
        imu: IMU events
        star_tracker: Star tracker events
        star_sensor: Star sensor events
    """
    time: float
    epoch: datetime
    imu: list[IMUInput] = field(default_factory=list)
    star_tracker: list[StarTrackerInput] = field(default_factory=list)
    star_sensor: list[StarSensorInput] = field(default_factory=list)


@dataclass
class ActuatorCommands:
    """Actuator commands from one GNC tick.

    A field left as None means "hold the previous command".

    Attributes:
        rcs_duty_cycles: Duty cycle per RCS thruster, in [0, 1]
        tvc_angles: Gimbal angle per gimbaled engine, in engine order [rad]
        engine_thrusts: Thrust per engine [N]
    """
    rcs_duty_cycles: NDArray[np.float64] | None = None
    tvc_angles: NDArray[np.float64] | None = None
    engine_thrusts: NDArray[np.float64] | None = None


@runtime_checkable
class FlightComputer(Protocol):
    """The flight software as seen by the simulation."""

    def step(self, packet: SensorPacket) -> ActuatorCommands:
        """Run one GNC cycle."""
        ...

    def handle_command(self, command: Any) -> None:
        """Apply an external ground command."""
        ...

    def reset(self) -> None:
        """Return to the power-on state."""
        ...

    def telemetry(self) -> dict[str, Any]:
        """Published flight software state (guidance mode, last torque request, ...)."""
        ...
