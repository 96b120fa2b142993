"""Flight software: the discrete GNC chain.

One call to :meth:`FlightSoftware.step` runs a full GNC cycle:

    sensor packet -> body-frame readings -> aggregation -> estimate
    -> guidance target -> torque request -> allocation -> actuator commands

The simulation calls it every GNC tick and holds the returned commands until
the next one.

Example:
    >>> from surveyor.config import default_config
    >>> from flight import FlightSoftware, SetGuidanceMode
    >>>
    >>> config = default_config()
    >>> fsw = FlightSoftware.from_config(config)
    >>> fsw.handle_command(SetGuidanceMode("Manual"))
    >>> fsw.telemetry()["guidance_mode"]
    'Manual'
"""

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

from flight.clock import SystemClock
from flight.commands import SetBaseThrust, SetGuidanceMode
from flight.control import AttitudeController, ControlAllocator
from flight.guidance import GuidanceMode, GuidanceModeStateMachine, TrajectoryPhaseTracker
from flight.navigation import AttitudeEstimate, SensorAggregator, SimpleAttitudeEstimator
from flight.sensors import SensorProcessor
from surveyor.config import SubsystemKind, SurveyorConfig
from surveyor.interfaces import ActuatorCommands, SensorPacket

logger = logging.getLogger(__name__)


class FlightSoftware:
    """GNC flight software for the lander.

    Attributes:
        clock: Time of the last processed packet
        sensors: Component-to-body sensor front end
        aggregator: Per-unit measurement slots
        estimator: Attitude estimator
        guidance: Guidance mode state machine
        controller: Attitude controller
        allocator: Control allocator
        phase: Published trajectory phase
        base_thrust: Current vernier throttle level [N]
    """

    def __init__(
        self,
        sensors: SensorProcessor,
        aggregator: SensorAggregator,
        guidance: GuidanceModeStateMachine,
        controller: AttitudeController,
        allocator: ControlAllocator,
        n_engines: int = 0,
        base_thrust: float = 0.0,
    ) -> None:
        self.clock = SystemClock()
        self.sensors = sensors
        self.aggregator = aggregator
        self.estimator = SimpleAttitudeEstimator()
        self.guidance = guidance
        self.controller = controller
        self.allocator = allocator
        self.phase = TrajectoryPhaseTracker()
        self.n_engines = n_engines
        self.initial_base_thrust = base_thrust
        self.base_thrust = base_thrust

        self.estimate = AttitudeEstimate()
        self.torque_request = np.zeros(3)

    @classmethod
    def from_config(cls, config: SurveyorConfig) -> "FlightSoftware":
        """Build the flight software for a spacecraft configuration.

        Raises:
            ConfigurationError: If an enabled allocator cannot be built
        """
        sensors = SensorProcessor.from_config(config.spacecraft)
        aggregator = SensorAggregator(
            n_imu=len(sensors.imu),
            n_star_tracker=len(sensors.star_tracker),
            n_star_sensor=len(sensors.star_sensor),
            staleness_limit_s=config.gnc.staleness_limit_s,
        )
        n_engines = sum(len(p.engines) for p in config.spacecraft.subsystems_of(SubsystemKind.PROPULSION))
        return cls(
            sensors=sensors,
            aggregator=aggregator,
            guidance=GuidanceModeStateMachine(GuidanceMode(config.gnc.guidance_mode)),
            controller=AttitudeController(
                kp=config.gnc.kp,
                kd=config.gnc.kd,
                max_torque=config.gnc.max_torque,
            ),
            allocator=ControlAllocator.from_config(config.gnc, config.spacecraft),
            n_engines=n_engines,
            base_thrust=config.gnc.base_thrust,
        )

    def step(self, packet: SensorPacket) -> ActuatorCommands:
        """Run one GNC cycle on a sensor packet."""
        self.clock.update(packet)

        readings = self.sensors.process(packet)
        self.aggregator.update(readings, packet.epoch)
        self.estimate = self.estimator.estimate(self.aggregator)

        target = self.guidance.update()
        self.torque_request = self.controller.compute(target, self.estimate)
        output = self.allocator.allocate(self.torque_request, self.base_thrust)

        tvc_angles = output.tvc_angles
        if output.vernier is not None:
            engine_thrusts = output.vernier.thrusts
            if len(output.vernier.gimbal_angles) > 0:
                # Vernier gimbal allocation wins over the TVC allocator
                tvc_angles = output.vernier.gimbal_angles
        elif self.n_engines > 0:
            engine_thrusts = np.full(self.n_engines, self.base_thrust)
        else:
            engine_thrusts = None

        logger.debug(
            "GNC t=%.3f mode=%s target=%s torque=%s",
            self.clock.time, self.guidance.mode.value, target.kind.value, self.torque_request,
        )
        return ActuatorCommands(
            rcs_duty_cycles=output.rcs_duty_cycles,
            tvc_angles=tvc_angles,
            engine_thrusts=engine_thrusts,
        )

    def handle_command(self, command: Any) -> None:
        """Apply a ground command.

        Raises:
            ValueError: For commands the flight software does not know
        """
        if isinstance(command, SetGuidanceMode):
            self.guidance.set_mode(command.mode, command.target)
        elif isinstance(command, SetBaseThrust):
            logger.info("Base thrust %.1f N -> %.1f N", self.base_thrust, command.thrust)
            self.base_thrust = float(command.thrust)
        else:
            raise ValueError(f"Unknown flight software command: {command!r}")

    def reset(self) -> None:
        """Return to the power-on state."""
        self.clock.reset()
        self.aggregator.reset()
        self.guidance.reset()
        self.allocator.reset()
        self.phase.reset()
        self.base_thrust = self.initial_base_thrust
        self.estimate = AttitudeEstimate()
        self.torque_request = np.zeros(3)

    def telemetry(self) -> dict[str, Any]:
        torque: NDArray[np.float64] = self.torque_request.copy()
        return {
            "guidance_mode": self.guidance.mode.value,
            "trajectory_phase": self.phase.phase.name,
            "torque_request": torque,
            "base_thrust": self.base_thrust,
            "attitude_valid": self.estimate.attitude_valid,
            "rate_valid": self.estimate.rate_valid,
            "gnc_ticks": self.clock.ticks,
        }
