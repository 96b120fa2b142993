"""Flight software package - GNC algorithms for the lander.

This package contains the guidance, navigation, and control algorithms that
would run on the flight computer. They are developed and tested against the
truth simulation in surveyor/.

Architecture:
    The simulation (surveyor/) provides the "plant": rigid body dynamics,
    gravity, actuator and sensor models. Flight software (flight/) sees only
    sensor packets and returns actuator commands.

    Simulation loop (every GNC tick):
        packet = sensor models(truth state)
        commands = fsw.step(packet)      # navigation, guidance, control
        actuators.hold(commands)         # until the next GNC tick

Subpackages:
    guidance: Guidance modes, attitude targets, trajectory phase
    control: Attitude control and torque allocation

Example:
    >>> from surveyor.config import default_config
    >>> from surveyor.simulation import Simulation
    >>> from flight import FlightSoftware, SetGuidanceMode
    >>>
    >>> config = default_config()
    >>> sim = Simulation(config, FlightSoftware.from_config(config))
    >>> sim.send(SetGuidanceMode("Detumble"))
    >>> result = sim.run()
"""

from flight.commands import SetBaseThrust, SetGuidanceMode
from flight.control import AttitudeController, ControlAllocator
from flight.fsw import FlightSoftware
from flight.guidance import AttitudeTarget, GuidanceMode, GuidanceModeStateMachine

__all__ = [
    "AttitudeController",
    "AttitudeTarget",
    "ControlAllocator",
    "FlightSoftware",
    "GuidanceMode",
    "GuidanceModeStateMachine",
    "SetBaseThrust",
    "SetGuidanceMode",
]
