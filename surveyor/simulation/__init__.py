"""Simulation module for the lander.

Provides the tick-driven simulation that runs physics at a fixed rate and the
flight software at an integer divisor of it.

Example:
    >>> from surveyor.simulation import Simulation, Pause, Resume
    >>>
    >>> sim = Simulation(config, flight_software)
    >>> sim.send(Pause())
    >>> sim.tick()
    False
"""

from surveyor.simulation.commands import (
    CommandChannel,
    Pause,
    Reset,
    Resume,
    SetSimulationRate,
)
from surveyor.simulation.scheduler import MultiRateScheduler
from surveyor.simulation.simulator import (
    Simulation,
    SimulationResult,
    SimulationSnapshot,
    SimulationStatus,
)

__all__ = [
    "CommandChannel",
    "Pause",
    "Reset",
    "Resume",
    "SetSimulationRate",
    "MultiRateScheduler",
    "Simulation",
    "SimulationResult",
    "SimulationSnapshot",
    "SimulationStatus",
]
