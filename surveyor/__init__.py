"""Surveyor - truth-side simulation of a lunar lander.

This package provides the "plant": rigid body dynamics, multi-body gravity,
actuator and sensor models, and the multi-rate simulation loop that drives a
flight computer (see the ``flight`` package).

Example:
    >>> from surveyor.config import default_config
    >>> from surveyor.simulation import Simulation
    >>> from flight import FlightSoftware
    >>>
    >>> config = default_config()
    >>> sim = Simulation(config, FlightSoftware.from_config(config))
    >>> result = sim.run()
"""

__version__ = "0.1.0"
