"""Environment models for lander simulation.

Provides point-mass gravity from one or more celestial bodies whose positions
come from static or tabulated ephemerides.

Example:
    >>> from surveyor.environment import Universe
    >>>
    >>> universe = Universe.moon_only()
    >>> g = universe.acceleration(position, time=0.0)  # m/s^2
"""

from surveyor.environment.ephemeris import (
    Ephemeris,
    StaticEphemeris,
    TabulatedEphemeris,
)
from surveyor.environment.gravity import (
    CelestialBody,
    Universe,
    point_mass_acceleration,
)

__all__ = [
    "Ephemeris",
    "StaticEphemeris",
    "TabulatedEphemeris",
    "CelestialBody",
    "Universe",
    "point_mass_acceleration",
]
