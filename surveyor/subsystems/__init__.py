"""Spacecraft subsystems: propulsion, RCS and sensors.

Example:
    >>> from surveyor.subsystems import Subsystem
    >>>
    >>> subsystems = [Subsystem.from_config(c) for c in config.spacecraft.subsystems]
"""

from surveyor.config import SubsystemKind
from surveyor.subsystems.propulsion import PropulsionSubsystem
from surveyor.subsystems.rcs import RcsSubsystem
from surveyor.subsystems.sensors import ImuSubsystem, StarSensorSubsystem, StarTrackerSubsystem
from surveyor.subsystems.subsystem import Subsystem

__all__ = [
    "Subsystem",
    "SubsystemKind",
    "PropulsionSubsystem",
    "RcsSubsystem",
    "ImuSubsystem",
    "StarTrackerSubsystem",
    "StarSensorSubsystem",
]
