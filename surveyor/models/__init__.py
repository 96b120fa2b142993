"""Truth-side actuator and sensor models.

Actuators turn held commands into body-frame forces and torques; sensors turn
truth-state snapshots into component-frame measurements.
"""

from surveyor.models.imu import ImuModel, ImuOutput
from surveyor.models.rcs import RcsThruster
from surveyor.models.star_sensor import StarSensorModel, StarSensorOutput, star_unit_vector
from surveyor.models.star_tracker import StarTrackerModel
from surveyor.models.tvc import TVCServo
from surveyor.models.vernier import VernierRocket

__all__ = [
    "ImuModel",
    "ImuOutput",
    "RcsThruster",
    "StarSensorModel",
    "StarSensorOutput",
    "StarTrackerModel",
    "TVCServo",
    "VernierRocket",
    "star_unit_vector",
]
