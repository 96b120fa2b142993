"""Control algorithms for the lander.

Control turns the guidance target into a body torque request and maps that
request onto the actuators.

Available components:
    AttitudeController: PD attitude / rate feedback
    ControlAllocator: Fans the torque request to the enabled allocators
    RCSController: Pseudo-inverse RCS duty-cycle allocation
    TVCController: Gimbal-angle projection allocation
    VernierAttitudeController: Differential thrust plus gimbal allocation
"""

from flight.control.allocation import AllocatorOutput, ControlAllocator, ControlAllocatorConfig
from flight.control.attitude import AttitudeController
from flight.control.distribution import pseudo_inverse
from flight.control.rcs import RCSController
from flight.control.tvc import TVCController
from flight.control.vernier import VernierAttitudeController, VernierOutput

__all__ = [
    "AllocatorOutput",
    "AttitudeController",
    "ControlAllocator",
    "ControlAllocatorConfig",
    "RCSController",
    "TVCController",
    "VernierAttitudeController",
    "VernierOutput",
    "pseudo_inverse",
]
