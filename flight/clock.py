"""Flight computer clock.

The flight software has no clock of its own; it adopts the epoch and elapsed
time stamped on every sensor packet.
"""

from dataclasses import dataclass
from datetime import datetime

from surveyor.interfaces import SensorPacket


@dataclass
class SystemClock:
    """Latest time known to the flight software.

    Attributes:
        epoch: Epoch of the last sensor packet (None before the first one)
        time: Elapsed simulation time of the last packet [s]
        ticks: Number of GNC cycles run since power-on
    """
    epoch: datetime | None = None
    time: float = 0.0
    ticks: int = 0

    def update(self, packet: SensorPacket) -> None:
        self.epoch = packet.epoch
        self.time = packet.time
        self.ticks += 1

    def reset(self) -> None:
        self.epoch = None
        self.time = 0.0
        self.ticks = 0
