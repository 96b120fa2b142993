"""Run-control commands and the command channel.

Commands are queued by the outside world and drained once per tick. Every
command class has a ``kind``; when several commands of the same kind arrive
within one tick only the newest is applied.

Run-control commands (rate, pause/resume, reset) are handled by the
simulation itself. Any other kind is forwarded to the flight computer.
"""

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, ClassVar

from beartype import beartype


@beartype
@dataclass(frozen=True)
class SetSimulationRate:
    """Request a time-acceleration multiplier (clamped to the configured range)."""
    multiplier: float
    kind: ClassVar[str] = "simulation_rate"

    def __post_init__(self) -> None:
        if not math.isfinite(self.multiplier):
            raise ValueError(f"Time acceleration must be finite, got {self.multiplier}")


@dataclass(frozen=True)
class Pause:
    kind: ClassVar[str] = "run_state"


@dataclass(frozen=True)
class Resume:
    kind: ClassVar[str] = "run_state"


@dataclass(frozen=True)
class Reset:
    """Reinitialize the truth state, history and flight software."""
    kind: ClassVar[str] = "reset"


SIMULATION_COMMAND_KINDS = frozenset({"simulation_rate", "run_state", "reset"})


class CommandChannel:
    """Queued, drain-on-read command channel.

    Example:
        >>> channel = CommandChannel()
        >>> channel.send(SetSimulationRate(2.0))
        >>> channel.send(SetSimulationRate(4.0))
        >>> channel.drain()
        [SetSimulationRate(multiplier=4.0)]
    """

    def __init__(self) -> None:
        self._queue: deque[Any] = deque()

    def send(self, command: Any) -> None:
        if not hasattr(command, "kind"):
            raise TypeError(f"Commands must define a 'kind', got {type(command).__name__}")
        self._queue.append(command)

    def drain(self) -> list[Any]:
        """Empty the queue, keeping the newest command of each kind.

        The result is ordered by when each kept command arrived.
        """
        latest: dict[str, Any] = {}
        while self._queue:
            command = self._queue.popleft()
            latest.pop(command.kind, None)
            latest[command.kind] = command
        return list(latest.values())

    def __len__(self) -> int:
        return len(self._queue)
