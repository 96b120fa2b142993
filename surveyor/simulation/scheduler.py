"""Multi-rate scheduling of physics and GNC.

Physics runs every tick at ``sim_rate_hz``. The discrete GNC chain runs every
N-th tick with N = sim_rate_hz / gnc_rate_hz, which must be an exact integer.
"""

from beartype import beartype

from surveyor.exceptions import ConfigurationError

RATE_RATIO_TOLERANCE = 1e-9


@beartype
class MultiRateScheduler:
    """Tick counter deciding when the GNC chain fires.

    Example:
        >>> scheduler = MultiRateScheduler(sim_rate_hz=100.0, gnc_rate_hz=10.0)
        >>> fired = [scheduler.advance() for _ in range(20)]
        >>> sum(fired)
        2
    """

    def __init__(self, sim_rate_hz: float, gnc_rate_hz: float) -> None:
        if sim_rate_hz <= 0 or gnc_rate_hz <= 0:
            raise ConfigurationError(f"Rates must be positive, got {sim_rate_hz} Hz and {gnc_rate_hz} Hz")

        ratio = sim_rate_hz / gnc_rate_hz
        n = round(ratio)
        if n < 1 or abs(ratio - n) > RATE_RATIO_TOLERANCE * ratio:
            raise ConfigurationError(
                f"Physics rate {sim_rate_hz} Hz must be an integer multiple of GNC rate {gnc_rate_hz} Hz"
            )

        self.sim_rate_hz = sim_rate_hz
        self.gnc_rate_hz = gnc_rate_hz
        self.ticks_per_gnc = int(n)
        self.tick_count = 0
        self.gnc_count = 0

    @property
    def dt(self) -> float:
        """Physics step [s]."""
        return 1.0 / self.sim_rate_hz

    @property
    def gnc_dt(self) -> float:
        """GNC period [s]."""
        return self.ticks_per_gnc / self.sim_rate_hz

    def advance(self) -> bool:
        """Count one completed physics tick; True if GNC runs on this tick."""
        self.tick_count += 1
        fire = self.tick_count % self.ticks_per_gnc == 0
        if fire:
            self.gnc_count += 1
        return fire

    def reset(self) -> None:
        self.tick_count = 0
        self.gnc_count = 0
