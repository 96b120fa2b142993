"""Ephemeris sources for celestial body positions.

An ephemeris maps a simulation epoch to an inertial position and velocity.
Two sources are provided:
- StaticEphemeris: fixed position and velocity (e.g. the Moon at the origin)
- TabulatedEphemeris: epoch-indexed table, linearly interpolated, loadable
  from Parquet or CSV with polars

Lookups that cannot be served raise :class:`EphemerisLookupError`; the
universe model catches these and skips the body for that tick.

Example:
    >>> from surveyor.environment import TabulatedEphemeris
    >>>
    >>> eph = TabulatedEphemeris.from_file("earth_wrt_moon.parquet")
    >>> position, velocity = eph.state_at(epoch)
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np
import polars as pl
from beartype import beartype
from numpy.typing import NDArray

from surveyor.config import parse_epoch
from surveyor.exceptions import ConfigurationError, EphemerisLookupError

EPHEMERIS_COLUMNS = ["epoch", "x", "y", "z", "vx", "vy", "vz"]


@runtime_checkable
class Ephemeris(Protocol):
    """Protocol for ephemeris sources."""

    def state_at(self, epoch: datetime) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Inertial position [m] and velocity [m/s] at ``epoch``."""
        ...


@beartype
class StaticEphemeris:
    """A body that never moves."""

    def __init__(
        self,
        position: NDArray[np.float64] | None = None,
        velocity: NDArray[np.float64] | None = None,
    ) -> None:
        self.position = np.zeros(3) if position is None else position.copy()
        self.velocity = np.zeros(3) if velocity is None else velocity.copy()

    def state_at(self, epoch: datetime) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return self.position.copy(), self.velocity.copy()


def _as_utc(epoch: datetime) -> datetime:
    if epoch.tzinfo is None:
        return epoch.replace(tzinfo=timezone.utc)
    return epoch.astimezone(timezone.utc)


@beartype
class TabulatedEphemeris:
    """Linearly interpolated table of body states.

    Args:
        epochs: Strictly increasing sample epochs
        positions: (N, 3) inertial positions [m]
        velocities: (N, 3) inertial velocities [m/s]
    """

    def __init__(
        self,
        epochs: Sequence[datetime],
        positions: NDArray[np.float64],
        velocities: NDArray[np.float64],
    ) -> None:
        n = len(epochs)
        if n < 2:
            raise ConfigurationError(f"Ephemeris table needs at least 2 samples, got {n}")
        if positions.shape != (n, 3) or velocities.shape != (n, 3):
            raise ConfigurationError(
                f"Ephemeris arrays must be shape ({n}, 3), got {positions.shape} and {velocities.shape}"
            )

        self.reference_epoch = _as_utc(epochs[0])
        self.times = np.array([(_as_utc(e) - self.reference_epoch).total_seconds() for e in epochs])
        if np.any(np.diff(self.times) <= 0):
            raise ConfigurationError("Ephemeris epochs must be strictly increasing")

        self.positions = positions.copy()
        self.velocities = velocities.copy()

    @classmethod
    def from_dataframe(cls, df: pl.DataFrame) -> "TabulatedEphemeris":
        """Build from a DataFrame with epoch, x, y, z, vx, vy, vz columns.

        The epoch column may hold datetimes or ISO-8601 strings.
        """
        missing = [c for c in EPHEMERIS_COLUMNS if c not in df.columns]
        if missing:
            raise ConfigurationError(f"Ephemeris table is missing columns: {missing}")

        df = df.sort("epoch")
        epochs = [parse_epoch(e) if isinstance(e, str) else e for e in df["epoch"].to_list()]
        positions = df.select(["x", "y", "z"]).to_numpy().astype(np.float64)
        velocities = df.select(["vx", "vy", "vz"]).to_numpy().astype(np.float64)
        return cls(epochs, positions, velocities)

    @classmethod
    def from_file(cls, path: str | Path) -> "TabulatedEphemeris":
        """Load a Parquet or CSV ephemeris table."""
        path = Path(path)
        if path.suffix == ".parquet":
            df = pl.read_parquet(path)
        elif path.suffix == ".csv":
            df = pl.read_csv(path)
        else:
            raise ConfigurationError(f"Unsupported ephemeris format: {path.suffix}")
        return cls.from_dataframe(df)

    def state_at(self, epoch: datetime) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Interpolate the table at ``epoch``.

        Raises:
            EphemerisLookupError: If ``epoch`` lies outside the table
        """
        t = (_as_utc(epoch) - self.reference_epoch).total_seconds()
        if t < self.times[0] or t > self.times[-1]:
            raise EphemerisLookupError(
                f"Epoch {epoch.isoformat()} outside ephemeris table "
                f"[{self.reference_epoch.isoformat()}, +{self.times[-1]:.1f} s]"
            )

        position = np.array([np.interp(t, self.times, self.positions[:, i]) for i in range(3)])
        velocity = np.array([np.interp(t, self.times, self.velocities[:, i]) for i in range(3)])
        return position, velocity
