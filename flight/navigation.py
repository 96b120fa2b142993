"""Sensor aggregation and attitude estimation.

The aggregator keeps one :class:`Measurement` slot per physical sensor unit.
Each GNC cycle the latest reading of every reporting unit overwrites its slot
and is stamped with the current epoch. Units that did not report keep their
previous slot, including its valid flag, unless a staleness limit is set and
the slot has aged past it.

The estimator is a direct pass-through: first valid IMU for the body rate,
first valid star tracker for the attitude. There is no filtering.

Example:
    >>> aggregator = SensorAggregator(n_imu=1, n_star_tracker=1, n_star_sensor=1)
    >>> aggregator.update(processor.process(packet), packet.epoch)
    >>> estimate = SimpleAttitudeEstimator().estimate(aggregator)
    >>> estimate.attitude_valid
    True
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

import numpy as np
from numpy.typing import NDArray

from flight.sensors import ImuReading, ProcessedSensors

T = TypeVar("T")


# =============================================================================
# Measurements
# =============================================================================


@dataclass
class Measurement(Generic[T]):
    """A sensor value with its timestamp and validity.

    Attributes:
        value: Measured value (None if the unit never reported)
        epoch: Epoch at which the value was taken
        valid: Whether downstream consumers may use the value
    """
    value: T | None = None
    epoch: datetime | None = None
    valid: bool = False

    def age(self, now: datetime) -> float:
        """Seconds since the measurement was taken (inf if never)."""
        if self.epoch is None:
            return float("inf")
        return (now - self.epoch).total_seconds()


def _slots(n: int) -> list[Measurement]:
    return [Measurement() for _ in range(n)]


@dataclass
class SensorAggregator:
    """Fixed-size per-type measurement arrays.

    Attributes:
        n_imu: Number of IMU units
        n_star_tracker: Number of star tracker units
        n_star_sensor: Number of star sensor units
        staleness_limit_s: Slots older than this are marked invalid
            (None disables the check)
    """
    n_imu: int = 0
    n_star_tracker: int = 0
    n_star_sensor: int = 0
    staleness_limit_s: float | None = None

    imu: list[Measurement[ImuReading]] = field(init=False)
    star_tracker: list[Measurement[NDArray[np.float64]]] = field(init=False)
    star_sensor: list[Measurement[NDArray[np.float64]]] = field(init=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.imu = _slots(self.n_imu)
        self.star_tracker = _slots(self.n_star_tracker)
        self.star_sensor = _slots(self.n_star_sensor)

    def update(self, readings: ProcessedSensors, epoch: datetime) -> None:
        """Fold one cycle's readings into the slots."""
        for unit_id, reading in readings.imu.items():
            self.imu[unit_id] = Measurement(reading, epoch, True)
        for unit_id, q_i2b in readings.star_tracker.items():
            self.star_tracker[unit_id] = Measurement(q_i2b, epoch, True)
        for unit_id, reading in readings.star_sensor.items():
            # An out-of-FOV star is reported but not usable
            self.star_sensor[unit_id] = Measurement(reading.star_vec_b, epoch, reading.valid)

        if self.staleness_limit_s is not None:
            for slots in (self.imu, self.star_tracker, self.star_sensor):
                for slot in slots:
                    if slot.valid and slot.age(epoch) > self.staleness_limit_s:
                        slot.valid = False


# =============================================================================
# Estimation
# =============================================================================


@dataclass
class AttitudeEstimate:
    """Best current knowledge of the attitude.

    Attributes:
        q_i2b: Inertial-to-body quaternion (identity when not valid)
        omega_b: Body rates [rad/s] (zero when not valid)
        attitude_valid: q_i2b comes from a valid measurement
        rate_valid: omega_b comes from a valid measurement
        star_vec_b: Line of sight to the tracked star, body frame, or None
    """
    q_i2b: NDArray[np.float64] = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    omega_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    attitude_valid: bool = False
    rate_valid: bool = False
    star_vec_b: NDArray[np.float64] | None = None


def _first_valid(slots: list[Measurement]) -> Measurement | None:
    for slot in slots:
        if slot.valid:
            return slot
    return None


class SimpleAttitudeEstimator:
    """Pass-through estimator over the aggregated measurements."""

    def estimate(self, aggregator: SensorAggregator) -> AttitudeEstimate:
        result = AttitudeEstimate()

        imu = _first_valid(aggregator.imu)
        if imu is not None:
            result.omega_b = imu.value.omega_b.copy()
            result.rate_valid = True

        tracker = _first_valid(aggregator.star_tracker)
        if tracker is not None:
            result.q_i2b = tracker.value.copy()
            result.attitude_valid = True

        # A single line of sight does not fix the attitude; it is published only
        star = _first_valid(aggregator.star_sensor)
        if star is not None:
            result.star_vec_b = star.value.copy()

        return result
