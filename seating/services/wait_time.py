"""
Wait-time estimation

``estimate_wait_minutes`` is a pure function of the queue length, the number
of free tables and the party size. ``WaitTimeEstimator`` feeds it live counts
and reports the historical average wait.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple, TYPE_CHECKING

from seating.core.clock import as_utc, utcnow
from seating.core.config import get_settings
from seating.core.exceptions import ValidationError
from seating.models.table import TableStatus

if TYPE_CHECKING:
    from seating.services.booking_queue import BookingQueue
    from seating.services.table_registry import TableRegistry

BASE_MINUTES_PER_PARTY = 15
LARGE_PARTY_THRESHOLD = 4       # parties above this size wait longer
LARGE_PARTY_PENALTY = 10
NO_FREE_TABLE_PENALTY = 20      # cost of waiting for a turnover
MINIMUM_ESTIMATE = 5


def estimate_wait_minutes(waiting_count: int, available_table_count: int, party_size: int) -> int:
    """Estimated wait in whole minutes for a party joining the queue"""
    if waiting_count < 0 or available_table_count < 0:
        raise ValidationError("Queue and table counts cannot be negative")
    if party_size < 1:
        raise ValidationError("Party size must be at least 1")

    penalty = LARGE_PARTY_PENALTY if party_size > LARGE_PARTY_THRESHOLD else 0

    if available_table_count > 0:
        per_table = (waiting_count * BASE_MINUTES_PER_PARTY) // max(1, available_table_count)
        return max(MINIMUM_ESTIMATE, per_table + penalty)

    return waiting_count * BASE_MINUTES_PER_PARTY + penalty + NO_FREE_TABLE_PENALTY


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero"""
    return int((as_utc(end) - as_utc(start)).total_seconds() / 60)


def average_wait(samples: Iterable[Tuple[datetime, datetime]]) -> float:
    """Mean wait over (booking_time, actual_seat_time) pairs, 0.0 when empty"""
    waits = [minutes_between(booked, seated) for booked, seated in samples]
    if not waits:
        return 0.0
    return sum(waits) / len(waits)


class WaitTimeEstimator:
    """Binds the estimate to the current queue and table state"""

    def __init__(self, tables: "TableRegistry", bookings: "BookingQueue"):
        self.tables = tables
        self.bookings = bookings

    def estimate(self, party_size: int) -> int:
        return estimate_wait_minutes(
            self.bookings.count_waiting(),
            self.tables.count_by_status(TableStatus.AVAILABLE),
            party_size,
        )

    def historical_average_wait(self, since: Optional[datetime] = None) -> float:
        """Average minutes between booking and seating for parties booked since ``since``

        Defaults to the configured lookback window.
        """
        if since is None:
            window = get_settings().AVERAGE_WAIT_WINDOW_DAYS
            since = utcnow() - timedelta(days=window)
        return average_wait(self.bookings.seat_time_samples(since))

    def stats(self) -> dict:
        return {
            "average_wait": self.historical_average_wait(),
            "waiting_count": self.bookings.count_waiting(),
            "available_table_count": self.tables.count_by_status(TableStatus.AVAILABLE),
            "occupied_table_count": self.tables.count_by_status(TableStatus.OCCUPIED),
        }
