"""
Time-window arithmetic for session scheduling.

All windows are half-open intervals [start, end) on a single calendar day,
so back-to-back sessions (one ending at 11:00, the next starting at 11:00)
never overlap.
"""
import logging
from datetime import date, time
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def compute_duration_minutes(start_time: time, end_time: time) -> int:
    """Minutes between start and end on the same day (HH:MM granularity).

    Seconds are ignored. The result is negative or zero when end is not
    after start; callers decide whether that is an error.
    """
    return _minutes(end_time) - _minutes(start_time)


def windows_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open overlap test: [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1."""
    return start_a < end_b and start_b < end_a


def find_overlapping(sessions: Iterable, start_time: time, end_time: time) -> list:
    """Return the sessions whose window overlaps [start_time, end_time)."""
    return [
        s for s in sessions
        if windows_overlap(start_time, end_time, s.start_time, s.end_time)
    ]


def parse_hhmm(value: str) -> time:
    """Parse "HH:MM" (or "HH:MM:SS") into a time with seconds dropped.

    Raises:
        ValueError: If the value is not a valid wall-clock time
    """
    parsed = time.fromisoformat(value.strip())
    return parsed.replace(second=0, microsecond=0)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


# =============================================================================
# Scheduling locks
# =============================================================================

def schedule_lock_keys(user_ids: Iterable[str], scheduled_date: date) -> list[str]:
    """Lock keys for every participant on a date, deduplicated and sorted.

    Sorted acquisition order keeps two bookings that share both
    participants from deadlocking each other.
    """
    return sorted({f"schedule:{user_id}:{scheduled_date.isoformat()}" for user_id in user_ids})


async def acquire_schedule_locks(
    db: AsyncSession,
    user_ids: Iterable[str],
    scheduled_date: date,
) -> Optional[list[str]]:
    """
    Serialize conflict-check-then-write sequences per participant and day.

    Takes PostgreSQL transaction-scoped advisory locks, released on commit
    or rollback. Other dialects serialize writes themselves and get no lock.

    Returns:
        The acquired keys, or None when the dialect has no advisory locks
    """
    bind = db.bind
    if bind is None or bind.dialect.name != "postgresql":
        return None

    keys = schedule_lock_keys(user_ids, scheduled_date)
    for key in keys:
        await db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
    logger.debug("Acquired schedule locks %s", keys)
    return keys
