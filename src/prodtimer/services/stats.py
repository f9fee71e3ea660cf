"""Stats aggregator: per-day totals over the session log.

``STATS`` accepts a day offset (``2`` = two days before today), a US date
string (``01-31-2026`` or ``01/31/2026``), or nothing (today).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from prodtimer.domain.dates import MS_IN_ONE_DAY, parse_us_date_string
from prodtimer.domain.errors import InvalidDateError
from prodtimer.services.contracts import AggregatedStats, TimerTotals

if TYPE_CHECKING:
    from prodtimer.infrastructure.timer_log import LogEntry, TimerLogger


def resolve_stats_date(arg: int | str | None, *, now: datetime | None = None) -> date:
    """Resolve a ``STATS`` argument to a calendar date.

    Raises:
        InvalidDateError: the offset is not a positive integer, or the string
            is not a real ``mm-dd-yyyy`` / ``mm/dd/yyyy`` date.
    """
    current = now or datetime.now()
    if arg is None:
        return current.date()

    if isinstance(arg, int) and not isinstance(arg, bool):
        if arg <= 0:
            msg = f'Cannot go "{arg}" days back from today.'
            raise InvalidDateError(msg, code="INVALID_DAYS")
        return (current - timedelta(milliseconds=MS_IN_ONE_DAY * arg)).date()

    if isinstance(arg, str):
        return parse_us_date_string(arg)

    msg = f'Invalid date argument: "{arg}". Use a number of days or "mm-dd-yyyy".'
    raise InvalidDateError(msg)


def aggregate_logs(entries: Iterable[LogEntry], day: date) -> AggregatedStats:
    """Fold log entries into overall and per-name totals.

    The first description seen for a name is kept.
    """
    timer_count = 0
    total_duration_ms = 0
    timers: dict[str, TimerTotals] = {}

    for entry in entries:
        timer_count += 1
        total_duration_ms += entry.elapsed_time_ms

        totals = timers.get(entry.name)
        if totals is None:
            timers[entry.name] = TimerTotals(
                count=1,
                description=entry.description,
                total_duration_ms=entry.elapsed_time_ms,
            )
            continue
        totals.count += 1
        totals.total_duration_ms += entry.elapsed_time_ms

    return AggregatedStats(
        date=day.isoformat(),
        timer_count=timer_count,
        total_duration_ms=total_duration_ms,
        timers=timers,
    )


async def get_stats(
    timer_logger: TimerLogger,
    arg: int | str | None,
    *,
    now: datetime | None = None,
) -> AggregatedStats:
    """Resolve *arg*, read that day's log, and aggregate it."""
    day = resolve_stats_date(arg, now=now)
    entries = await timer_logger.get_logs(day)
    return aggregate_logs(entries, day)
