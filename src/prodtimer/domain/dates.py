"""Date and duration helpers shared by stats and output.

US date strings are strict: two-digit month, two-digit day, four-digit year,
separated consistently by ``-`` or ``/``, and they must name a real
calendar date (``02-30-2024`` is rejected).
"""

from __future__ import annotations

import re
from datetime import date

from prodtimer.domain.errors import InvalidDateError

MS_IN_ONE_SECOND = 1000
MS_IN_ONE_MINUTE = 60 * MS_IN_ONE_SECOND
MS_IN_ONE_HOUR = 60 * MS_IN_ONE_MINUTE
MS_IN_ONE_DAY = 24 * MS_IN_ONE_HOUR

_US_DATE_PATTERN = re.compile(r"^(\d{2})([-/])(\d{2})\2(\d{4})$")


def parse_us_date_string(value: object) -> date:
    """Parse ``mm-dd-yyyy`` / ``mm/dd/yyyy`` into a :class:`date`.

    Raises:
        InvalidDateError: *value* is not a string of that shape or does not
            name a real calendar date.
    """
    match = _US_DATE_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        msg = f'Invalid date string: "{value}". Use format: "mm-dd-yyyy".'
        raise InvalidDateError(msg)
    month, _sep, day, year = match.groups()
    try:
        return date(int(year), int(month), int(day))
    except ValueError as exc:
        msg = f'Invalid date string: "{value}". {exc}.'
        raise InvalidDateError(msg) from exc


def format_duration_hms(duration_ms: int, *, separator: str | None = None) -> str:
    """Format milliseconds as ``00h 00m 00s`` (or ``00:00:00`` with a separator).

    Sub-second remainders are truncated.

    Examples:
        >>> format_duration_hms(61_000)
        '00h 01m 01s'
        >>> format_duration_hms(61_000, separator=":")
        '00:01:01'
    """
    total_seconds = max(0, int(duration_ms)) // MS_IN_ONE_SECOND
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if separator is not None:
        return separator.join(f"{part:02d}" for part in (hours, minutes, seconds))
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"
