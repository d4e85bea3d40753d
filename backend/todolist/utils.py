from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

# Incoming due dates may be a date, a datetime, or an ISO8601 string
DueDateInput = Union[date, datetime, str]


def parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Normalize a due date into an aware UTC datetime.

    - None and blank strings mean "no due date".
    - Strings are parsed as ISO8601 date-times (a trailing 'Z' is accepted),
      falling back to a bare date at 00:00.
    - Dates are promoted to midnight.
    - Naive values are taken to be UTC; aware ones are converted to UTC.

    Raises:
        ValueError: unparseable string or unsupported type.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return parse_due_date(datetime.fromisoformat(s))
        except ValueError:
            try:
                return parse_due_date(date.fromisoformat(s))
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use an ISO8601 date or datetime "
                    "(e.g. '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e

    raise ValueError("Invalid type for dueDate; expected an ISO8601 string.")
