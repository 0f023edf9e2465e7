"""Shared utilities used across the booking service."""

import re
from datetime import datetime, tzinfo
from typing import Optional


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("416 555 0199")
        '4165550199'
        >>> normalize_phone("+1 (416) 555-0199")
        '+14165550199'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def parse_timestamp(value: Optional[str], default_tz: tzinfo) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime.

    A trailing ``Z`` or explicit offset is kept as given. Timestamps with no
    offset are taken to be wall-clock time in ``default_tz``. Returns None for
    empty or unparseable input.

    Examples:
        >>> from datetime import timezone
        >>> parse_timestamp("2025-03-18T10:00:00Z", timezone.utc).isoformat()
        '2025-03-18T10:00:00+00:00'
        >>> parse_timestamp("not a date", timezone.utc) is None
        True
    """
    if not value or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed
