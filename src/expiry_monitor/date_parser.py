"""
Timestamp normalization for values returned by the certificate service.

The service is inconsistent about how it encodes points in time: epoch
seconds (as numbers or digit strings), ISO-8601 strings, and the locale
form ``"DD/MM/YYYY, HH:MM:SS"`` all occur. Everything is normalized to
epoch seconds. ``None`` means "unknown" and must never be read as epoch
zero.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

# "05/07/2007, 06:55:57"
LOCALE_PATTERN = re.compile(r"^\s*[\d/]+\s*,\s*[\d:]+\s*$")
DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# "1183618557" or "1183618557.25"
EPOCH_PATTERN = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def parse_timestamp(raw: Any) -> Optional[float]:
    """
    Normalize a raw timestamp to epoch seconds.

    Args:
        raw: Epoch seconds (a number or a numeric string), an ISO-8601 string, or a
             ``"DD/MM/YYYY, HH:MM:SS"`` local-time string

    Returns:
        Epoch seconds, or None for empty or unparseable input
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return None
        return raw

    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    if EPOCH_PATTERN.match(text):
        seconds = float(text)
        return seconds if math.isfinite(seconds) else None

    if LOCALE_PATTERN.match(text):
        return _parse_locale(text)

    return _parse_iso(text)


def _parse_locale(text: str) -> Optional[float]:
    """Parse ``DD/MM/YYYY, HH:MM:SS`` as local time."""
    date_part, time_part = text.split(",", 1)
    try:
        day, month, year = (int(p) for p in date_part.strip().split("/"))
        hour, minute, second = (int(p) for p in time_part.strip().split(":"))
        return datetime(year, month, day, hour, minute, second).timestamp()
    except (ValueError, OverflowError, OSError):
        return None


def _parse_iso(text: str) -> Optional[float]:
    # A bare calendar date is midnight UTC; a date-time without an offset is local.
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if DATE_ONLY_PATTERN.match(text):
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.timestamp()
    except (OverflowError, OSError):
        return None
