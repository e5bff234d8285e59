"""
Remaining-quota counters from Tumblr rate-limit response headers.
"""

from typing import Any, Mapping

PER_HOUR_HEADER = "x-ratelimit-perhour-remaining"
PER_DAY_HEADER = "x-ratelimit-perday-remaining"


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def get_remaining_requests(headers: Mapping[str, Any]) -> int:
    """
    Return the smaller of the per-hour and per-day remaining counters.

    Header names are matched case-insensitively. Absent or non-numeric
    values count as zero.

    Examples:
        >>> get_remaining_requests({"X-RateLimit-PerHour-Remaining": "10",
        ...                         "x-ratelimit-perday-remaining": "3"})
        3
        >>> get_remaining_requests({})
        0
    """
    normalized = {str(k).lower(): v for k, v in headers.items()}
    per_hour = _to_int(normalized.get(PER_HOUR_HEADER))
    per_day = _to_int(normalized.get(PER_DAY_HEADER))
    return min(per_hour, per_day)
