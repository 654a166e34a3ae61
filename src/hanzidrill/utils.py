"""Clock and duration formatting helpers."""
import time

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY


def current_time_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _duration_parts(seconds: float, with_months: bool) -> list[str]:
    parts = []
    if with_months:
        months, seconds = divmod(seconds, MONTH)
        if months >= 1:
            parts.append(f"{int(months)}m")
    weeks, seconds = divmod(seconds, WEEK)
    days, seconds = divmod(seconds, DAY)
    hours, seconds = divmod(seconds, HOUR)
    minutes, seconds = divmod(seconds, MINUTE)

    if weeks >= 1:
        parts.append(f"{int(weeks)}w")
    if days >= 1:
        parts.append(f"{int(days)}d")
    if hours >= 1:
        parts.append(f"{int(hours)}h")
    if minutes >= 1:
        parts.append(f"{int(minutes)}min")
    if int(seconds) > 0 and not parts:
        parts.append(f"{int(seconds)}sec")
    return parts[:2]


def format_duration(seconds: float) -> str:
    """Format a duration with its two largest units, e.g. ``1w 3d``."""
    return " ".join(_duration_parts(seconds, with_months=True)) or "0sec"


def format_short_duration(seconds: float) -> str:
    """Format a duration in shorthand without spaces, e.g. ``3w3d``."""
    return "".join(_duration_parts(seconds, with_months=False)) or "0sec"


def format_relative_time(target_ms: int, now_ms: int) -> str:
    """Format a timestamp relative to now, e.g. ``in 3w3d`` or ``3h ago``."""
    diff_ms = target_ms - now_ms
    formatted = format_short_duration(abs(diff_ms) / 1000)
    if diff_ms < 0:
        return f"{formatted} ago"
    return f"in {formatted}"
