"""Daily snapshots of known-word count and memory strength."""
import logging
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Mapping, Tuple

from hanzidrill.models.progress import DailyMetricsPoint, StudentProgress, WordProgress

logger = logging.getLogger(__name__)

RANGE_DAYS: Dict[str, int] = {
    "1w": 7,
    "1m": 30,
    "6m": 183,
    "1y": 365,
}


def get_local_date_key(timestamp_ms: int) -> str:
    """Local calendar date (YYYY-MM-DD) of a timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d")


def get_end_of_local_day_timestamp(date_key: str) -> int:
    """Timestamp of 23:59:59.999 local time on the given date."""
    day = date.fromisoformat(date_key)
    end_of_day = datetime.combine(day, time(23, 59, 59, 999000))
    return int(end_of_day.timestamp() * 1000)


def _next_date_key(date_key: str) -> str:
    return (date.fromisoformat(date_key) + timedelta(days=1)).isoformat()


def compute_daily_metrics_at_day_end(
    words: Mapping[str, WordProgress],
    day_end_timestamp: int,
) -> Tuple[int, float]:
    """Count words still known at day end and sum their intervals.

    Returns a ``(known_words, memory_strength)`` pair.
    """
    known_words = 0
    memory_strength = 0
    for word_progress in words.values():
        if word_progress.next_review > day_end_timestamp:
            known_words += 1
            memory_strength += word_progress.interval_seconds
    return known_words, memory_strength


def upsert_today_and_fill_missing_days(progress: StudentProgress, now_ms: int) -> StudentProgress:
    """Fill missing daily snapshots and refresh today's from current word states.

    Returns the same object when no snapshot changed.
    """
    history = dict(progress.daily_metrics_history)
    today_key = get_local_date_key(now_ms)
    existing_keys = sorted(history)
    current_key = _next_date_key(existing_keys[-1]) if existing_keys else today_key

    # A last key after today (clock moved back) still refreshes today
    keys_to_update: List[str] = []
    while current_key <= today_key:
        keys_to_update.append(current_key)
        current_key = _next_date_key(current_key)
    if today_key not in keys_to_update:
        keys_to_update.append(today_key)

    has_changes = False
    for date_key in keys_to_update:
        known_words, memory_strength = compute_daily_metrics_at_day_end(
            progress.words, get_end_of_local_day_timestamp(date_key)
        )
        existing = history.get(date_key)
        if existing is None or existing.known_words != known_words or \
           existing.memory_strength != memory_strength:
            history[date_key] = DailyMetricsPoint(
                date_key=date_key,
                known_words=known_words,
                memory_strength=memory_strength,
            )
            has_changes = True

    if not has_changes:
        return progress

    logger.debug(f"Updated daily metrics for {len(keys_to_update)} day(s) up to {today_key}")
    return replace(progress, daily_metrics_history=history)


def slice_metrics_by_range(
    history: Mapping[str, DailyMetricsPoint],
    metrics_range: str,
    now_ms: int,
) -> List[DailyMetricsPoint]:
    """Stored snapshots of the range ending today, oldest first."""
    if metrics_range not in RANGE_DAYS:
        raise ValueError(f"Unknown metrics range {metrics_range}, expected one of {list(RANGE_DAYS)}")

    total_days = RANGE_DAYS[metrics_range]
    today = datetime.fromtimestamp(now_ms / 1000).date()
    points = []
    for offset in range(total_days - 1, -1, -1):
        point = history.get((today - timedelta(days=offset)).isoformat())
        if point is not None:
            points.append(point)
    return points
