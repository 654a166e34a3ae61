"""Interval engine: next review interval of a word after a recall attempt.

Every function here is pure. The caller supplies the completion timestamp
(epoch milliseconds); nothing reads the clock.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from hanzidrill.config import (
    EARLY_REVIEW_MULTIPLIER,
    FIRST_TIME_SUCCESS_INTERVAL_SECONDS,
    GOOD_REVIEW_MULTIPLIER,
    MAX_INTERVAL_SECONDS,
    MIN_INTERVAL_SECONDS,
    SpacedRepetitionSettings,
)
from hanzidrill.models.progress import WordIntervalChange

logger = logging.getLogger(__name__)

# Fixed defaults, independent of environment overrides
DEFAULT_CONFIG = SpacedRepetitionSettings(
    min_interval_seconds=MIN_INTERVAL_SECONDS,
    max_interval_seconds=MAX_INTERVAL_SECONDS,
    early_review_multiplier=EARLY_REVIEW_MULTIPLIER,
    good_review_multiplier=GOOD_REVIEW_MULTIPLIER,
    first_time_success_interval_seconds=FIRST_TIME_SUCCESS_INTERVAL_SECONDS,
)


@dataclass(frozen=True)
class WordState:
    """The part of a word's progress the interval engine works on."""
    interval_seconds: float
    last_reviewed: int
    consecutive_successes: int


@dataclass(frozen=True)
class IntervalResult:
    new_interval: float
    consecutive_successes: int
    was_early_review: bool = False


@dataclass(frozen=True)
class StateTransition:
    """New word state together with the change record describing it."""
    state: WordState
    change: WordIntervalChange


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return math.floor(value + 0.5)


def clamp_interval(interval: float, config: SpacedRepetitionSettings = DEFAULT_CONFIG) -> float:
    """Limit an interval to the configured bounds."""
    return max(config.min_interval_seconds, min(interval, config.max_interval_seconds))


def is_early_review(state: WordState, completed_at: int) -> bool:
    """Check if the word is reviewed before it was due."""
    return completed_at < state.last_reviewed + state.interval_seconds * 1000


def calculate_new_interval(
    state: Optional[WordState],
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> IntervalResult:
    """Calculate the interval after a successful recall.

    A first success schedules the word ``first_time_success_interval_seconds``
    ahead. Later successes scale the time actually elapsed since the last
    review: by ``early_review_multiplier`` when the word was not due yet, and by
    ``good_review_multiplier`` otherwise. An early review never shrinks the
    current interval.
    """
    if state is None:
        return IntervalResult(
            new_interval=config.first_time_success_interval_seconds,
            consecutive_successes=1,
            was_early_review=False,
        )

    actual_elapsed_seconds = (completed_at - state.last_reviewed) / 1000
    early = is_early_review(state, completed_at)

    if early:
        candidate = round_half_up(
            clamp_interval(actual_elapsed_seconds * config.early_review_multiplier, config)
        )
        new_interval = max(candidate, state.interval_seconds)
    else:
        new_interval = round_half_up(
            clamp_interval(actual_elapsed_seconds * config.good_review_multiplier, config)
        )

    return IntervalResult(
        new_interval=new_interval,
        consecutive_successes=state.consecutive_successes + 1,
        was_early_review=early,
    )


def calculate_failure_interval(config: SpacedRepetitionSettings = DEFAULT_CONFIG) -> IntervalResult:
    """A failed recall starts the word over at the minimum interval."""
    return IntervalResult(
        new_interval=config.min_interval_seconds,
        consecutive_successes=0,
    )


def update_word_state_success(
    word: str,
    pinyin: str,
    existing_state: Optional[WordState],
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> StateTransition:
    """Apply a successful recall to a word."""
    result = calculate_new_interval(existing_state, completed_at, config)
    logger.debug(
        f"Success for {word}: {existing_state.interval_seconds if existing_state else None}s -> "
        f"{result.new_interval}s (early: {result.was_early_review})"
    )

    state = WordState(
        interval_seconds=result.new_interval,
        last_reviewed=completed_at,
        consecutive_successes=result.consecutive_successes,
    )
    change = WordIntervalChange(
        word=word,
        pinyin=pinyin,
        old_interval_seconds=existing_state.interval_seconds if existing_state else None,
        new_interval_seconds=result.new_interval,
        next_review=completed_at + int(result.new_interval * 1000),
        was_early_review=result.was_early_review,
        was_failure=False,
    )
    return StateTransition(state=state, change=change)


def update_word_state_failure(
    word: str,
    pinyin: str,
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> StateTransition:
    """Apply a failed recall (hint used) to a word.

    The change record never carries the previous interval.
    """
    result = calculate_failure_interval(config)
    logger.debug(f"Failure for {word}: reset to {result.new_interval}s")

    state = WordState(
        interval_seconds=result.new_interval,
        last_reviewed=completed_at,
        consecutive_successes=result.consecutive_successes,
    )
    change = WordIntervalChange(
        word=word,
        pinyin=pinyin,
        old_interval_seconds=None,
        new_interval_seconds=result.new_interval,
        next_review=completed_at + int(result.new_interval * 1000),
        was_early_review=False,
        was_failure=True,
    )
    return StateTransition(state=state, change=change)
