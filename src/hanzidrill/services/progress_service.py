"""Apply completed exercises to learner progress."""
import logging
from typing import AbstractSet, List, Optional, Tuple

from hanzidrill.config import SpacedRepetitionSettings
from hanzidrill.models.exercise import Exercise
from hanzidrill.models.progress import (
    ExerciseHistory,
    StudentProgress,
    WordIntervalChange,
    WordProgress,
)
from hanzidrill.services.progress_metrics import upsert_today_and_fill_missing_days
from hanzidrill.services.spaced_repetition import (
    DEFAULT_CONFIG,
    StateTransition,
    WordState,
    update_word_state_failure,
    update_word_state_success,
)

logger = logging.getLogger(__name__)


def _word_state(word_progress: Optional[WordProgress]) -> Optional[WordState]:
    if word_progress is None:
        return None
    return WordState(
        interval_seconds=word_progress.interval_seconds,
        last_reviewed=word_progress.last_reviewed,
        consecutive_successes=word_progress.consecutive_successes,
    )


def _apply_transition(
    progress: StudentProgress, word: str, transition: StateTransition
) -> Tuple[StudentProgress, WordIntervalChange]:
    word_progress = WordProgress(
        word=word,
        last_reviewed=transition.state.last_reviewed,
        next_review=transition.change.next_review,
        interval_seconds=transition.state.interval_seconds,
        consecutive_successes=transition.state.consecutive_successes,
    )
    return progress.with_word(word_progress), transition.change


def apply_word_success(
    progress: StudentProgress,
    word: str,
    pinyin: str,
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> Tuple[StudentProgress, WordIntervalChange]:
    """Record a successful recall of a word."""
    transition = update_word_state_success(
        word, pinyin, _word_state(progress.words.get(word)), completed_at, config
    )
    return _apply_transition(progress, word, transition)


def apply_word_failure(
    progress: StudentProgress,
    word: str,
    pinyin: str,
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> Tuple[StudentProgress, WordIntervalChange]:
    """Record a failed recall (hint used) of a word."""
    transition = update_word_state_failure(word, pinyin, completed_at, config)
    return _apply_transition(progress, word, transition)


def complete_exercise(
    progress: StudentProgress,
    exercise_index: int,
    exercise: Exercise,
    hinted_word_indices: AbstractSet[int],
    completed_at: int,
    config: SpacedRepetitionSettings = DEFAULT_CONFIG,
) -> Tuple[StudentProgress, List[WordIntervalChange]]:
    """Apply a completed exercise to the learner's progress.

    ``hinted_word_indices`` holds positions among the word-bearing segments
    (punctuation is not counted) for which the learner asked for a hint.
    Hinted words count as failures, all others as successes.
    """
    changes: List[WordIntervalChange] = []
    word_segments = [segment for segment in exercise.segments if segment.is_word]
    for word_index, segment in enumerate(word_segments):
        if word_index in hinted_word_indices:
            progress, change = apply_word_failure(
                progress, segment.chinese, segment.pinyin, completed_at, config
            )
        else:
            progress, change = apply_word_success(
                progress, segment.chinese, segment.pinyin, completed_at, config
            )
        changes.append(change)

    entry = ExerciseHistory(
        exercise_index=exercise_index,
        completed_at=completed_at,
        success=not any(change.was_failure for change in changes),
        chinese=exercise.chinese,
        pinyin=exercise.pinyin,
        english=exercise.english,
        word_changes=tuple(changes),
    )
    progress = progress.with_history_entry(entry)
    progress = upsert_today_and_fill_missing_days(progress, completed_at)

    logger.debug(
        f"Completed exercise {exercise_index} with {len(changes)} word(s), "
        f"{len(hinted_word_indices)} hint(s)"
    )
    return progress, changes
