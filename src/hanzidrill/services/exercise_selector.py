"""Exercise selection: decide which sentence the learner practices next."""
import logging
from typing import List, Mapping, Optional, Sequence

from hanzidrill.models.exercise import (
    Exercise,
    ExerciseSelection,
    ScoredExercise,
    SelectionReason,
)
from hanzidrill.models.progress import StudentProgress, WordProgress
from hanzidrill.services.exercise_scorer import (
    build_word_positions,
    get_exercise_candidates,
    is_known,
    unique_words,
)
from hanzidrill.utils import current_time_ms

logger = logging.getLogger(__name__)


def get_overdue_words(
    progress: StudentProgress,
    ordered_word_list: Sequence[str],
    now: int,
) -> List[WordProgress]:
    """Words due at ``now``, most overdue first.

    With a non-empty ordered word list only words of that list are returned.
    """
    allowed = set(ordered_word_list)
    overdue = [
        word_progress for word_progress in progress.words.values()
        if word_progress.is_due(now) and (not allowed or word_progress.word in allowed)
    ]
    return sorted(overdue, key=lambda word_progress: word_progress.next_review)


def is_unlocked(exercise: Exercise, target_word: str, progress: StudentProgress, now: int) -> bool:
    """Check if every word of the exercise other than the target is known."""
    return all(
        is_known(word, progress.words, now)
        for word in unique_words(exercise)
        if word != target_word
    )


def _select_review_exercise(
    exercises: Sequence[Exercise],
    progress: StudentProgress,
    ordered_word_list: Sequence[str],
    word_positions: Mapping[str, int],
    now: int,
) -> Optional[ExerciseSelection]:
    for word_progress in get_overdue_words(progress, ordered_word_list, now):
        target_word = word_progress.word
        candidates = get_exercise_candidates(
            target_word, exercises, progress, ordered_word_list, now, word_positions
        )
        unlocked: List[ScoredExercise] = [
            candidate for candidate in candidates
            if is_unlocked(candidate.exercise, target_word, progress, now)
        ]
        if unlocked:
            best = unlocked[0]
            return ExerciseSelection(
                exercise=best.exercise,
                index=best.index,
                target_word=target_word,
                reason=SelectionReason.REVIEW,
            )
        logger.debug(f"No unlocked exercise for overdue word {target_word}")
    return None


def _select_new_word_exercise(
    exercises: Sequence[Exercise],
    progress: StudentProgress,
    ordered_word_list: Sequence[str],
    word_positions: Mapping[str, int],
    now: int,
) -> Optional[ExerciseSelection]:
    for word in ordered_word_list:
        if word in progress.words:
            continue
        candidates = get_exercise_candidates(
            word, exercises, progress, ordered_word_list, now, word_positions
        )
        if candidates:
            return ExerciseSelection(
                exercise=candidates[0].exercise,
                index=candidates[0].index,
                target_word=word,
                reason=SelectionReason.NEW_WORD,
            )
        logger.debug(f"Word {word} from the ordered list has no exercise")
    return None


def _select_unseen_word_exercise(
    exercises: Sequence[Exercise],
    progress: StudentProgress,
    ordered_word_list: Sequence[str],
    word_positions: Mapping[str, int],
    now: int,
) -> Optional[ExerciseSelection]:
    for exercise in exercises:
        new_words = [word for word in exercise.words if word not in progress.words]
        if not new_words:
            continue
        word = new_words[0]
        best = get_exercise_candidates(
            word, exercises, progress, ordered_word_list, now, word_positions
        )[0]
        return ExerciseSelection(
            exercise=best.exercise,
            index=best.index,
            target_word=word,
            reason=SelectionReason.UNSEEN_WORD,
        )
    return None


def select_next_exercise(
    exercises: Sequence[Exercise],
    progress: StudentProgress,
    ordered_word_list: Sequence[str] = (),
    now: Optional[int] = None,
) -> Optional[ExerciseSelection]:
    """Select the exercise to present next.

    Tries, in order: an unlocked sentence for the most overdue word that has
    one, a sentence introducing the next unlearned word of the ordered word
    list, the best sentence for the first unlearned word found in the corpus,
    and finally the first exercise. Returns None only for an empty corpus.

    ``now`` is read once when not given and held for the whole decision.
    """
    if not exercises:
        return None
    if now is None:
        now = current_time_ms()
    word_positions = build_word_positions(ordered_word_list)

    for tier in (
        _select_review_exercise,
        _select_new_word_exercise,
        _select_unseen_word_exercise,
    ):
        selection = tier(exercises, progress, ordered_word_list, word_positions, now)
        if selection is not None:
            logger.debug(
                f"Selected exercise {selection.index} ({selection.reason.value}) "
                f"for {selection.target_word}"
            )
            return selection

    logger.debug("Every word is learned and none is due, falling back to the first exercise")
    return ExerciseSelection(exercise=exercises[0], index=0, reason=SelectionReason.FALLBACK)
