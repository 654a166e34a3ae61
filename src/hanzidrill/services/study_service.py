"""Study service tying the scheduling core to progress storage."""
import logging
import time
from typing import AbstractSet, List, Optional, Sequence

from sqlalchemy.orm import Session

from hanzidrill.config import SpacedRepetitionSettings, settings
from hanzidrill.models.exercise import Exercise, ExerciseSelection, ScoredExercise
from hanzidrill.models.progress import StudentProgress, WordIntervalChange
from hanzidrill.monitoring import (
    exercises_completed,
    exercises_selected,
    selection_duration,
    word_reviews,
)
from hanzidrill.services.exercise_scorer import get_exercise_candidates
from hanzidrill.services.exercise_selector import select_next_exercise
from hanzidrill.services.progress_service import complete_exercise
from hanzidrill.services.progress_store import ProgressStore
from hanzidrill.utils import current_time_ms, format_duration, format_relative_time

logger = logging.getLogger(__name__)


def _review_kind(change: WordIntervalChange) -> str:
    if change.was_failure:
        return "failure"
    if change.old_interval_seconds is None:
        return "first"
    if change.was_early_review:
        return "early"
    return "good"


class StudyService:
    """Service for running study sessions over a fixed exercise corpus."""

    def __init__(
        self,
        db: Session,
        exercises: Sequence[Exercise],
        word_list: Sequence[str] = (),
        config: Optional[SpacedRepetitionSettings] = None,
        storage_key: Optional[str] = None,
    ):
        """Initialize the service and load the stored progress."""
        self.exercises = list(exercises)
        self.word_list = list(word_list)
        self.config = config or settings.spaced_repetition
        self.storage_key = storage_key or settings.storage.key
        self.store = ProgressStore(db)
        self.progress: StudentProgress = self.store.load(self.storage_key)
        logger.info(f"Study service ready with {len(self.exercises)} exercises and {len(self.word_list)} ordered words")

    def next_exercise(self, now: Optional[int] = None) -> Optional[ExerciseSelection]:
        """Select the next exercise, or None if the corpus is empty."""
        if now is None:
            now = current_time_ms()
        started = time.perf_counter()
        selection = select_next_exercise(self.exercises, self.progress, self.word_list, now)
        selection_duration.observe(time.perf_counter() - started)

        if selection is None:
            logger.warning("No exercises available")
            return None

        exercises_selected.labels(reason=selection.reason.value).inc()
        logger.info(
            f"Next exercise {selection.index} ({selection.reason.value}), "
            f"target word: {selection.target_word}"
        )
        return selection

    def candidates_for(self, word: str, now: Optional[int] = None) -> List[ScoredExercise]:
        """Get the ranked candidate exercises for a word."""
        return get_exercise_candidates(word, self.exercises, self.progress, self.word_list, now)

    def complete_exercise(
        self,
        exercise_index: int,
        hinted_word_indices: AbstractSet[int] = frozenset(),
        completed_at: Optional[int] = None,
    ) -> List[WordIntervalChange]:
        """Record a completed exercise, persist progress and return the word changes."""
        if not 0 <= exercise_index < len(self.exercises):
            raise IndexError(f"Exercise {exercise_index} not found")
        if completed_at is None:
            completed_at = current_time_ms()

        self.progress, changes = complete_exercise(
            self.progress,
            exercise_index,
            self.exercises[exercise_index],
            hinted_word_indices,
            completed_at,
            self.config,
        )

        success = self.progress.history[-1].success
        exercises_completed.labels(outcome="success" if success else "failure").inc()
        for change in changes:
            word_reviews.labels(kind=_review_kind(change)).inc()
            logger.info(
                f"{change.word} ({_review_kind(change)}): interval "
                f"{format_duration(change.new_interval_seconds)}, next review "
                f"{format_relative_time(change.next_review, completed_at)}"
            )

        if not self.store.save(self.progress, self.storage_key):
            logger.warning("Progress was updated in memory but could not be saved")
        return changes

    def reset_progress(self) -> StudentProgress:
        """Forget all progress."""
        self.store.clear(self.storage_key)
        self.progress = StudentProgress.empty()
        logger.info("Progress reset")
        return self.progress
