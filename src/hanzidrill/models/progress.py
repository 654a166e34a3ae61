"""Models for learner progress.

All progress values are immutable snapshots. Updates build new values with
``dataclasses.replace`` and copied mappings; nothing is changed in place.
Timestamps are epoch milliseconds, intervals are seconds.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordProgress:
    """Memory state of a single word."""
    word: str
    last_reviewed: int
    next_review: int
    interval_seconds: float
    consecutive_successes: int

    def is_due(self, now: int) -> bool:
        return self.next_review <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "lastReviewed": self.last_reviewed,
            "nextReview": self.next_review,
            "intervalSeconds": self.interval_seconds,
            "consecutiveSuccesses": self.consecutive_successes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordProgress":
        return cls(
            word=data["word"],
            last_reviewed=data["lastReviewed"],
            next_review=data["nextReview"],
            interval_seconds=data["intervalSeconds"],
            consecutive_successes=data.get("consecutiveSuccesses", 0),
        )


@dataclass(frozen=True)
class WordIntervalChange:
    """Interval change of one word caused by one completed exercise."""
    word: str
    pinyin: str
    old_interval_seconds: Optional[float]  # None for new words and failures
    new_interval_seconds: float
    next_review: int
    was_early_review: bool = False
    was_failure: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "pinyin": self.pinyin,
            "oldIntervalSeconds": self.old_interval_seconds,
            "newIntervalSeconds": self.new_interval_seconds,
            "nextReview": self.next_review,
            "wasEarlyReview": self.was_early_review,
            "wasFailure": self.was_failure,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordIntervalChange":
        return cls(
            word=data["word"],
            pinyin=data.get("pinyin", ""),
            old_interval_seconds=data.get("oldIntervalSeconds"),
            new_interval_seconds=data["newIntervalSeconds"],
            next_review=data["nextReview"],
            was_early_review=data.get("wasEarlyReview", False),
            was_failure=data.get("wasFailure", False),
        )


@dataclass(frozen=True)
class ExerciseHistory:
    """A completed exercise."""
    exercise_index: int
    completed_at: int
    success: bool  # True if no word needed a hint
    chinese: str
    pinyin: str
    english: str
    word_changes: Tuple[WordIntervalChange, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exerciseIndex": self.exercise_index,
            "completedAt": self.completed_at,
            "success": self.success,
            "chinese": self.chinese,
            "pinyin": self.pinyin,
            "english": self.english,
            "wordChanges": [change.to_dict() for change in self.word_changes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExerciseHistory":
        return cls(
            exercise_index=data["exerciseIndex"],
            completed_at=data["completedAt"],
            success=data.get("success", False),
            chinese=data.get("chinese", ""),
            pinyin=data.get("pinyin", ""),
            english=data.get("english", ""),
            word_changes=tuple(WordIntervalChange.from_dict(c) for c in data.get("wordChanges", [])),
        )


@dataclass(frozen=True)
class DailyMetricsPoint:
    """Known-word count and memory strength at the end of one local day."""
    date_key: str  # YYYY-MM-DD
    known_words: int
    memory_strength: float  # Sum of intervals of known words, in seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dateKey": self.date_key,
            "knownWords": self.known_words,
            "memoryStrength": self.memory_strength,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyMetricsPoint":
        return cls(
            date_key=data["dateKey"],
            known_words=data.get("knownWords", 0),
            memory_strength=data.get("memoryStrength", 0),
        )


@dataclass(frozen=True)
class StudentProgress:
    """Everything the engine knows about the learner."""
    words: Mapping[str, WordProgress] = field(default_factory=dict)
    history: Tuple[ExerciseHistory, ...] = field(default_factory=tuple)
    exercise_last_seen: Mapping[int, int] = field(default_factory=dict)
    daily_metrics_history: Mapping[str, DailyMetricsPoint] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "StudentProgress":
        return cls()

    def has_seen(self, exercise_index: int) -> bool:
        return exercise_index in self.exercise_last_seen

    def with_word(self, word_progress: WordProgress) -> "StudentProgress":
        """Return a copy with one word's state replaced."""
        words = dict(self.words)
        words[word_progress.word] = word_progress
        return replace(self, words=words)

    def with_history_entry(self, entry: ExerciseHistory) -> "StudentProgress":
        """Return a copy with the entry appended and the exercise marked as seen."""
        last_seen = dict(self.exercise_last_seen)
        last_seen[entry.exercise_index] = entry.completed_at
        return replace(
            self,
            history=self.history + (entry,),
            exercise_last_seen=last_seen,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "words": {word: wp.to_dict() for word, wp in self.words.items()},
            "history": [entry.to_dict() for entry in self.history],
            "exerciseLastSeen": {str(index): ts for index, ts in self.exercise_last_seen.items()},
            "dailyMetricsHistory": {
                key: point.to_dict() for key, point in self.daily_metrics_history.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudentProgress":
        """Build progress from a snapshot, accepting the legacy ``seenExercises`` list."""
        exercise_last_seen: Dict[int, int] = {
            int(index): ts for index, ts in (data.get("exerciseLastSeen") or {}).items()
        }
        legacy_seen: List[int] = data.get("seenExercises") or []
        if legacy_seen:
            logger.debug(f"Migrating {len(legacy_seen)} legacy seen exercises")
        for index in legacy_seen:
            if not exercise_last_seen.get(int(index)):
                exercise_last_seen[int(index)] = 1

        return cls(
            words={
                word: WordProgress.from_dict(wp) for word, wp in (data.get("words") or {}).items()
            },
            history=tuple(ExerciseHistory.from_dict(h) for h in (data.get("history") or [])),
            exercise_last_seen=exercise_last_seen,
            daily_metrics_history={
                key: DailyMetricsPoint.from_dict(point)
                for key, point in (data.get("dailyMetricsHistory") or {}).items()
            },
        )
