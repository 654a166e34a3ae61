"""Models for the exercise corpus and exercise selection results."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ExerciseSegment:
    """A word or punctuation mark of an exercise sentence.

    Segments with an empty ``pinyin`` are not typed by the learner
    (punctuation, numerals shown as-is).
    """
    chinese: str
    pinyin: str
    transliteration: Optional[str] = None

    @property
    def is_word(self) -> bool:
        return self.pinyin != ""

    def to_dict(self) -> Dict[str, Any]:
        data = {"chinese": self.chinese, "pinyin": self.pinyin}
        if self.transliteration is not None:
            data["transliteration"] = self.transliteration
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExerciseSegment":
        return cls(
            chinese=data["chinese"],
            pinyin=data.get("pinyin") or "",
            transliteration=data.get("transliteration"),
        )


@dataclass(frozen=True)
class Exercise:
    """A practice sentence: ordered segments plus its English translation."""
    segments: Tuple[ExerciseSegment, ...]
    english: str

    def __post_init__(self) -> None:
        # Segments may be passed as any sequence
        object.__setattr__(self, "segments", tuple(self.segments))

    @property
    def words(self) -> List[str]:
        """Chinese text of every word-bearing segment, in sentence order."""
        return [segment.chinese for segment in self.segments if segment.is_word]

    @property
    def chinese(self) -> str:
        return "".join(segment.chinese for segment in self.segments)

    @property
    def pinyin(self) -> str:
        return " ".join(segment.pinyin for segment in self.segments if segment.pinyin)

    def contains_word(self, word: str) -> bool:
        return word in self.words

    def pinyin_for_word(self, word: str) -> str:
        """Get pinyin of the first segment matching the word."""
        for segment in self.segments:
            if segment.chinese == word:
                return segment.pinyin
        return ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segments": [segment.to_dict() for segment in self.segments],
            "english": self.english,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        return cls(
            segments=tuple(ExerciseSegment.from_dict(s) for s in data.get("segments", [])),
            english=data.get("english", ""),
        )


@dataclass(frozen=True, order=True)
class ExerciseScore:
    """Readability score of a candidate exercise, lower is better.

    Fields are compared lexicographically in declaration order.
    """
    words_not_in_ordered_list: int
    unknown_or_review_word_count: int
    has_been_seen: int
    largest_ordered_word_index: int
    chinese_character_count: int


@dataclass(frozen=True)
class ScoredExercise:
    """An exercise that contains the target word, with its score."""
    exercise: Exercise
    index: int
    score: ExerciseScore
    last_seen: int = 0
    unfamiliar_words: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def sort_key(self) -> Tuple[ExerciseScore, int]:
        return (self.score, self.last_seen)


class SelectionReason(Enum):
    """Why the selector picked an exercise."""
    REVIEW = "review"  # An overdue word had an unlocked sentence
    NEW_WORD = "new_word"  # Next unlearned word of the ordered word list
    UNSEEN_WORD = "unseen_word"  # First corpus sentence with an unlearned word
    FALLBACK = "fallback"  # Nothing matched, first exercise of the corpus


@dataclass(frozen=True)
class ExerciseSelection:
    """The exercise to present next."""
    exercise: Exercise
    index: int
    target_word: Optional[str] = None
    reason: SelectionReason = SelectionReason.FALLBACK
