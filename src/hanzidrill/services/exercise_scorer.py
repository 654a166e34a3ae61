"""Candidate scoring: rank the exercises that contain a target word."""
import logging
import re
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from hanzidrill.models.exercise import Exercise, ExerciseScore, ScoredExercise
from hanzidrill.models.progress import StudentProgress, WordProgress
from hanzidrill.utils import current_time_ms

logger = logging.getLogger(__name__)

# CJK unified ideographs, extension A and compatibility ideographs
HAN_CHARACTER_PATTERN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")


class WordFamiliarity(Enum):
    """How well the learner currently knows a word."""
    KNOWN = "known"  # Has progress and is not due yet
    REVIEW = "review"  # Has progress and is due
    UNKNOWN = "unknown"  # Never learned


def classify_word(word: str, words: Mapping[str, WordProgress], now: int) -> WordFamiliarity:
    word_progress = words.get(word)
    if word_progress is None:
        return WordFamiliarity.UNKNOWN
    if word_progress.is_due(now):
        return WordFamiliarity.REVIEW
    return WordFamiliarity.KNOWN


def is_known(word: str, words: Mapping[str, WordProgress], now: int) -> bool:
    return classify_word(word, words, now) is WordFamiliarity.KNOWN


def unique_words(exercise: Exercise) -> List[str]:
    """Word-bearing segments of the exercise without repeats, in sentence order."""
    return list(dict.fromkeys(exercise.words))


def count_chinese_characters(text: str) -> int:
    return len(HAN_CHARACTER_PATTERN.findall(text))


def build_word_positions(ordered_word_list: Sequence[str]) -> Dict[str, int]:
    """Map each word to its first position in the ordered word list."""
    positions: Dict[str, int] = {}
    for position, word in enumerate(ordered_word_list):
        positions.setdefault(word, position)
    return positions


def score_exercise(
    exercise: Exercise,
    index: int,
    progress: StudentProgress,
    word_positions: Mapping[str, int],
    now: int,
) -> ScoredExercise:
    """Score one exercise for the learner at time ``now``."""
    unfamiliar = [
        word for word in unique_words(exercise)
        if not is_known(word, progress.words, now)
    ]
    ordered_indices = [word_positions[word] for word in unfamiliar if word in word_positions]

    score = ExerciseScore(
        words_not_in_ordered_list=len(unfamiliar) - len(ordered_indices),
        unknown_or_review_word_count=len(unfamiliar),
        has_been_seen=1 if progress.has_seen(index) else 0,
        largest_ordered_word_index=max(ordered_indices) if ordered_indices else -1,
        chinese_character_count=count_chinese_characters(exercise.chinese),
    )
    return ScoredExercise(
        exercise=exercise,
        index=index,
        score=score,
        last_seen=progress.exercise_last_seen.get(index, 0),
        unfamiliar_words=tuple(unfamiliar),
    )


def get_exercise_candidates(
    word: str,
    exercises: Sequence[Exercise],
    progress: StudentProgress,
    ordered_word_list: Sequence[str] = (),
    now: Optional[int] = None,
    word_positions: Optional[Mapping[str, int]] = None,
) -> List[ScoredExercise]:
    """Get all exercises containing the word, easiest first.

    Candidates are ordered by their score, then by when they were last seen
    (never seen first), then by corpus position.
    """
    if now is None:
        now = current_time_ms()
    if word_positions is None:
        word_positions = build_word_positions(ordered_word_list)

    candidates = [
        score_exercise(exercise, index, progress, word_positions, now)
        for index, exercise in enumerate(exercises)
        if exercise.contains_word(word)
    ]
    candidates.sort(key=lambda candidate: candidate.sort_key)

    logger.debug(f"Found {len(candidates)} candidates for {word}")
    return candidates
