"""Tests for candidate scoring."""
from itertools import combinations
from unittest.mock import patch

import pytest
from faker import Faker

from conftest import NOW, make_exercise, make_word, words_map
from hanzidrill.models.exercise import Exercise, ExerciseScore, ExerciseSegment
from hanzidrill.models.progress import StudentProgress
from hanzidrill.services.exercise_scorer import (
    WordFamiliarity,
    classify_word,
    count_chinese_characters,
    get_exercise_candidates,
)
from hanzidrill.services.exercise_selector import get_overdue_words

fake = Faker()


def test_classify_word() -> None:
    """Test known, review and unknown classification."""
    words = words_map(make_word("我", NOW + 1), make_word("你", NOW), make_word("他", NOW - 1))

    assert classify_word("我", words, NOW) is WordFamiliarity.KNOWN
    assert classify_word("你", words, NOW) is WordFamiliarity.REVIEW
    assert classify_word("他", words, NOW) is WordFamiliarity.REVIEW
    assert classify_word("她", words, NOW) is WordFamiliarity.UNKNOWN


def test_count_chinese_characters() -> None:
    """Test that only Han characters are counted."""
    assert count_chinese_characters("你好！") == 2
    assert count_chinese_characters("我有3个苹果。") == 5
    assert count_chinese_characters("hello") == 0


def test_prioritizes_words_close_to_ordered_list() -> None:
    """Test that early curriculum words beat longer advanced sentences."""
    exercises = [
        make_exercise(["你们", "什么时候", "到", "的"]),
        make_exercise(["我", "的"]),
    ]
    ordered_word_list = ["的", "我", "你们", "什么时候", "到"]

    candidates = get_exercise_candidates("的", exercises, StudentProgress.empty(), ordered_word_list, NOW)

    assert [c.index for c in candidates] == [1, 0]
    assert candidates[0].score == ExerciseScore(
        words_not_in_ordered_list=0,
        unknown_or_review_word_count=2,
        has_been_seen=0,
        largest_ordered_word_index=1,
        chinese_character_count=2,
    )


def test_known_words_are_free() -> None:
    """Test that known words do not count against a sentence."""
    exercises = [make_exercise(["你", "的"]), make_exercise(["我", "的"])]
    progress = StudentProgress(words=words_map(make_word("你", NOW + 60_000, 60)))

    candidates = get_exercise_candidates("的", exercises, progress, ["的", "我"], NOW)

    assert candidates[0].index == 0
    assert candidates[0].score.words_not_in_ordered_list == 0
    assert candidates[0].score.unknown_or_review_word_count == 1
    assert candidates[0].unfamiliar_words == ("的",)


def test_due_words_count_as_unfamiliar() -> None:
    """Test that review words count like unknown words."""
    exercises = [make_exercise(["你", "的"]), make_exercise(["的"])]
    progress = StudentProgress(words=words_map(make_word("你", NOW)))

    candidates = get_exercise_candidates("的", exercises, progress, ["的", "你"], NOW)

    assert candidates[0].index == 1
    assert candidates[1].score.unknown_or_review_word_count == 2
    assert candidates[1].score.largest_ordered_word_index == 1


def test_words_outside_ordered_list_are_penalized_first() -> None:
    """Test that out-of-curriculum words outweigh the unfamiliar word count."""
    exercises = [
        make_exercise(["的", "X"]),
        make_exercise(["的", "我", "你"]),
    ]

    candidates = get_exercise_candidates("的", exercises, StudentProgress.empty(), ["的", "我", "你"], NOW)

    assert candidates[0].index == 1
    assert candidates[1].score.words_not_in_ordered_list == 1


def test_character_count_breaks_ties() -> None:
    """Test that shorter sentences win after the other score levels."""
    exercises = [make_exercise(["的", "你们"]), make_exercise(["的"])]
    progress = StudentProgress(words=words_map(make_word("你们", NOW + 60_000, 60)))

    candidates = get_exercise_candidates("的", exercises, progress, ["的"], NOW)

    assert candidates[0].index == 1
    assert candidates[0].score == ExerciseScore(0, 1, 0, 0, 1)


def test_unseen_exercises_preferred() -> None:
    """Test that a seen sentence ranks below an otherwise equal unseen one."""
    exercises = [make_exercise(["我"]), make_exercise(["我"])]
    progress = StudentProgress(exercise_last_seen={0: NOW - 1000})

    candidates = get_exercise_candidates("我", exercises, progress, ["我"], NOW)

    assert [c.index for c in candidates] == [1, 0]
    assert candidates[1].score.has_been_seen == 1
    assert candidates[1].last_seen == NOW - 1000


def test_last_seen_breaks_full_score_ties() -> None:
    """Test that the least recently seen sentence wins on equal scores."""
    exercises = [make_exercise(["我"]), make_exercise(["我"]), make_exercise(["我"])]
    progress = StudentProgress(exercise_last_seen={0: NOW - 1000, 1: NOW - 5000, 2: NOW - 3000})

    candidates = get_exercise_candidates("我", exercises, progress, ["我"], NOW)

    assert [c.index for c in candidates] == [1, 2, 0]


def test_punctuation_is_ignored() -> None:
    """Test that non-input segments are neither candidates nor unfamiliar words."""
    exercises = [
        Exercise(
            segments=[ExerciseSegment("我", "wo3"), ExerciseSegment("。", "")],
            english="Me.",
        )
    ]

    assert get_exercise_candidates("。", exercises, StudentProgress.empty(), ["我"], NOW) == []
    candidates = get_exercise_candidates("我", exercises, StudentProgress.empty(), ["我"], NOW)
    assert candidates[0].score.unknown_or_review_word_count == 1


def test_repeated_words_counted_once() -> None:
    """Test that a word repeated in a sentence counts once."""
    exercises = [make_exercise(["谢", "谢"])]

    candidates = get_exercise_candidates("谢", exercises, StudentProgress.empty(), ["谢"], NOW)

    assert candidates[0].score.unknown_or_review_word_count == 1
    assert candidates[0].score.chinese_character_count == 2


def test_no_matching_exercise() -> None:
    """Test that a word without exercises yields no candidates."""
    exercises = [make_exercise(["我"])]

    assert get_exercise_candidates("你", exercises, StudentProgress.empty(), ["你"], NOW) == []


def test_missing_from_ordered_list_uses_negative_index() -> None:
    """Test the largest ordered index when no unfamiliar word is in the list."""
    exercises = [make_exercise(["的"])]

    candidates = get_exercise_candidates("的", exercises, StudentProgress.empty(), [], NOW)

    assert candidates[0].score.largest_ordered_word_index == -1
    assert candidates[0].score.words_not_in_ordered_list == 1


def test_score_order_is_lexicographic() -> None:
    """Test that score comparison follows the key priority."""
    scores = [
        ExerciseScore(0, 5, 1, 9, 20),
        ExerciseScore(0, 5, 1, 9, 3),
        ExerciseScore(0, 2, 1, 0, 1),
        ExerciseScore(1, 0, 0, 0, 0),
        ExerciseScore(0, 5, 0, 9, 30),
    ]
    as_tuples = {
        s: (
            s.words_not_in_ordered_list,
            s.unknown_or_review_word_count,
            s.has_been_seen,
            s.largest_ordered_word_index,
            s.chinese_character_count,
        )
        for s in scores
    }

    for a, b in combinations(scores, 2):
        assert (a < b) == (as_tuples[a] < as_tuples[b])
        assert (a > b) == (as_tuples[a] > as_tuples[b])
    assert sorted(scores) == sorted(scores, key=as_tuples.get)


def test_scoring_is_idempotent() -> None:
    """Test that identical inputs give an identical ordering."""
    vocabulary = ["我", "你", "他", "的", "是", "学", "中文", "好"]
    exercises = [
        make_exercise(fake.random_elements(vocabulary, length=4, unique=False) + ["的"])
        for _ in range(20)
    ]
    progress = StudentProgress(
        words=words_map(make_word("我", NOW + 10_000), make_word("你", NOW - 10_000)),
        exercise_last_seen={3: NOW - 50_000, 7: NOW - 20_000},
    )

    first = get_exercise_candidates("的", exercises, progress, vocabulary, NOW)
    second = get_exercise_candidates("的", exercises, progress, vocabulary, NOW)

    assert [c.index for c in first] == [c.index for c in second]
    assert [c.score for c in first] == [c.score for c in second]
    assert [c.sort_key for c in first] == sorted(c.sort_key for c in first)



def test_review_classification_matches_is_due() -> None:
    """Test that classification and the overdue list share the due rule."""
    words = words_map(make_word("我", NOW), make_word("你", NOW + 1))

    overdue = [wp.word for wp in get_overdue_words(StudentProgress(words=words), [], NOW)]

    assert overdue == ["我"]
    for word, word_progress in words.items():
        expected = WordFamiliarity.REVIEW if word_progress.is_due(NOW) else WordFamiliarity.KNOWN
        assert classify_word(word, words, NOW) is expected


def test_reads_clock_once_when_now_not_given() -> None:
    """Test that the clock is read a single time per candidate listing."""
    exercises = [make_exercise(["你", "好"]), make_exercise(["你", "们"])]
    progress = StudentProgress(words=words_map(make_word("好", NOW + 60_000)))

    with patch(
        "hanzidrill.services.exercise_scorer.current_time_ms", return_value=NOW
    ) as clock:
        candidates = get_exercise_candidates("你", exercises, progress, ["你", "好", "们"])

    clock.assert_called_once()
    assert [c.index for c in candidates] == [0, 1]

if __name__ == "__main__":
    pytest.main([__file__])
