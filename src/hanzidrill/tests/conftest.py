"""Test configuration."""
import os
from pathlib import Path
from typing import Generator, Iterable, List, Optional

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# Load test environment variables
test_env_path = Path(__file__).parents[3] / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy.orm import Session

from hanzidrill.models.base import Base, SessionLocal, engine, init_db
from hanzidrill.models.exercise import Exercise, ExerciseSegment
from hanzidrill.models.progress import WordProgress

# 2026-02-11T12:00:00Z
NOW = 1770811200000


def make_exercise(words: Iterable[str], english: Optional[str] = None) -> Exercise:
    """Create an exercise where every word has placeholder pinyin."""
    words = list(words)
    return Exercise(
        segments=[ExerciseSegment(chinese=word, pinyin="x") for word in words],
        english=english if english is not None else " ".join(words),
    )


def make_word(
    word: str,
    next_review: int,
    interval_seconds: float = 30,
    consecutive_successes: int = 1,
) -> WordProgress:
    """Create word progress that satisfies next_review == last_reviewed + interval."""
    return WordProgress(
        word=word,
        last_reviewed=next_review - int(interval_seconds * 1000),
        next_review=next_review,
        interval_seconds=interval_seconds,
        consecutive_successes=consecutive_successes,
    )


def words_map(*word_progress: WordProgress) -> dict:
    return {wp.word: wp for wp in word_progress}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sample_exercises() -> List[Exercise]:
    """A small corpus with punctuation segments."""
    return [
        Exercise(
            segments=[
                ExerciseSegment(chinese="你", pinyin="ni3", transliteration="you"),
                ExerciseSegment(chinese="好", pinyin="hao3", transliteration="good"),
                ExerciseSegment(chinese="！", pinyin=""),
            ],
            english="Hello!",
        ),
        Exercise(
            segments=[
                ExerciseSegment(chinese="我", pinyin="wo3"),
                ExerciseSegment(chinese="学", pinyin="xue2"),
                ExerciseSegment(chinese="中文", pinyin="zhong1 wen2"),
                ExerciseSegment(chinese="。", pinyin=""),
            ],
            english="I study Chinese.",
        ),
    ]
