"""Best-effort persistence of progress snapshots."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hanzidrill.config import settings
from hanzidrill.models.base import init_db
from hanzidrill.models.models import ProgressSnapshot
from hanzidrill.models.progress import StudentProgress
from hanzidrill.monitoring import store_errors, store_operations

logger = logging.getLogger(__name__)


class ProgressStore:
    """Load, save and clear the learner's progress snapshot."""

    def __init__(self, db: Session):
        """Initialize the store with a database session and make sure its table exists."""
        self.db = db
        init_db(db.get_bind())

    def _get_snapshot(self, storage_key: str) -> Optional[ProgressSnapshot]:
        return (
            self.db.query(ProgressSnapshot)
            .filter(ProgressSnapshot.storage_key == storage_key)
            .first()
        )

    def load(self, storage_key: Optional[str] = None) -> StudentProgress:
        """Load progress, or empty progress if none is stored or it is unreadable."""
        storage_key = storage_key or settings.storage.key
        store_operations.labels(operation_type="load").inc()
        try:
            snapshot = self._get_snapshot(storage_key)
            if snapshot is None:
                logger.info(f"No stored progress for {storage_key}, starting empty")
                return StudentProgress.empty()
            progress = StudentProgress.from_dict(snapshot.payload)
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type="load").inc()
            logger.error(f"Failed to load progress for {storage_key}: {e}")
            return StudentProgress.empty()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            store_errors.labels(error_type="corrupt_snapshot").inc()
            logger.error(f"Stored progress for {storage_key} is unreadable: {e}")
            return StudentProgress.empty()

        logger.info(f"Loaded progress for {storage_key}: {len(progress.words)} words, {len(progress.history)} exercises")
        return progress

    def save(self, progress: StudentProgress, storage_key: Optional[str] = None) -> bool:
        """Save progress, replacing any stored snapshot. Returns False on failure."""
        storage_key = storage_key or settings.storage.key
        store_operations.labels(operation_type="save").inc()
        try:
            snapshot = self._get_snapshot(storage_key)
            if snapshot is None:
                snapshot = ProgressSnapshot(storage_key=storage_key, payload=progress.to_dict())
                self.db.add(snapshot)
            else:
                snapshot.payload = progress.to_dict()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type="save").inc()
            logger.error(f"Failed to save progress for {storage_key}: {e}")
            return False

        logger.debug(f"Saved progress for {storage_key}")
        return True

    def clear(self, storage_key: Optional[str] = None) -> bool:
        """Delete the stored snapshot. Returns False on failure."""
        storage_key = storage_key or settings.storage.key
        store_operations.labels(operation_type="clear").inc()
        try:
            deleted = (
                self.db.query(ProgressSnapshot)
                .filter(ProgressSnapshot.storage_key == storage_key)
                .delete()
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type="clear").inc()
            logger.error(f"Failed to clear progress for {storage_key}: {e}")
            return False

        logger.info(f"Cleared progress for {storage_key} ({deleted} snapshot(s))")
        return True
