import logging
from typing import List, Optional

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import StorageError
from .models import SubjectRecord
from .records import SubjectState

logger = logging.getLogger(__name__)


class SubjectRecordStore:
    """One row per subject, read as detached snapshots.

    Writes are conditional: `create` fails if the row already exists and
    `replace` fails if the row's version moved since it was read. Both return
    False in that case so the caller can re-read and retry. Any other
    database failure is raised as StorageError.
    """

    def __init__(self, session_factory):
        self._sessions = session_factory

    def get(self, subject_id: str) -> Optional[SubjectState]:
        sess = self._sessions()
        try:
            rec = sess.get(SubjectRecord, subject_id)
            return rec.to_state() if rec else None
        except SQLAlchemyError as e:
            sess.rollback()
            raise StorageError(f'read failed for {subject_id}') from e
        finally:
            sess.close()

    def create(self, state: SubjectState) -> bool:
        sess = self._sessions()
        rec = SubjectRecord(
            subject_id=state.subject_id,
            click_count=state.click_count,
            status=state.status.value,
            block_level=state.block_level,
            created_at=state.created_at,
            expires_at=state.expires_at,
            updated_at=state.updated_at,
            version=1,
        )
        try:
            sess.add(rec)
            sess.commit()
            return True
        except IntegrityError:
            sess.rollback()
            logger.info('create raced for subject %s', state.subject_id)
            return False
        except SQLAlchemyError as e:
            sess.rollback()
            raise StorageError(f'create failed for {state.subject_id}') from e
        finally:
            sess.close()

    def replace(self, state: SubjectState) -> bool:
        """Write state over the row if its version still equals state.version."""
        stmt = (
            update(SubjectRecord)
            .where(SubjectRecord.subject_id == state.subject_id)
            .where(SubjectRecord.version == state.version)
            .values(
                click_count=state.click_count,
                status=state.status.value,
                block_level=state.block_level,
                expires_at=state.expires_at,
                updated_at=state.updated_at,
                version=state.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        sess = self._sessions()
        try:
            result = sess.execute(stmt)
            sess.commit()
            return result.rowcount == 1
        except SQLAlchemyError as e:
            sess.rollback()
            raise StorageError(f'update failed for {state.subject_id}') from e
        finally:
            sess.close()

    def list_all(self, limit: Optional[int] = None, offset: int = 0) -> List[SubjectState]:
        stmt = select(SubjectRecord).order_by(SubjectRecord.subject_id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        sess = self._sessions()
        try:
            return [rec.to_state() for rec in sess.scalars(stmt)]
        except SQLAlchemyError as e:
            sess.rollback()
            raise StorageError('listing failed') from e
        finally:
            sess.close()

    def ping(self) -> None:
        sess = self._sessions()
        try:
            sess.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            raise StorageError('database unreachable') from e
        finally:
            sess.close()
