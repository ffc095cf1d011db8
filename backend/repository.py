"""SQL persistence for timeline entries.

Every entry is addressed by (user_id, id), so one user can never read or
change another user's entries through this layer.
"""
import logging
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from models import TimelineEntry
from schemas import EntryDraft

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("date", "client", "task", "docket_number", "description", "time_spent")


class PersistenceError(Exception):
    """Raised when the database rejects or fails an operation."""


class EntryRepository:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error while trying to {action}: {str(e)}")
            raise PersistenceError(f"Failed to {action}.") from e

    def list_for_user(self, user_id: int) -> list[TimelineEntry]:
        with self._guard("fetch timeline entries"):
            stmt = (
                select(TimelineEntry)
                .where(TimelineEntry.user_id == user_id)
                .order_by(TimelineEntry.date.desc(), TimelineEntry.id.desc())
            )
            return list(self.session.exec(stmt).all())

    def get(self, user_id: int, entry_id: int) -> TimelineEntry | None:
        with self._guard("fetch timeline entry"):
            stmt = select(TimelineEntry).where(
                TimelineEntry.user_id == user_id, TimelineEntry.id == entry_id
            )
            return self.session.exec(stmt).first()

    def create(self, user_id: int, user_name: str, draft: EntryDraft) -> TimelineEntry:
        entry = TimelineEntry(
            user_id=user_id,
            user_name=user_name,
            **draft.model_dump(include=set(EDITABLE_FIELDS)),
        )
        with self._guard("create timeline entry"):
            self.session.add(entry)
            self.session.commit()
            self.session.refresh(entry)
        return entry

    def update(self, entry: TimelineEntry, draft: EntryDraft) -> TimelineEntry:
        """Replace every editable field; id and owner fields are left alone."""
        with self._guard("update timeline entry"):
            for field in EDITABLE_FIELDS:
                setattr(entry, field, getattr(draft, field))
            entry.updated_at = datetime.now(UTC)
            self.session.add(entry)
            self.session.commit()
            self.session.refresh(entry)
        return entry

    def delete(self, user_id: int, entry_id: int) -> bool:
        """Delete an owned entry. Returns False when there is nothing to delete."""
        with self._guard("delete timeline entry"):
            entry = self.session.exec(
                select(TimelineEntry).where(
                    TimelineEntry.user_id == user_id, TimelineEntry.id == entry_id
                )
            ).first()
            if not entry:
                return False
            self.session.delete(entry)
            self.session.commit()
        return True
