"""In-memory view of the signed-in user's timeline entries.

The store mediates every mutation through the repository and resynchronises
with a full reload after each successful change. All failures come back as
an OperationResult; nothing is raised to the caller.
"""
import datetime as dt
import logging

from pydantic import ValidationError

from auth import SessionContext
from repository import EntryRepository, PersistenceError
from schemas import EntryDraft, EntryResponse, ErrorKind, OperationResult, format_validation_error

logger = logging.getLogger(__name__)

AUTH_REQUIRED_MESSAGE = "Authentication required."


def failure(error: ErrorKind, message: str) -> OperationResult:
    return OperationResult(success=False, message=message, error=error)


class EntryStore:
    def __init__(self, repository: EntryRepository, session_ctx: SessionContext | None):
        self.repository = repository
        self.session_ctx = session_ctx
        self.entries: list[EntryResponse] = []
        self.loading = False

    def load(self) -> OperationResult:
        """Replace the local list with the user's entries, newest date first.

        On any failure the list is emptied rather than left stale.
        """
        if self.session_ctx is None:
            self.entries = []
            return failure("auth_required", AUTH_REQUIRED_MESSAGE)

        self.loading = True
        try:
            rows = self.repository.list_for_user(self.session_ctx.user_id)
            self.entries = [EntryResponse.model_validate(row) for row in rows]
            return OperationResult(success=True)
        except PersistenceError as e:
            logger.error(f"Error loading entries for user {self.session_ctx.user_id}: {str(e)}")
            self.entries = []
            return failure("persistence", str(e))
        finally:
            self.loading = False

    def save(self, draft: EntryDraft | dict, editing_id: int | None = None) -> OperationResult:
        """Create an entry, or update `editing_id` in place when the user owns it."""
        if self.session_ctx is None:
            return failure("auth_required", AUTH_REQUIRED_MESSAGE)

        if not isinstance(draft, EntryDraft):
            try:
                draft = EntryDraft.model_validate(draft)
            except ValidationError as e:
                message = format_validation_error(e)
                logger.info(f"Rejected entry draft: {message}")
                return failure("validation", message)

        user_id = self.session_ctx.user_id
        try:
            existing = self.repository.get(user_id, editing_id) if editing_id is not None else None
            if existing is not None:
                saved = self.repository.update(existing, draft)
                message = "Your timeline entry has been successfully updated."
                logger.info(f"Updated entry {saved.id} for user {user_id}")
            else:
                saved = self.repository.create(user_id, self.session_ctx.username, draft)
                message = "Your timeline entry has been successfully added."
                logger.info(f"Created entry {saved.id} for user {user_id}")
            entry = EntryResponse.model_validate(saved)
        except PersistenceError as e:
            logger.error(f"Error saving entry for user {user_id}: {str(e)}")
            return failure("persistence", str(e))

        self.load()
        return OperationResult(success=True, message=message, entry=entry)

    def delete(self, entry_id: int) -> OperationResult:
        if self.session_ctx is None:
            return failure("auth_required", AUTH_REQUIRED_MESSAGE)

        user_id = self.session_ctx.user_id
        try:
            deleted = self.repository.delete(user_id, entry_id)
        except PersistenceError as e:
            logger.error(f"Error deleting entry {entry_id} for user {user_id}: {str(e)}")
            return failure("persistence", str(e))

        if not deleted:
            return failure("not_found", "Entry not found.")

        logger.info(f"Deleted entry {entry_id} for user {user_id}")
        self.load()
        return OperationResult(success=True, message="The timeline entry has been deleted.")

    def entries_between(
        self, date_from: dt.date | None = None, date_to: dt.date | None = None
    ) -> list[EntryResponse]:
        """Loaded entries within an inclusive date range; either bound may be omitted."""
        return [
            entry
            for entry in self.entries
            if (date_from is None or entry.date >= date_from)
            and (date_to is None or entry.date <= date_to)
        ]
