"""Session lifecycle: ``active`` -> ``completed``, never back.

Every lookup folds in the ownership check so a caller can't tell another
owner's session apart from one that doesn't exist.
"""

import logging

from writing_buddy.core.errors import InvalidStateError, NotFoundError, ValidationError
from writing_buddy.models.session import SESSION_KINDS, SESSION_STATUSES, WritingSession
from writing_buddy.services.store import BaseStore

logger = logging.getLogger(__name__)


def _clean_title(title: str | None) -> str:
    if not title or not title.strip():
        raise ValidationError("Title must not be empty")
    return title.strip()


class SessionStateMachine:
    def __init__(self, store: BaseStore):
        self.store = store

    def get(self, session_id: int, owner_id: str) -> WritingSession:
        ws = self.store.get(session_id, owner_id=owner_id)
        if not ws:
            logger.debug(f"Session {session_id} not found for owner {owner_id}")
            raise NotFoundError(f"Session {session_id} not found")
        return ws

    def create(self, owner_id: str, title: str, kind: str) -> WritingSession:
        title = _clean_title(title)
        if kind not in SESSION_KINDS:
            raise ValidationError(f"Invalid session kind: {kind!r}")

        ws = self.store.create(owner_id, title, kind)
        logger.info(f"Created {kind} session {ws.id} for owner {owner_id}")
        return ws

    def list_sessions(self, owner_id: str) -> list[tuple[WritingSession, int]]:
        return self.store.list_sessions(owner_id)

    def touch(self, session_id: int) -> WritingSession:
        ws = self.store.update(session_id)
        if not ws:
            raise NotFoundError(f"Session {session_id} not found")
        return ws

    def complete(self, session_id: int) -> WritingSession:
        ws = self.store.get(session_id)
        if not ws:
            raise NotFoundError(f"Session {session_id} not found")
        if ws.status == "completed":
            raise InvalidStateError(f"Session {session_id} is already completed")

        ws = self.store.update(session_id, status="completed")
        logger.info(f"Session {session_id} completed")
        return ws  # type: ignore[return-value]

    def update(
        self,
        session_id: int,
        owner_id: str,
        status: str | None = None,
        title: str | None = None,
    ) -> WritingSession:
        """Partial update. Only supplied fields change; ``updated_at`` moves if any did."""
        ws = self.get(session_id, owner_id)

        if status is not None and status not in SESSION_STATUSES:
            raise ValidationError(f"Invalid session status: {status!r}")
        if title is not None:
            title = _clean_title(title)

        changes: dict[str, str] = {}
        if status is not None and status != ws.status:
            if ws.status == "completed":
                raise InvalidStateError(f"Session {session_id} can't be reopened")
            changes["status"] = status
        if title is not None and title != ws.title:
            changes["title"] = title

        if not changes:
            return ws

        if "status" in changes:
            logger.info(f"Session {session_id} completed via update")
        return self.store.update(session_id, **changes)  # type: ignore[return-value]
