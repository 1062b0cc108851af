"""Append-only message ledger. The single source of truth for a session's conversation."""

import logging

from writing_buddy.core.errors import ValidationError
from writing_buddy.models.session import MESSAGE_ROLES, ChatMessage
from writing_buddy.services.store import BaseStore

logger = logging.getLogger(__name__)


class MessageLedger:
    """Ordered turns per session. Entries are never updated or removed here."""

    def __init__(self, store: BaseStore):
        self.store = store

    def append(self, session_id: int, role: str, content: str) -> ChatMessage:
        if role not in MESSAGE_ROLES:
            raise ValidationError(f"Unknown role: {role!r}")
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")

        msg = self.store.append(session_id, role, content)
        logger.debug(f"Appended {role} message {msg.id} to session {session_id}")
        return msg

    def history(self, session_id: int) -> list[ChatMessage]:
        """All entries in ascending (created_at, id) order."""
        return self.store.history(session_id)

    def count(self, session_id: int, include_system: bool = False) -> int:
        exclude = () if include_system else ("system",)
        return self.store.count(session_id, exclude_roles=exclude)
