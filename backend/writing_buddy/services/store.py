"""Storage abstraction for sessions and their message ledger.

The store is created once at application startup and handed to the ledger and
the session state machine. ``SQLStore`` is the only implementation; every call
runs in its own short-lived unit of work.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from writing_buddy.models.session import ChatMessage, WritingSession, utcnow

logger = logging.getLogger(__name__)


class BaseStore(ABC):
    @abstractmethod
    def create(self, owner_id: str, title: str, kind: str) -> WritingSession:
        ...

    @abstractmethod
    def get(self, session_id: int, owner_id: str | None = None) -> WritingSession | None:
        """Fetch a session, optionally only if ``owner_id`` owns it."""
        ...

    @abstractmethod
    def update(self, session_id: int, **fields: Any) -> WritingSession | None:
        """Apply ``fields`` and re-stamp ``updated_at``."""
        ...

    @abstractmethod
    def list_sessions(self, owner_id: str) -> list[tuple[WritingSession, int]]:
        """Owner's sessions, most recently updated first, with non-system message counts."""
        ...

    @abstractmethod
    def delete(self, session_id: int) -> bool:
        """Remove a session together with all of its messages."""
        ...

    @abstractmethod
    def append(self, session_id: int, role: str, content: str) -> ChatMessage:
        ...

    @abstractmethod
    def history(self, session_id: int) -> list[ChatMessage]:
        ...

    @abstractmethod
    def count(self, session_id: int, exclude_roles: tuple[str, ...] = ()) -> int:
        ...


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SQLStore(BaseStore):
    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, owner_id: str, title: str, kind: str) -> WritingSession:
        with Session(self.engine) as session:
            ws = WritingSession(owner_id=owner_id, title=title, kind=kind)
            session.add(ws)
            session.commit()
            session.refresh(ws)
            return ws

    def get(self, session_id: int, owner_id: str | None = None) -> WritingSession | None:
        with Session(self.engine) as session:
            query = select(WritingSession).where(WritingSession.id == session_id)
            if owner_id is not None:
                query = query.where(WritingSession.owner_id == owner_id)
            return session.exec(query).first()

    def update(self, session_id: int, **fields: Any) -> WritingSession | None:
        with Session(self.engine) as session:
            ws = session.get(WritingSession, session_id)
            if not ws:
                return None
            for name, value in fields.items():
                setattr(ws, name, value)
            ws.updated_at = utcnow()
            session.add(ws)
            session.commit()
            session.refresh(ws)
            return ws

    def list_sessions(self, owner_id: str) -> list[tuple[WritingSession, int]]:
        with Session(self.engine) as session:
            sessions = session.exec(
                select(WritingSession)
                .where(WritingSession.owner_id == owner_id)
                .order_by(WritingSession.updated_at.desc(), WritingSession.id.desc())  # type: ignore
            ).all()
            counts = dict(
                session.exec(
                    select(ChatMessage.session_id, func.count(ChatMessage.id))
                    .join(WritingSession, WritingSession.id == ChatMessage.session_id)  # type: ignore
                    .where(WritingSession.owner_id == owner_id)
                    .where(ChatMessage.role != "system")
                    .group_by(ChatMessage.session_id)
                ).all()
            )
            return [(ws, counts.get(ws.id, 0)) for ws in sessions]

    def delete(self, session_id: int) -> bool:
        with Session(self.engine) as session:
            ws = session.get(WritingSession, session_id)
            if not ws:
                return False
            # Relationship cascade removes the ledger entries as well
            session.delete(ws)
            session.commit()
            logger.debug(f"Deleted session {session_id} and its messages")
            return True

    def append(self, session_id: int, role: str, content: str) -> ChatMessage:
        with Session(self.engine) as session:
            last = session.exec(
                select(func.max(ChatMessage.created_at)).where(ChatMessage.session_id == session_id)
            ).first()
            created_at = utcnow()
            if last is not None and _as_utc(last) > created_at:
                # Never sort before an earlier entry, even if the clock stepped back
                created_at = _as_utc(last)

            msg = ChatMessage(session_id=session_id, role=role, content=content, created_at=created_at)
            session.add(msg)
            session.commit()
            session.refresh(msg)
            return msg

    def history(self, session_id: int) -> list[ChatMessage]:
        with Session(self.engine) as session:
            return list(
                session.exec(
                    select(ChatMessage)
                    .where(ChatMessage.session_id == session_id)
                    .order_by(ChatMessage.created_at, ChatMessage.id)  # type: ignore
                ).all()
            )

    def count(self, session_id: int, exclude_roles: tuple[str, ...] = ()) -> int:
        with Session(self.engine) as session:
            query = select(func.count(ChatMessage.id)).where(ChatMessage.session_id == session_id)
            if exclude_roles:
                query = query.where(ChatMessage.role.not_in(exclude_roles))  # type: ignore
            return session.exec(query).one()
