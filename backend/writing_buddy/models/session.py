"""Writing session and ledger message models."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, Relationship, SQLModel

SESSION_KINDS = ("homework", "free")
SESSION_STATUSES = ("active", "completed")
MESSAGE_ROLES = ("user", "assistant", "system")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WritingSession(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    title: str
    kind: str  # "homework" | "free"
    status: str = Field(default="active")  # "active" | "completed"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    messages: list["ChatMessage"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class ChatMessage(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="writingsession.id", index=True)
    role: str  # "user" | "assistant" | "system"
    content: str
    created_at: datetime = Field(default_factory=utcnow)

    session: Optional[WritingSession] = Relationship(back_populates="messages")
