"""REST API for writing sessions and their message history."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from writing_buddy.api.deps import get_ledger, get_owner_id, get_sessions
from writing_buddy.models.session import ChatMessage, WritingSession
from writing_buddy.services.ledger import MessageLedger
from writing_buddy.services.sessions import SessionStateMachine

router = APIRouter()
logger = logging.getLogger(__name__)


class SessionCreate(BaseModel):
    title: str
    kind: str  # "homework" | "free"


class SessionUpdate(BaseModel):
    status: str | None = None
    title: str | None = None


def session_to_dict(ws: WritingSession) -> dict:
    return {
        "id": ws.id,
        "title": ws.title,
        "kind": ws.kind,
        "status": ws.status,
        "created_at": ws.created_at.isoformat(),
        "updated_at": ws.updated_at.isoformat(),
    }


def message_to_dict(m: ChatMessage) -> dict:
    return {
        "id": m.id,
        "role": m.role,
        "content": m.content,
        "created_at": m.created_at.isoformat(),
    }


@router.get("/")
async def list_sessions(
    owner_id: str = Depends(get_owner_id),
    sessions: SessionStateMachine = Depends(get_sessions),
):
    return [
        {**session_to_dict(ws), "message_count": count}
        for ws, count in sessions.list_sessions(owner_id)
    ]


@router.post("/", status_code=201)
async def create_session(
    body: SessionCreate,
    owner_id: str = Depends(get_owner_id),
    sessions: SessionStateMachine = Depends(get_sessions),
):
    ws = sessions.create(owner_id, body.title, body.kind)
    logger.info(f"Created {ws.kind} session {ws.id}")
    return session_to_dict(ws)


@router.get("/{session_id}")
async def get_session(
    session_id: int,
    owner_id: str = Depends(get_owner_id),
    sessions: SessionStateMachine = Depends(get_sessions),
    ledger: MessageLedger = Depends(get_ledger),
):
    ws = sessions.get(session_id, owner_id)
    return {
        **session_to_dict(ws),
        "messages": [message_to_dict(m) for m in ledger.history(session_id)],
    }


@router.patch("/{session_id}")
async def update_session(
    session_id: int,
    body: SessionUpdate,
    owner_id: str = Depends(get_owner_id),
    sessions: SessionStateMachine = Depends(get_sessions),
):
    ws = sessions.update(session_id, owner_id, status=body.status, title=body.title)
    logger.debug(f"Updated session {session_id}: status={ws.status}")
    return session_to_dict(ws)
