"""Request-scoped dependencies. Long-lived services are built in the lifespan and kept on app.state."""

from fastapi import Depends, Request

from writing_buddy.core.config import settings
from writing_buddy.core.errors import AuthError
from writing_buddy.services.ledger import MessageLedger
from writing_buddy.services.orchestrator import TurnOrchestrator
from writing_buddy.services.sessions import SessionStateMachine
from writing_buddy.services.store import BaseStore


def get_owner_id(request: Request) -> str:
    """Owner identity, injected as a header by the upstream auth layer."""
    owner_id = request.headers.get(settings.owner_header, "").strip()
    if not owner_id:
        raise AuthError("Missing owner identity")
    return owner_id


def get_store(request: Request) -> BaseStore:
    return request.app.state.store


def get_sessions(store: BaseStore = Depends(get_store)) -> SessionStateMachine:
    return SessionStateMachine(store)


def get_ledger(store: BaseStore = Depends(get_store)) -> MessageLedger:
    return MessageLedger(store)


def get_orchestrator(request: Request) -> TurnOrchestrator:
    return request.app.state.orchestrator
