"""Turn orchestration - one user turn or the closing exchange as a single logical unit."""

import asyncio
import logging
import weakref

from writing_buddy.core.config import settings
from writing_buddy.core.errors import InvalidStateError, ProviderError, ValidationError
from writing_buddy.models.session import ChatMessage
from writing_buddy.services.ledger import MessageLedger
from writing_buddy.services.llm.base import BaseLLMProvider, Message
from writing_buddy.services.prompts import CLOSING_MARKER, CLOSING_REQUEST, SYSTEM_PROMPT
from writing_buddy.services.sessions import SessionStateMachine

logger = logging.getLogger(__name__)


def _as_provider_history(entries: list[ChatMessage]) -> list[Message]:
    return [Message(role=m.role, content=m.content) for m in entries]


def _require_text(reply: str) -> None:
    # A blank reply is the provider's fault, not the caller's
    if not reply or not reply.strip():
        logger.error("Provider returned a blank reply")
        raise ProviderError(502, "blank reply")


class TurnOrchestrator:
    """Runs turns against the ledger and the provider.

    The user's text is always persisted before the provider is called, so a
    failed call loses the reply but never what the student wrote. Work on one
    session is serialized by a per-session lock.
    """

    def __init__(
        self,
        sessions: SessionStateMachine,
        ledger: MessageLedger,
        provider: BaseLLMProvider,
        system_prompt: str = SYSTEM_PROMPT,
        turn_max_tokens: int | None = None,
        finish_max_tokens: int | None = None,
    ):
        self.sessions = sessions
        self.ledger = ledger
        self.provider = provider
        self.system_prompt = system_prompt
        self.turn_max_tokens = turn_max_tokens or settings.turn_max_tokens
        self.finish_max_tokens = finish_max_tokens or settings.finish_max_tokens
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: int) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def submit_turn(self, session_id: int, owner_id: str, user_text: str) -> str:
        async with self._lock_for(session_id):
            ws = self.sessions.get(session_id, owner_id)
            if ws.status == "completed":
                raise InvalidStateError(f"Session {session_id} is completed")
            if not user_text or not user_text.strip():
                raise ValidationError("Message must not be empty")

            self.ledger.append(session_id, "user", user_text)
            self.sessions.touch(session_id)
            history = self.ledger.history(session_id)

            try:
                reply = await self.provider.generate_reply(
                    self.system_prompt, _as_provider_history(history), self.turn_max_tokens
                )
            except ProviderError as e:
                logger.error(f"Turn failed for session {session_id}; user turn kept: {e}")
                raise
            _require_text(reply)

            self.ledger.append(session_id, "assistant", reply)
            self.sessions.touch(session_id)
            logger.info(f"Session {session_id}: turn complete ({len(history) + 1} messages)")
            return reply

    async def finish_session(self, session_id: int, owner_id: str) -> str:
        async with self._lock_for(session_id):
            ws = self.sessions.get(session_id, owner_id)
            if ws.status == "completed":
                raise InvalidStateError(f"Session {session_id} is already completed")

            history = _as_provider_history(self.ledger.history(session_id))
            history.append(Message(role="user", content=CLOSING_REQUEST))

            try:
                feedback = await self.provider.generate_reply(
                    self.system_prompt, history, self.finish_max_tokens
                )
            except ProviderError as e:
                logger.error(f"Finish failed for session {session_id}; nothing written: {e}")
                raise
            _require_text(feedback)

            self.ledger.append(session_id, "user", CLOSING_MARKER)
            self.ledger.append(session_id, "assistant", feedback)
            self.sessions.complete(session_id)
            return feedback
