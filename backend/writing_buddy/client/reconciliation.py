"""Client-side transcript with optimistic turns.

A submitted turn shows up locally right away under a local-only id. The
server reply either confirms it (the assistant reply is appended) or the
local entry is rolled back and the typed text goes back into the input, so
the visible transcript never shows something the server didn't accept.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from writing_buddy.client.api import ClientError, WritingBuddyAPI

logger = logging.getLogger(__name__)

# First turn sent when a session has no messages yet
OPENING_GREETING = "Hi! I want to start writing."

LOAD_ERROR = "Couldn't load the chat."
FINISH_ERROR = "Couldn't get your feedback. Please try again."


class TurnPhase(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class LocalMessage:
    role: str
    content: str
    id: int | None = None  # server id, once known
    local_id: str | None = None  # only while the turn is pending


@dataclass
class PendingTurn:
    text: str
    local_id: str = field(default_factory=lambda: f"local-{uuid.uuid4().hex}")
    phase: TurnPhase = TurnPhase.PENDING

    def _resolve(self, phase: TurnPhase) -> None:
        if self.phase is not TurnPhase.PENDING:
            raise RuntimeError(f"Turn already {self.phase.value}")
        self.phase = phase


class TranscriptView:
    """Local ordered view of one session's messages plus the input box state."""

    def __init__(self) -> None:
        self.messages: list[LocalMessage] = []
        self.input_text = ""
        self.error: str | None = None
        self.status = "active"
        self.pending: PendingTurn | None = None

    @property
    def busy(self) -> bool:
        return self.pending is not None

    def visible_messages(self) -> list[LocalMessage]:
        return [m for m in self.messages if m.role != "system"]

    def replace_all(self, server_messages: list[dict]) -> None:
        """Adopt the server ledger as-is; any local ids disappear."""
        self.messages = [
            LocalMessage(role=m["role"], content=m["content"], id=m.get("id"))
            for m in server_messages
        ]

    def begin_turn(self, text: str) -> PendingTurn:
        text = text.strip()
        if not text:
            raise ValueError("Nothing to send")
        if self.busy:
            raise RuntimeError("A turn is already in flight")

        turn = PendingTurn(text=text)
        self.messages.append(LocalMessage(role="user", content=text, local_id=turn.local_id))
        self.input_text = ""
        self.error = None
        self.pending = turn
        return turn

    def confirm(self, turn: PendingTurn, reply: str) -> None:
        turn._resolve(TurnPhase.CONFIRMED)
        for m in self.messages:
            if m.local_id == turn.local_id:
                m.local_id = None
        self.messages.append(LocalMessage(role="assistant", content=reply))
        self.pending = None

    def roll_back(self, turn: PendingTurn, error: str) -> None:
        turn._resolve(TurnPhase.ROLLED_BACK)
        self.messages = [m for m in self.messages if m.local_id != turn.local_id]
        self.input_text = turn.text
        self.error = error
        self.pending = None


class SessionController:
    """Drives a TranscriptView against the API for one session."""

    def __init__(self, api: WritingBuddyAPI, session_id: int):
        self.api = api
        self.session_id = session_id
        self.view = TranscriptView()
        self.session: dict | None = None

    async def reload(self) -> None:
        self.session = await self.api.get_session(self.session_id)
        self.view.status = self.session["status"]
        self.view.replace_all(self.session.get("messages") or [])

    async def open(self) -> None:
        """Load the session. An empty ledger gets the opening greeting first."""
        await self.reload()
        if self.view.messages:
            return

        self.view.pending = PendingTurn(text=OPENING_GREETING)
        try:
            await self.api.submit_turn(self.session_id, OPENING_GREETING)
            # Server ledger now holds both sides of the greeting
            await self.reload()
        except ClientError as e:
            logger.warning(f"Opening greeting failed for session {self.session_id}: {e.message}")
            self.view.error = LOAD_ERROR
        finally:
            self.view.pending = None

    async def submit(self, text: str | None = None) -> bool:
        """Send ``text`` (or the current input). Returns False if it was rolled back."""
        if self.view.busy:
            return False
        text = self.view.input_text if text is None else text
        if not text.strip():
            return False

        turn = self.view.begin_turn(text)
        try:
            reply = await self.api.submit_turn(self.session_id, turn.text)
        except ClientError as e:
            self.view.roll_back(turn, e.message)
            return False

        self.view.confirm(turn, reply)
        return True

    async def finish(self) -> bool:
        if self.view.busy or self.view.status == "completed":
            return False

        self.view.pending = PendingTurn(text="")
        self.view.error = None
        try:
            feedback = await self.api.finish_session(self.session_id)
        except ClientError as e:
            logger.warning(f"Finish failed for session {self.session_id}: {e.message}")
            self.view.error = FINISH_ERROR
            return False
        finally:
            self.view.pending = None

        try:
            # The server wrote the closing marker and the feedback; adopt its ledger
            await self.reload()
        except ClientError as e:
            logger.warning(f"Reload after finish failed for session {self.session_id}: {e.message}")
            self.view.messages.append(LocalMessage(role="assistant", content=feedback))
            self.view.status = "completed"
        return True
