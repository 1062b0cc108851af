"""Turn endpoints: submit a student turn, or finish the session with rubric feedback."""

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from writing_buddy.api.deps import get_orchestrator, get_owner_id
from writing_buddy.services.orchestrator import TurnOrchestrator

router = APIRouter()


class TurnRequest(BaseModel):
    session_id: int = Field(validation_alias=AliasChoices("session_id", "sessionId"))
    message: str


class FinishRequest(BaseModel):
    session_id: int = Field(validation_alias=AliasChoices("session_id", "sessionId"))


@router.post("/")
async def submit_turn(
    body: TurnRequest,
    owner_id: str = Depends(get_owner_id),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    reply = await orchestrator.submit_turn(body.session_id, owner_id, body.message)
    return {"message": reply}


@router.post("/finish")
async def finish_session(
    body: FinishRequest,
    owner_id: str = Depends(get_owner_id),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    feedback = await orchestrator.finish_session(body.session_id, owner_id)
    return {"message": feedback}
