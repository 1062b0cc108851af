import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from writing_buddy.core.config import settings
from writing_buddy.core.database import create_db_engine, init_db
from writing_buddy.core.errors import ValidationError, WritingBuddyError
from writing_buddy.api import chat, sessions
from writing_buddy.services.ledger import MessageLedger
from writing_buddy.services.llm import get_llm_provider
from writing_buddy.services.orchestrator import TurnOrchestrator
from writing_buddy.services.sessions import SessionStateMachine
from writing_buddy.services.store import SQLStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    engine = create_db_engine()
    init_db(engine)
    store = SQLStore(engine)
    provider = get_llm_provider()
    logger.info(f"Using LLM provider: {provider.name}")

    app.state.store = store
    app.state.orchestrator = TurnOrchestrator(
        sessions=SessionStateMachine(store),
        ledger=MessageLedger(store),
        provider=provider,
    )

    yield

    engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WritingBuddyError)
async def domain_error_handler(request: Request, exc: WritingBuddyError):
    # Callers only ever see the generic message; details stay in the logs
    logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"{request.method} {request.url.path} -> 400: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": ValidationError.public_message})


app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "app": settings.app_name,
        "provider": settings.llm_provider,
        "provider_configured": settings.provider_key_configured(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("writing_buddy.main:app", host=settings.host, port=settings.port)
