"""FastAPI-Einstiegspunkt für das Guarded Space Chat Gateway."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.chat import ChatClient
from app.core.composer import ResponseComposer
from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.core.moderation import ModerationClient
from app.core.orchestrator import GuardedChatOrchestrator
from app.core.policy import FailSafePolicy

from app.routers import chat as chat_router

logger = logging.getLogger(__name__)

# Initialisierung der App
app = FastAPI(
    title="Guarded Space Chat Gateway",
    version="1.0.0",
    description="Middleware for two-phase content moderation around a chat model.",
)

# Setup Logging (Console + optional File)
setup_logging(settings.log_file)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    """Initialisiert alle Services beim Start der Anwendung.

    - Moderations- und Chat-Adapter (teilen sich keine Verbindungen).
    - Orchestrator und Composer im App State.
    """
    moderation = ModerationClient(settings)
    chat = ChatClient(settings)
    app.state.orchestrator = GuardedChatOrchestrator(moderation, chat, FailSafePolicy())
    app.state.composer = ResponseComposer()

    logger.info(
        f"Guarded Space Chat Gateway initialised (chat={settings.chat_model}, "
        f"moderation={settings.moderation_model}, retries={settings.provider_max_retries})"
    )


# Router registrieren
app.include_router(chat_router.router)
