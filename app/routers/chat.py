"""Chat-Router stellt den Hauptendpunkt des Guarded Space Chat Gateways bereit."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.composer import ResponseComposer
from app.core.models import ChatReply, ChatRequest
from app.core.orchestrator import GuardedChatOrchestrator

router = APIRouter(prefix="/chat", tags=["Chat"])
logger = logging.getLogger(__name__)


def get_orchestrator(request: Request) -> GuardedChatOrchestrator:
    """Dependency: Orchestrator aus dem App State (beim Start initialisiert)."""
    return request.app.state.orchestrator


def get_composer(request: Request) -> ResponseComposer:
    return request.app.state.composer


@router.post("/message", response_model=ChatReply, response_model_exclude_none=True)
async def handle_message(
    message: ChatRequest,
    orchestrator: GuardedChatOrchestrator = Depends(get_orchestrator),
    composer: ResponseComposer = Depends(get_composer),
):
    """Haupt-Endpunkt zur Verarbeitung von Chat-Anfragen.

    Pipeline:
    1) Eingabe-Moderation über das Oracle.
    2) Bei Freigabe: Chat-Provider mit Nachricht + Verlauf.
    3) Ausgabe-Moderation der Completion.
    4) Antwort bauen: Completion, feste Ablehnung oder Fail-Safe-Text.

    Die Antwort ist immer eine normale Chat-Nachricht. Unerwartete Fehler
    werden hier abgefangen (HTTP 500), innerhalb der CORS-Middleware.
    """
    turn = message.to_turn()
    try:
        outcome = await orchestrator.run(turn)
        return composer.compose(outcome, turn)
    except Exception as exc:
        logger.exception(f"Unhandled error in turn {turn.turn_id}: {type(exc).__name__}")
        reply = composer.unexpected_error()
        return JSONResponse(
            status_code=500,
            content=reply.model_dump(mode="json", by_alias=True, exclude_none=True),
        )


@router.get("/health")
async def health():
    return {"status": "ok"}
