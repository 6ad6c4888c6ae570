"""Zweistufige Guard-Pipeline eines Turns: Eingabe moderieren, Chat-Provider
fragen, Ausgabe moderieren. Jeder Turn endet in genau einem GuardOutcome."""
import asyncio
import logging
from enum import Enum
from typing import Optional

from app.core.chat import ChatClient
from app.core.errors import ParseError, PolicyRejection, TransportError
from app.core.logging_setup import log_event
from app.core.moderation import ModerationClient
from app.core.policy import FailSafePolicy
from app.core.turn import (
    Delivered,
    GuardOutcome,
    InputBlocked,
    OutputBlocked,
    Stage,
    Turn,
    UpstreamFailed,
)

logger = logging.getLogger(__name__)


class TurnState(str, Enum):
    START = "start"
    MODERATING_INPUT = "moderating-input"
    INPUT_REJECTED = "input-rejected"
    AWAITING_CHAT = "awaiting-chat"
    CHAT_FAILED = "chat-failed"
    MODERATING_OUTPUT = "moderating-output"
    OUTPUT_REJECTED = "output-rejected"
    DELIVERED = "delivered"


class GuardedChatOrchestrator:
    """Sequenziert ModerationClient → ChatClient → ModerationClient.

    Hält keinen Zustand zwischen Turns; mehrere Turns dürfen parallel laufen.
    Innerhalb eines Turns startet kein Call, bevor das Ergebnis des
    vorherigen feststeht.
    """

    def __init__(
        self, moderation: ModerationClient, chat: ChatClient, policy: Optional[FailSafePolicy] = None
    ) -> None:
        self.moderation = moderation
        self.chat = chat
        self.policy = policy or FailSafePolicy()

    async def run(self, turn: Turn) -> GuardOutcome:
        state = TurnState.START
        try:
            log_event(
                logger,
                "turn-received",
                turn=turn.turn_id,
                user="anonymous" if turn.is_anonymous else "authenticated",
                length=len(turn.message),
                history=len(turn.history),
            )

            # 1. Eingabe moderieren
            state = TurnState.MODERATING_INPUT
            log_event(logger, state.value, turn=turn.turn_id, stage=Stage.INPUT.value)
            try:
                input_verdict = await self.moderation.classify(turn.message, Stage.INPUT, turn.history)
                input_verdict.raise_for_rejection()
            except PolicyRejection as rejection:
                state = TurnState.INPUT_REJECTED
                verdict = rejection.verdict
                log_event(
                    logger,
                    "input-blocked",
                    turn=turn.turn_id,
                    stage=Stage.INPUT.value,
                    category=verdict.category.value,
                    rationale=repr(verdict.rationale) if verdict.rationale else None,
                )
                return InputBlocked(message=self.policy.refusal(Stage.INPUT, verdict.category), verdict=verdict)
            except (TransportError, ParseError) as exc:
                state = TurnState.INPUT_REJECTED
                log_event(
                    logger,
                    "input-blocked",
                    logging.WARNING,
                    turn=turn.turn_id,
                    stage=Stage.INPUT.value,
                    category="fail-safe",
                    error=repr(exc.describe()),
                )
                return InputBlocked(message=self.policy.resolve(Stage.INPUT, exc), failure=exc.describe())
            log_event(logger, "input-approved", turn=turn.turn_id, stage=Stage.INPUT.value)

            # 2. Chat-Provider fragen
            state = TurnState.AWAITING_CHAT
            log_event(logger, state.value, turn=turn.turn_id, stage=Stage.UPSTREAM.value)
            try:
                completion = await self.chat.complete(turn.message, turn.history)
            except (TransportError, ParseError) as exc:
                state = TurnState.CHAT_FAILED
                log_event(
                    logger,
                    state.value,
                    logging.WARNING,
                    turn=turn.turn_id,
                    stage=Stage.UPSTREAM.value,
                    error=repr(exc.describe()),
                )
                return UpstreamFailed(message=self.policy.resolve(Stage.UPSTREAM, exc), reason=exc.describe())

            # 3. Ausgabe moderieren
            state = TurnState.MODERATING_OUTPUT
            log_event(logger, state.value, turn=turn.turn_id, stage=Stage.OUTPUT.value)
            try:
                output_verdict = await self.moderation.classify(completion.text, Stage.OUTPUT)
                output_verdict.raise_for_rejection()
            except PolicyRejection as rejection:
                state = TurnState.OUTPUT_REJECTED
                verdict = rejection.verdict
                log_event(
                    logger,
                    "output-blocked",
                    turn=turn.turn_id,
                    stage=Stage.OUTPUT.value,
                    category=verdict.category.value,
                    rationale=repr(verdict.rationale) if verdict.rationale else None,
                )
                return OutputBlocked(message=self.policy.refusal(Stage.OUTPUT, verdict.category), verdict=verdict)
            except (TransportError, ParseError) as exc:
                state = TurnState.OUTPUT_REJECTED
                log_event(
                    logger,
                    "output-blocked",
                    logging.WARNING,
                    turn=turn.turn_id,
                    stage=Stage.OUTPUT.value,
                    category="fail-safe",
                    error=repr(exc.describe()),
                )
                return OutputBlocked(message=self.policy.resolve(Stage.OUTPUT, exc), failure=exc.describe())
            log_event(logger, "output-approved", turn=turn.turn_id, stage=Stage.OUTPUT.value)

            state = TurnState.DELIVERED
            log_event(logger, state.value, turn=turn.turn_id, length=len(completion.text))
            return Delivered(completion=completion)
        except asyncio.CancelledError:
            # Client weg: Turn verwerfen, nichts wird gespeichert.
            log_event(logger, "turn-cancelled", logging.WARNING, turn=turn.turn_id, state=state.value)
            raise
