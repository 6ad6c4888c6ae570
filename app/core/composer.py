"""Baut aus dem GuardOutcome die Antwort an den Client. Oracle-Begründungen
und Provider-Fehler bleiben serverseitig."""
from typing import List, Optional

from app.core.models import ActionButton, ChatReply
from app.core.policy import FALLBACK_MESSAGES
from app.core.turn import (
    Delivered,
    GuardOutcome,
    InputBlocked,
    ModerationCategory,
    OutputBlocked,
    Stage,
    Turn,
    UpstreamFailed,
)

BOX_BREATHING = ActionButton(id="box-breathing", label="Try box breathing", action="activity:box-breathing")
RETRY = ActionButton(id="retry", label="Try again", action="chat:retry")
SAVE_PROGRESS = ActionButton(id="save-progress", label="Save my progress", action="auth:login")


class ResponseComposer:
    def compose(self, outcome: GuardOutcome, turn: Turn) -> ChatReply:
        if isinstance(outcome, Delivered):
            return ChatReply(
                reply=outcome.completion.text,
                blocked=False,
                action_buttons=[SAVE_PROGRESS] if turn.is_anonymous else None,
            )
        if isinstance(outcome, (InputBlocked, OutputBlocked, UpstreamFailed)):
            return ChatReply(
                reply=outcome.message,
                blocked=True,
                blocked_stage=outcome.stage,
                action_buttons=self._actions_for_block(outcome),
            )
        raise TypeError(f"Unknown guard outcome: {type(outcome).__name__}")

    def _actions_for_block(self, outcome: GuardOutcome) -> Optional[List[ActionButton]]:
        if isinstance(outcome, UpstreamFailed):
            return [RETRY]
        verdict = outcome.verdict
        if verdict is not None and verdict.category == ModerationCategory.SELF_HARM:
            return [BOX_BREATHING]
        return None

    def unexpected_error(self) -> ChatReply:
        """Antwort für Fehler außerhalb der Guard-Pipeline; sieht aus wie ein
        normaler Upstream-Ausfall."""
        return ChatReply(
            reply=FALLBACK_MESSAGES[Stage.UPSTREAM],
            blocked=True,
            blocked_stage=Stage.UPSTREAM,
            action_buttons=[RETRY],
        )
