"""Fail-Safe-Entscheidungstabelle und feste Ablehnungstexte.

Jeder Fehler an jeder Stufe führt zu einer festen Ersatznachricht, nie zu
einem Durchreichen ungeprüfter Inhalte. Alle Texte sind konstant und
enthalten weder Oracle-Begründungen noch Provider-Fehlerdetails.
"""
from typing import Dict

from app.core.errors import GatewayError
from app.core.turn import ModerationCategory, Stage

PERSONA = "Commander Sam H."

FALLBACK_MESSAGES: Dict[Stage, str] = {
    Stage.INPUT: (
        f"{PERSONA} reporting - I couldn't get a clear read on that transmission, "
        "so I'm holding it back for now. Try rephrasing, or ask me about a planet "
        "you'd like to explore!"
    ),
    Stage.UPSTREAM: (
        f"{PERSONA} reporting - I'm experiencing some communication difficulties "
        "with the main computer. Please try again in a moment, or feel free to ask "
        "me about any specific planets or space phenomena you'd like to explore!"
    ),
    Stage.OUTPUT: (
        f"{PERSONA} reporting - my reply got scrambled on the way back from the main "
        "computer, so I'm not sending it. Ask me again, cadet, or pick another "
        "corner of the solar system!"
    ),
}

INPUT_REFUSALS: Dict[ModerationCategory, str] = {
    ModerationCategory.SELF_HARM: (
        f"{PERSONA} here. Cadet, it sounds like you might be going through something "
        "heavy, and that matters more than any mission. I can't help with that topic, "
        "but please reach out to someone you trust or a local crisis line right away. "
        "If you want, we can slow things down together with a breathing exercise."
    ),
    ModerationCategory.NSFW: (
        f"{PERSONA} here. That's off limits on this deck, cadet. Let's keep our "
        "conversation focused on space exploration - what would you like to know "
        "about our solar system?"
    ),
    ModerationCategory.JAILBREAK: (
        f"{PERSONA} here. Nice try, cadet, but I stay on mission. I'm your space "
        "commander and that's not changing. Ask me anything about planets, stars "
        "or missions!"
    ),
    ModerationCategory.VULGAR: (
        f"{PERSONA} here. Let's keep comms clean on this channel, cadet. What would "
        "you like to explore next?"
    ),
    ModerationCategory.DANGEROUS: (
        f"{PERSONA} here. I can't help with anything that could put people in "
        "danger. Let's get back to the stars - which planet should we visit?"
    ),
}

DEFAULT_INPUT_REFUSAL = (
    "I'm sorry, but I can't engage with that type of content. Let's keep our "
    "conversation focused on space exploration and astronomy! What would you like "
    "to know about our solar system?"
)

OUTPUT_REFUSAL = (
    "I apologize, but I need to keep our conversation appropriate and focused on "
    "space exploration topics. Let me help you with something else about astronomy "
    "or space science!"
)


class FailSafePolicy:
    """Reine Entscheidungsfunktion ohne Netzwerk oder Zustand."""

    def resolve(self, stage: Stage, error: GatewayError) -> str:
        """Liefert die feste Ersatznachricht für einen Fehler an ``stage``.

        Der Fehler beeinflusst nur die Diagnose, nie das Ergebnis: Transport-
        und Parse-Fehler blockieren gleichermaßen.
        """
        return FALLBACK_MESSAGES[Stage(stage)]

    def refusal(self, stage: Stage, category: ModerationCategory) -> str:
        """Feste Ablehnung für ein negatives Urteil.

        Bei Selbstgefährdung gilt an beiden Stufen derselbe fürsorgliche Text;
        sonst ist die Ausgabestufe kategorieunabhängig.
        """
        if category == ModerationCategory.SELF_HARM:
            return INPUT_REFUSALS[ModerationCategory.SELF_HARM]
        if Stage(stage) == Stage.OUTPUT:
            return OUTPUT_REFUSAL
        return INPUT_REFUSALS.get(category, DEFAULT_INPUT_REFUSAL)
