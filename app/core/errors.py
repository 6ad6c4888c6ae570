"""Fehlerklassen des Gateways.

TransportError und ParseError stammen aus den Adaptern und werden vom
Orchestrator immer in ein Fail-Safe-Ergebnis übersetzt. PolicyRejection
steht für ein negatives Moderationsurteil.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.turn import ModerationVerdict


class GatewayError(Exception):
    """Basisklasse aller Gateway-Fehler."""

    def describe(self) -> str:
        # Kurzform für Diagnose-Logs, z.B. "TransportError: timed out"
        return f"{type(self).__name__}: {self}"


class TransportError(GatewayError):
    """Netzwerkfehler, Timeout oder Nicht-2xx-Status beim Provider."""


class ParseError(GatewayError):
    """Antwort des Providers lässt sich nicht in den internen Typ dekodieren."""


class PolicyRejection(GatewayError):
    """Moderationsurteil hat den Text abgelehnt."""

    def __init__(self, verdict: "ModerationVerdict"):
        super().__init__(f"rejected as {verdict.category.value}")
        self.verdict = verdict
