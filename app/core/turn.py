"""Domänentypen eines einzelnen Chat-Turns: Eingabe, Moderationsurteil,
Completion und das eine autoritative Ergebnis (GuardOutcome)."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union
from uuid import uuid4

from app.core.errors import PolicyRejection


class Stage(str, Enum):
    """Stufe der Pipeline, an der ein Turn gestoppt wurde."""

    INPUT = "input"
    UPSTREAM = "upstream"
    OUTPUT = "output"


class ModerationCategory(str, Enum):
    NONE = "none"
    SELF_HARM = "self-harm"
    NSFW = "nsfw"
    JAILBREAK = "jailbreak"
    VULGAR = "vulgar"
    DANGEROUS = "dangerous"
    OTHER = "other"


@dataclass(frozen=True)
class HistoryEntry:
    role: str  # 'user' oder 'assistant'
    text: str


@dataclass(frozen=True)
class Turn:
    """Eine Nutzeranfrage inkl. Verlauf (älteste Nachricht zuerst).

    ``turn_id`` dient nur der Korrelation von Log-Zeilen und fließt nicht
    in den Vergleich ein.
    """

    message: str
    history: Tuple[HistoryEntry, ...] = ()
    user_id: Optional[str] = None
    is_anonymous: bool = False
    turn_id: str = field(default_factory=lambda: uuid4().hex[:8], compare=False)


@dataclass(frozen=True)
class ModerationVerdict:
    approved: bool
    category: ModerationCategory = ModerationCategory.NONE
    rationale: Optional[str] = None

    def raise_for_rejection(self) -> None:
        """Wirft PolicyRejection, falls das Urteil negativ ist."""
        if not self.approved:
            raise PolicyRejection(self)


@dataclass(frozen=True)
class ChatCompletion:
    text: str
    raw: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class InputBlocked:
    message: str
    verdict: Optional[ModerationVerdict] = None
    failure: Optional[str] = None

    stage = Stage.INPUT


@dataclass(frozen=True)
class UpstreamFailed:
    message: str
    reason: str

    stage = Stage.UPSTREAM


@dataclass(frozen=True)
class OutputBlocked:
    message: str
    verdict: Optional[ModerationVerdict] = None
    failure: Optional[str] = None

    stage = Stage.OUTPUT


@dataclass(frozen=True)
class Delivered:
    completion: ChatCompletion

    stage = None


GuardOutcome = Union[InputBlocked, UpstreamFailed, OutputBlocked, Delivered]
