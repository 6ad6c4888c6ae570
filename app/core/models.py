"""API-Modelle für das Guarded Space Chat Gateway: eingehende Chat-Anfrage
und die Antwort, die immer wie eine normale Chat-Nachricht aussieht."""
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.core.turn import HistoryEntry, Stage, Turn


class ConversationEntry(BaseModel):
    """Ein früherer Verlaufseintrag; ``content`` wird wie ``text`` akzeptiert."""

    role: Literal["user", "assistant"]
    text: str = Field("", validation_alias=AliasChoices("text", "content"))


class ChatRequest(BaseModel):
    """Eingehende Nutzeranfrage; Identität kommt bereits geprüft vom Identity Provider."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., max_length=settings.max_message_chars)
    conversation_history: List[ConversationEntry] = Field(default_factory=list, alias="conversationHistory")
    user_id: Optional[str] = Field(None, alias="userId")
    is_anonymous: bool = Field(False, alias="isAnonymous")

    @field_validator("conversation_history", mode="before")
    @classmethod
    def history_defaults_to_empty(cls, value):
        # null wird wie ein fehlender Verlauf behandelt
        return [] if value is None else value

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message is required")
        return value

    def to_turn(self) -> Turn:
        return Turn(
            message=self.message.strip(),
            history=tuple(HistoryEntry(role=e.role, text=e.text) for e in self.conversation_history),
            user_id=self.user_id,
            is_anonymous=self.is_anonymous,
        )


class ActionButton(BaseModel):
    id: str
    label: str
    action: str


class ChatReply(BaseModel):
    """Ausgehende Antwort. ``blockedStage`` und ``actionButtons`` fehlen,
    wenn sie nicht gesetzt sind."""

    model_config = ConfigDict(populate_by_name=True)

    reply: str
    blocked: bool
    blocked_stage: Optional[Stage] = Field(None, alias="blockedStage")
    action_buttons: Optional[List[ActionButton]] = Field(None, alias="actionButtons")
