"""Steuert die Kommunikation mit dem generativen Chat-Provider (OpenAI-
kompatible Chat Completions) für das Guarded Space Chat Gateway."""
import logging
from typing import List, Optional, Sequence

from openai import AsyncOpenAI

from app.core.config import Settings, settings as default_settings
from app.core.errors import ParseError
from app.core.provider import build_client, call_provider
from app.core.turn import ChatCompletion, HistoryEntry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Commander Sam H., a chill but steady space commander on a deep-space vessel. You know a lot about space, planets, and missions, but you explain things like you're chatting with a friend over text.

Your style:
- Keep replies short, casual, and easy to read (like texting).
- Can use Singlish or youth slang when it fits ("lah", "sia", "steady", "no cap").
- Still accurate and reliable, but never long-winded.
- Drop in space/military vibes here and there ("aye cadet", "on deck", "launch ready").
- Make learning fun, hype, and low-key inspiring.

Your mission:
- Chat with users as they explore the solar system interface.
- Answer their space questions (astronomy, planets, missions, etc.) in short, engaging bursts.
- Always stay in character as Commander Sam H."""


def build_messages(message: str, history: Sequence[HistoryEntry]) -> List[dict]:
    """Baut die Nachrichtenliste: System-Prompt, Verlauf (Reihenfolge
    unverändert, leere Einträge entfallen), aktuelle Nachricht zuletzt."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    for entry in history:
        if not entry.text or not entry.text.strip():
            continue
        role = "assistant" if entry.role == "assistant" else "user"
        messages.append({"role": role, "content": entry.text})
    messages.append({"role": "user", "content": message})
    return messages


class ChatClient:
    """Zustandsloser Adapter zum Chat-Provider; genau ein Call pro ``complete``."""

    def __init__(self, config: Settings = default_settings, client: Optional[AsyncOpenAI] = None) -> None:
        self.settings = config
        self.client = client or build_client(config, config.chat_timeout_seconds)
        self.model = config.chat_model

    async def complete(self, message: str, history: Sequence[HistoryEntry] = ()) -> ChatCompletion:
        """Sendet Nachricht + Verlauf an den Provider und liefert die Completion.

        Fehler:
            TransportError bei Netzwerk/Timeout/HTTP-Status,
            ParseError bei fehlenden Choices oder leerem Inhalt.
        """
        response = await call_provider(
            self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(message, history),
                temperature=0.9,
                top_p=0.95,
                max_tokens=1024,
                n=1,
            ),
            provider="chat",
            budget_seconds=self.settings.latency_budget_seconds,
        )

        if not getattr(response, "choices", None):
            raise ParseError("no choices in chat response")
        choice = response.choices[0]
        content = getattr(choice.message, "content", None) if choice.message is not None else None
        if not isinstance(content, str) or not content.strip():
            raise ParseError("chat response has no text content")

        return ChatCompletion(text=content, raw=response)
