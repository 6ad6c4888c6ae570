"""Konfigurationsmodul für das Guarded Space Chat Gateway: lädt Provider-Keys,
Modelle, Timeouts und Frontend-Origins via Pydantic-Settings."""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Hält alle konfigurierbaren Werte, die das Gateway zur Laufzeit
    benötigt (z.B. API-Key, Modellnamen, Timeouts)."""

    openai_api_key: str = Field("", alias="OPENAI_API_KEY")  # Muss per Env gesetzt werden.
    # OpenAI-kompatibler Endpunkt; Gemini bietet unter dieser URL dieselbe API an.
    chat_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/openai/", alias="CHAT_BASE_URL"
    )
    chat_model: str = Field("gemini-2.5-flash", alias="CHAT_MODEL")
    moderation_model: str = Field("gemini-2.5-flash", alias="MODERATION_MODEL")

    # Timeout pro HTTP-Request und Gesamtbudget pro Adapter-Aufruf (inkl. Retries).
    chat_timeout_seconds: float = Field(20.0, alias="CHAT_TIMEOUT_SECONDS")
    moderation_timeout_seconds: float = Field(10.0, alias="MODERATION_TIMEOUT_SECONDS")
    latency_budget_seconds: float = Field(30.0, alias="LATENCY_BUDGET_SECONDS")
    provider_max_retries: int = Field(1, ge=0, le=3, alias="PROVIDER_MAX_RETRIES")

    max_message_chars: int = Field(4000, alias="MAX_MESSAGE_CHARS")
    cors_origins: List[str] = Field(["http://localhost:5173"], alias="CORS_ORIGINS")
    log_file: str = Field("", alias="LOG_FILE")  # Leer = nur Konsole.
    service_port: int = 1985


settings = Settings()
