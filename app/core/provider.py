"""Gemeinsame Helfer für die OpenAI-kompatiblen Provider-Adapter:
Client-Aufbau mit Timeouts und Übersetzung der SDK-Fehler."""
import asyncio
import logging
from typing import Any, Awaitable, Optional

import httpx
import openai
from openai import AsyncOpenAI

from app.core.config import Settings
from app.core.errors import GatewayError, ParseError, TransportError

logger = logging.getLogger(__name__)


def build_client(settings: Settings, timeout_seconds: float) -> AsyncOpenAI:
    """Erzeugt einen AsyncOpenAI-Client mit festem Request-Timeout und
    begrenzten Retries (die einzige Retry-Stelle im Gateway)."""
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.chat_base_url or None,
        timeout=httpx.Timeout(timeout_seconds, connect=5.0),
        max_retries=settings.provider_max_retries,
    )


def translate_error(exc: Exception, provider: str) -> GatewayError:
    """Bildet SDK-/Netzwerkfehler auf TransportError bzw. ParseError ab."""
    if isinstance(exc, openai.APITimeoutError):
        return TransportError(f"{provider} request timed out")
    if isinstance(exc, openai.APIConnectionError):
        return TransportError(f"{provider} connection failed")
    if isinstance(exc, openai.APIStatusError):
        return TransportError(f"{provider} returned HTTP {exc.status_code}")
    if isinstance(exc, openai.APIResponseValidationError):
        return ParseError(f"{provider} response did not validate")
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return TransportError(f"{provider} exceeded latency budget")
    if isinstance(exc, httpx.HTTPError):
        return TransportError(f"{provider} transport failed")
    return TransportError(f"{provider} request failed ({type(exc).__name__})")


async def call_provider(call: Awaitable[Any], provider: str, budget_seconds: Optional[float]) -> Any:
    """Führt einen Provider-Call innerhalb des Latenzbudgets aus.

    Jeder Fehler wird übersetzt und mit dem Original verkettet;
    CancelledError wird unverändert weitergereicht.
    """
    try:
        if budget_seconds:
            return await asyncio.wait_for(call, timeout=budget_seconds)
        return await call
    except (openai.OpenAIError, httpx.HTTPError, asyncio.TimeoutError) as exc:
        error = translate_error(exc, provider)
        logger.warning(f"Provider call failed [{provider}]: {error.describe()}")
        raise error from exc
