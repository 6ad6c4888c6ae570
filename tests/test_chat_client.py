from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from app.core.chat import SYSTEM_PROMPT, ChatClient, build_messages
from app.core.config import Settings
from app.core.errors import ParseError, TransportError
from app.core.turn import HistoryEntry

REQUEST = httpx.Request("POST", "https://chat.test/v1/chat/completions")


def chat_response(text):
    return MagicMock(choices=[MagicMock(message=MagicMock(content=text))])


def make_client(result=None, side_effect=None):
    mock_openai = MagicMock()
    mock_openai.chat.completions.create = AsyncMock(return_value=result, side_effect=side_effect)
    return ChatClient(Settings(), client=mock_openai), mock_openai


def test_build_messages_preserves_history_order():
    history = [
        HistoryEntry(role="assistant", text="Commander Sam H. here, ready for your orders."),
        HistoryEntry(role="user", text="What is Mars?"),
        HistoryEntry(role="assistant", text="Red planet, dusty like crazy."),
        HistoryEntry(role="user", text="   "),
    ]

    messages = build_messages("And Venus?", history)

    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert [m["content"] for m in messages[1:]] == [
        "Commander Sam H. here, ready for your orders.",
        "What is Mars?",
        "Red planet, dusty like crazy.",
        "And Venus?",
    ]
    assert [m["role"] for m in messages[1:]] == ["assistant", "user", "assistant", "user"]


@pytest.mark.asyncio
async def test_complete_returns_text_unmodified():
    response = chat_response("  Mars is the fourth planet...\n")
    client, mock_openai = make_client(response)

    completion = await client.complete("Tell me about Mars", [])

    assert completion.text == "  Mars is the fourth planet...\n"
    assert completion.raw is response
    kwargs = mock_openai.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == Settings().chat_model
    assert kwargs["messages"][-1] == {"role": "user", "content": "Tell me about Mars"}


@pytest.mark.asyncio
async def test_timeout_is_transport_error():
    client, _ = make_client(side_effect=openai.APITimeoutError(request=REQUEST))

    with pytest.raises(TransportError, match="timed out"):
        await client.complete("Tell me about black holes")


@pytest.mark.asyncio
async def test_http_status_is_transport_error():
    error = openai.APIStatusError("rate limited", response=httpx.Response(429, request=REQUEST), body=None)
    client, _ = make_client(side_effect=error)

    with pytest.raises(TransportError, match="429"):
        await client.complete("Tell me about black holes")


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [MagicMock(choices=[]), chat_response(""), chat_response(None)])
async def test_empty_responses_are_parse_errors(response):
    client, _ = make_client(response)

    with pytest.raises(ParseError):
        await client.complete("Tell me about black holes")
