import pytest

from app.core.errors import ParseError, TransportError


@pytest.fixture
def timeout_error():
    return TransportError("chat request timed out")


@pytest.fixture
def parse_error():
    return ParseError("no JSON object in moderation response")
