from app.core.composer import BOX_BREATHING, RETRY, SAVE_PROGRESS, ResponseComposer
from app.core.turn import (
    ChatCompletion,
    Delivered,
    InputBlocked,
    ModerationCategory,
    ModerationVerdict,
    OutputBlocked,
    Turn,
    UpstreamFailed,
)

composer = ResponseComposer()


def test_delivered_for_authenticated_user():
    reply = composer.compose(Delivered(ChatCompletion(text="Steady lah cadet")), Turn(message="hi", user_id="u1"))

    payload = reply.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert payload == {"reply": "Steady lah cadet", "blocked": False}


def test_delivered_for_anonymous_user_suggests_saving_progress():
    reply = composer.compose(Delivered(ChatCompletion(text="ok")), Turn(message="hi", is_anonymous=True))

    assert reply.action_buttons == [SAVE_PROGRESS]


def test_blocked_payload_never_contains_rationale():
    verdict = ModerationVerdict(approved=False, category=ModerationCategory.SELF_HARM, rationale="user asked about X")
    reply = composer.compose(InputBlocked(message="fixed", verdict=verdict), Turn(message="hi"))

    payload = reply.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert payload["blockedStage"] == "input"
    assert payload["actionButtons"] == [BOX_BREATHING.model_dump()]
    assert "user asked about X" not in str(payload)


def test_upstream_failure_offers_retry_without_error_detail():
    reply = composer.compose(
        UpstreamFailed(message="fixed fallback", reason="TransportError: chat returned HTTP 503"),
        Turn(message="hi"),
    )

    payload = reply.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert payload["blocked"] is True
    assert payload["blockedStage"] == "upstream"
    assert payload["actionButtons"] == [RETRY.model_dump()]
    assert "503" not in str(payload)


def test_output_fail_safe_has_no_actions():
    reply = composer.compose(OutputBlocked(message="fixed", failure="ParseError: bad"), Turn(message="hi"))

    assert reply.blocked_stage.value == "output"
    assert reply.action_buttons is None


def test_unexpected_error_reply_matches_upstream_fallback():
    payload = composer.unexpected_error().model_dump(mode="json", by_alias=True, exclude_none=True)

    assert payload["blocked"] is True
    assert payload["blockedStage"] == "upstream"
    assert payload["actionButtons"] == [RETRY.model_dump()]
