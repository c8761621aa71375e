from __future__ import annotations

import pytest

from milo.models.enums import MessageRole, RequestErrorKind
from milo.services.validator import validate
from milo.utils.error_handler import RequestError


def _kind(body) -> RequestErrorKind:
    with pytest.raises(RequestError) as excinfo:
        validate(body)
    return excinfo.value.kind


def test_valid_body_is_accepted_in_order() -> None:
    request = validate(
        {
            "sessionId": "abc123",
            "messages": [
                {"role": "user", "content": "What do you do?"},
                {"role": "assistant", "content": "We help with AI strategy."},
                {"role": "user", "content": "Pricing?"},
            ],
        }
    )

    assert request.session_id == "abc123"
    assert [m.role for m in request.messages] == [MessageRole.USER, MessageRole.ASSISTANT, MessageRole.USER]
    assert request.messages[-1].content == "Pricing?"


def test_empty_messages_array_is_a_valid_first_turn() -> None:
    request = validate({"sessionId": "s1", "messages": []})

    assert request.session_id == "s1"
    assert request.messages == ()


def test_snake_case_session_id_is_accepted() -> None:
    assert validate({"session_id": "s2", "messages": []}).session_id == "s2"


def test_whitespace_only_content_is_kept_as_sent() -> None:
    request = validate({"sessionId": "s1", "messages": [{"role": "user", "content": "  "}]})

    assert request.messages[0].content == "  "


@pytest.mark.parametrize(
    "body",
    [
        {"sessionId": "s1"},
        {"sessionId": "s1", "messages": None},
        {"sessionId": "s1", "messages": "hello"},
        {"sessionId": "s1", "messages": {"role": "user", "content": "hi"}},
        ["not", "an", "object"],
        None,
    ],
)
def test_missing_or_non_array_messages(body) -> None:
    assert _kind(body) == RequestErrorKind.MALFORMED_MESSAGES


@pytest.mark.parametrize("session_id", [None, "", "   ", 42])
def test_missing_session(session_id) -> None:
    body = {"messages": [{"role": "user", "content": "hi"}]}
    if session_id is not None:
        body["sessionId"] = session_id
    assert _kind(body) == RequestErrorKind.MISSING_SESSION


@pytest.mark.parametrize(
    "message",
    [
        {"role": "user"},
        {"content": "hi"},
        {"role": "", "content": "hi"},
        {"role": "user", "content": ""},
        {"role": "robot", "content": "hi"},
        {"role": "user", "content": ["parts"]},
        "hi",
    ],
)
def test_malformed_message(message) -> None:
    body = {"sessionId": "s1", "messages": [{"role": "user", "content": "ok"}, message]}

    with pytest.raises(RequestError) as excinfo:
        validate(body)

    assert excinfo.value.kind == RequestErrorKind.MALFORMED_MESSAGE
    assert excinfo.value.index == 1


def test_rules_are_checked_in_order() -> None:
    # Both messages and session are wrong: the messages rule wins.
    assert _kind({"messages": "nope"}) == RequestErrorKind.MALFORMED_MESSAGES
    # Session and a message are wrong: the session rule wins.
    assert _kind({"messages": [{"role": "user"}]}) == RequestErrorKind.MISSING_SESSION
