"""Validation of inbound chat request bodies.

Pure functions only: nothing here touches the network or the database,
so every rule can be unit tested with plain dictionaries.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.chat_message import ChatMessage
from ..models.chat_request import ValidConversationRequest
from ..models.enums import MessageRole, RequestErrorKind
from ..utils.error_handler import RequestError

_ROLES = {role.value for role in MessageRole}


def _session_id(body: Mapping[str, Any]) -> Any:
    # The widget sends camelCase; snake_case is accepted for server-side callers.
    if "sessionId" in body:
        return body["sessionId"]
    return body.get("session_id")


def validate(body: Any) -> ValidConversationRequest:
    """Check a raw chat body and return the validated request.

    Rules are applied in order and the first failure wins:

    1. ``messages`` is present and is a list.
    2. ``sessionId`` is present and is non-empty text.
    3. Every message has a non-empty ``role`` (user, assistant or system)
       and non-empty text ``content``.

    An empty ``messages`` list is valid; it is the first turn of a new
    session.

    Raises
    ------
    RequestError
        With ``kind`` set to the rule that failed.
    """
    if not isinstance(body, Mapping):
        raise RequestError(RequestErrorKind.MALFORMED_MESSAGES, "Request body must be a JSON object")

    raw_messages = body.get("messages")
    if not isinstance(raw_messages, list):
        raise RequestError(RequestErrorKind.MALFORMED_MESSAGES, "messages must be an array")

    session_id = _session_id(body)
    if not isinstance(session_id, str) or not session_id.strip():
        raise RequestError(RequestErrorKind.MISSING_SESSION, "sessionId is required")

    messages = []
    for index, item in enumerate(raw_messages):
        if not isinstance(item, Mapping):
            raise RequestError(
                RequestErrorKind.MALFORMED_MESSAGE,
                f"messages[{index}] must be an object",
                index=index,
            )
        role = item.get("role")
        content = item.get("content")
        if not isinstance(role, str) or role not in _ROLES:
            raise RequestError(
                RequestErrorKind.MALFORMED_MESSAGE,
                f"messages[{index}] has a missing or unknown role",
                index=index,
            )
        if not isinstance(content, str) or not content:
            raise RequestError(
                RequestErrorKind.MALFORMED_MESSAGE,
                f"messages[{index}] has empty content",
                index=index,
            )
        messages.append(ChatMessage(role=MessageRole(role), content=content))

    return ValidConversationRequest(session_id=session_id, messages=tuple(messages))
