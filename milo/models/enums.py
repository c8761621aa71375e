"""Enumerations used across models."""

from enum import Enum


class MessageRole(str, Enum):
    """Enum for message roles in a conversation.

    ``USER`` denotes a visitor's message, ``ASSISTANT`` a reply from the
    model and ``SYSTEM`` the persona prompt or other system-level text.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RequestErrorKind(str, Enum):
    """Reasons an inbound chat body is rejected."""

    MALFORMED_MESSAGES = "MalformedMessages"
    MISSING_SESSION = "MissingSession"
    MALFORMED_MESSAGE = "MalformedMessage"


class GatewayErrorKind(str, Enum):
    """Failure modes of the completion provider call."""

    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    EMPTY_COMPLETION = "EmptyCompletion"
    TIMEOUT = "Timeout"


class DigestStage(str, Enum):
    """Stages a single digest run moves through.

    ``EMPTY``, ``SENT`` and ``FAILED`` are terminal.
    """

    IDLE = "idle"
    SELECTING = "selecting"
    EMPTY = "empty"
    RENDERING = "rendering"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class DateFilter(str, Enum):
    """Date windows offered by the admin dashboard."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
