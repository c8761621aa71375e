"""Request models for the chat API."""

from pydantic import BaseModel, ConfigDict, Field

from .chat_message import ChatMessage


class ValidConversationRequest(BaseModel):
    """A chat body that passed validation.

    ``messages`` is the visitor-visible history up to and including the
    latest user turn.  It may be empty for the first turn of a session.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., min_length=1)
    messages: tuple[ChatMessage, ...] = ()
