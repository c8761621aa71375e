"""Models representing chat messages."""

from pydantic import BaseModel, ConfigDict

from .enums import MessageRole


class ChatMessage(BaseModel):
    """A single turn of a conversation.

    Messages are immutable once created; their position in the
    surrounding list is the only ordering information.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
