"""Response model for the chat API."""

from pydantic import BaseModel


class ChatResponse(BaseModel):
    """The assistant's reply to a chat request."""

    message: str
