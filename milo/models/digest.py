"""Models for digest runs and e-mail delivery."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import DigestStage


class EmailMessage(BaseModel):
    """An outbound HTML e-mail."""

    sender: str
    to: List[str]
    subject: str
    html: str


class DigestReport(BaseModel):
    """Outcome of a single digest run."""

    sent: bool
    count: int
    stage: DigestStage
    message: str
    delivery_id: Optional[str] = None


class DigestResponse(BaseModel):
    """HTTP payload for the send-digest endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    conversation_count: int = Field(..., alias="conversationCount")
