from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from sqlalchemy import insert
from sqlmodel import Session

from milo.models.digest import EmailMessage
from milo.storage.db import create_db_engine, init_db
from milo.storage.models import ConversationRow
from milo.storage.repository import ConversationRepository
from milo.utils.error_handler import DeliveryError


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> ConversationRepository:
    return ConversationRepository(engine)


@pytest.fixture
def insert_row(engine):
    """Insert a row with full control over ``created_at`` (including NULL)."""

    def _insert(
        session_id: str = "session-1",
        messages: Any = None,
        ai_response: str = "Hello from Milo",
        created_at: datetime | None = NOW,
        ip: str = "203.0.113.7",
        user_agent: str = "pytest",
    ) -> int:
        if messages is None:
            messages = [{"role": "user", "content": "Hi"}]
        message_count = len(messages) if isinstance(messages, list) else 0
        with Session(engine) as session:
            result = session.execute(
                insert(ConversationRow).values(
                    session_id=session_id,
                    ip=ip,
                    user_agent=user_agent,
                    message_count=message_count,
                    messages=messages,
                    ai_response=ai_response,
                    created_at=created_at,
                )
            )
            session.commit()
            return result.inserted_primary_key[0]

    return _insert


class RecordingSender:
    """E-mail sender double that remembers what it was asked to send."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.error = error

    async def send(self, message: EmailMessage) -> str:
        self.sent.append(message)
        if self.error is not None:
            raise self.error
        return "email_123"


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def failing_sender() -> RecordingSender:
    return RecordingSender(error=DeliveryError("Resend error 422: invalid from address"))
