from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
import json
from typing import Any, List, Sequence

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from ..models.chat_message import ChatMessage
from ..models.conversation import UNKNOWN, ConversationRecord, RequestInfo
from ..utils.error_handler import StorageError
from .db import get_engine, get_session
from .models import ConversationRow


class ConversationRepository:
    """Append-only access to the ``conversations`` table.

    Rows are inserted once and read many times; there is no update or
    delete.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def add(
        self,
        session_id: str,
        messages: Sequence[ChatMessage],
        ai_response: str,
        request_info: RequestInfo | None = None,
    ) -> ConversationRecord:
        """
        Insert one conversation record and return it as stored.
        """
        info = request_info or RequestInfo()
        row = ConversationRow(
            session_id=session_id,
            ip=info.ip or UNKNOWN,
            user_agent=info.user_agent or UNKNOWN,
            message_count=len(messages),
            messages=[message.model_dump(mode="json") for message in messages],
            ai_response=ai_response,
        )
        try:
            with get_session(self.engine) as session:
                session.add(row)
                session.commit()
                # created_at comes from the server default
                session.refresh(row)
                return _row_to_record(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to insert conversation for session {session_id}") from exc

    def list_recent(self, limit: int) -> List[ConversationRecord]:
        """
        Return up to ``limit`` records, newest first.
        Equal timestamps fall back to insertion order; undated rows come last.
        """
        statement = (
            select(ConversationRow)
            .order_by(col(ConversationRow.created_at).desc().nulls_last(), col(ConversationRow.id).desc())
            .limit(limit)
        )
        return self._fetch(statement)

    def list_since(self, cutoff: datetime) -> List[ConversationRecord]:
        """
        Return every record created at or after ``cutoff``, newest first.
        Rows without ``created_at`` never match.
        """
        if cutoff.tzinfo is not None:
            # stored timestamps are UTC wall-clock values on SQLite
            cutoff = cutoff.astimezone(timezone.utc)
        statement = (
            select(ConversationRow)
            .where(col(ConversationRow.created_at).is_not(None))
            .where(col(ConversationRow.created_at) >= cutoff)
            .order_by(col(ConversationRow.created_at).desc(), col(ConversationRow.id).desc())
        )
        return self._fetch(statement)

    def _fetch(self, statement: Any) -> List[ConversationRecord]:
        try:
            with get_session(self.engine) as session:
                rows = session.exec(statement).all()
                return [_row_to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read conversations") from exc


def _row_to_record(row: ConversationRow) -> ConversationRecord:
    return ConversationRecord(
        id=row.id,
        session_id=row.session_id,
        ip=row.ip or UNKNOWN,
        user_agent=row.user_agent or UNKNOWN,
        message_count=row.message_count,
        messages=_decode_messages(row.id, row.messages),
        ai_response=row.ai_response or "",
        created_at=row.created_at,
    )


def _decode_messages(row_id: int | None, raw: Any) -> List[ChatMessage]:
    """Turn the stored JSON column back into messages.

    Some early rows hold the array as a JSON string rather than a JSON
    value, and some store widget messages whose text lives in ``parts``.
    Entries that still can not be read are skipped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Conversation {} has unreadable messages JSON", row_id)
            return []
    if not isinstance(raw, list):
        logger.warning("Conversation {} messages column is not a list", row_id)
        return []

    messages: List[ChatMessage] = []
    for entry in raw:
        if isinstance(entry, dict) and "content" not in entry and isinstance(entry.get("parts"), list):
            entry = {
                "role": entry.get("role"),
                "content": "".join(
                    part.get("text", "")
                    for part in entry["parts"]
                    if isinstance(part, dict) and part.get("type") == "text"
                ),
            }
        try:
            messages.append(ChatMessage.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed message in conversation {}", row_id)
    return messages


@lru_cache()
def get_conversation_repository() -> ConversationRepository:
    """Return a cached repository bound to the configured engine."""
    return ConversationRepository(get_engine())
