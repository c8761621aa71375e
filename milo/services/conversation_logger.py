"""Best-effort persistence of completed chat turns.

Logging runs after the visitor already has their reply (see
``chat_controller``), so a failure here can only be reported to the
application log.  Lost entries are not retried.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from loguru import logger

from ..models.chat_message import ChatMessage
from ..models.conversation import RequestInfo
from ..storage.repository import ConversationRepository, get_conversation_repository


class ConversationLogger:
    """Write one conversation record per successful completion."""

    def __init__(self, repository: ConversationRepository) -> None:
        self.repository = repository

    def log(
        self,
        session_id: str,
        messages: Sequence[ChatMessage],
        ai_response: str,
        request_info: RequestInfo | None = None,
    ) -> None:
        """Insert the record; never raises."""
        try:
            record = self.repository.add(
                session_id=session_id,
                messages=messages,
                ai_response=ai_response,
                request_info=request_info,
            )
        except Exception:
            logger.exception("Error logging conversation for session {}", session_id)
            return
        logger.info("Conversation logged: id={} session={}", record.id, session_id)


@lru_cache()
def get_conversation_logger() -> ConversationLogger:
    """Dependency provider returning a singleton logger."""
    return ConversationLogger(get_conversation_repository())
