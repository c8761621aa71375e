"""Read access to logged conversations for the admin surface."""

from __future__ import annotations

from functools import lru_cache
from typing import List

from loguru import logger

from ..config.app_config import get_app_config
from ..models.conversation import ConversationRecord
from ..storage.repository import ConversationRepository, get_conversation_repository
from ..utils.error_handler import QueryError, StorageError


class ConversationQueryService:
    """Fetch stored conversations, most recent first.

    No filtering happens here beyond the count bound; date and text
    filtering for the dashboard live in :mod:`dashboard_service`.
    """

    def __init__(self, repository: ConversationRepository, max_limit: int | None = None) -> None:
        self.repository = repository
        self.max_limit = max_limit or get_app_config().conversation_list_limit

    def list_recent(self, limit: int | None = None) -> List[ConversationRecord]:
        """Return at most ``limit`` records ordered by ``created_at`` descending.

        ``limit`` defaults to, and is capped at, the configured list limit.

        Raises
        ------
        QueryError
            If the conversations table can not be read.
        """
        bound = self.max_limit if limit is None else max(0, min(limit, self.max_limit))
        try:
            records = self.repository.list_recent(bound)
        except StorageError as exc:
            raise QueryError(str(exc)) from exc
        logger.debug("Fetched {} conversation(s) (limit={})", len(records), bound)
        return records


@lru_cache()
def get_query_service() -> ConversationQueryService:
    """Dependency provider returning a singleton query service."""
    return ConversationQueryService(get_conversation_repository())
