from __future__ import annotations

from datetime import timedelta

import pytest

from milo.services.query_service import ConversationQueryService
from milo.utils.error_handler import QueryError, StorageError

from conftest import NOW


class BrokenRepository:
    def list_recent(self, limit):
        raise StorageError("connection refused")


def test_list_recent_is_bounded_and_newest_first(repository, insert_row) -> None:
    for hours in (5, 1, 3, 2, 4):
        insert_row(created_at=NOW - timedelta(hours=hours))

    records = ConversationQueryService(repository, max_limit=1000).list_recent(3)

    assert len(records) == 3
    stamps = [r.created_at for r in records]
    assert stamps == sorted(stamps, reverse=True)
    assert stamps[0] == NOW - timedelta(hours=1)


def test_default_limit_is_capped_by_configuration(repository, insert_row) -> None:
    for minute in range(4):
        insert_row(created_at=NOW - timedelta(minutes=minute))

    service = ConversationQueryService(repository, max_limit=2)

    assert len(service.list_recent()) == 2
    assert len(service.list_recent(50)) == 2


def test_undated_records_are_still_listed(repository, insert_row) -> None:
    insert_row(session_id="dated")
    insert_row(session_id="legacy", created_at=None)

    records = ConversationQueryService(repository, max_limit=10).list_recent()

    assert [r.session_id for r in records] == ["dated", "legacy"]


def test_storage_failure_surfaces_as_query_error() -> None:
    with pytest.raises(QueryError):
        ConversationQueryService(BrokenRepository(), max_limit=10).list_recent()
