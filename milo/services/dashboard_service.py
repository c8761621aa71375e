"""Derived views over conversation records for the admin dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Sequence

from ..models.conversation import ConversationRecord
from ..models.dashboard import DashboardStats
from ..models.enums import DateFilter

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


def _matches_search(record: ConversationRecord, term: str) -> bool:
    if term in record.session_id.lower() or term in record.ip.lower():
        return True
    return any(term in message.content.lower() for message in record.messages)


def _matches_date(record: ConversationRecord, date_filter: DateFilter, now: datetime) -> bool:
    if date_filter == DateFilter.ALL:
        return True
    # Undated records only appear in the unfiltered view
    if record.created_at is None:
        return False
    if date_filter == DateFilter.TODAY:
        return record.created_at.astimezone(timezone.utc).date() == now.date()
    if date_filter == DateFilter.WEEK:
        return record.created_at >= now - WEEK
    return record.created_at >= now - MONTH


def filter_conversations(
    records: Iterable[ConversationRecord],
    search: str | None = None,
    date_filter: DateFilter = DateFilter.ALL,
    now: datetime | None = None,
) -> List[ConversationRecord]:
    """Apply the dashboard's text search and date window, keeping order."""
    now = _utc(now)
    term = (search or "").strip().lower()
    return [
        record
        for record in records
        if (not term or _matches_search(record, term)) and _matches_date(record, date_filter, now)
    ]


def dashboard_stats(records: Sequence[ConversationRecord], now: datetime | None = None) -> DashboardStats:
    now = _utc(now)
    return DashboardStats(
        total=len(records),
        today=sum(1 for record in records if _matches_date(record, DateFilter.TODAY, now)),
        this_week=sum(1 for record in records if _matches_date(record, DateFilter.WEEK, now)),
        undated=sum(1 for record in records if record.created_at is None),
    )


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)
