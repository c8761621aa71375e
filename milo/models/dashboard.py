"""Pydantic models for the admin dashboard."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from .conversation import ConversationRecord


class DashboardStats(BaseModel):
    """Headline counters shown above the conversation list.

    ``total`` counts every record, including ``undated`` ones that have no
    ``created_at`` and therefore never show up in ``today``/``this_week``.
    """

    total: int
    today: int
    this_week: int
    undated: int


class DashboardData(BaseModel):
    """Filtered conversations plus stats over the unfiltered set."""

    conversations: List[ConversationRecord]
    count: int
    stats: DashboardStats
