"""Admin endpoints for browsing logged conversations."""

from fastapi import APIRouter, Depends, Query

from ..models.conversation import ConversationList
from ..models.dashboard import DashboardData
from ..models.enums import DateFilter
from ..services.dashboard_service import dashboard_stats, filter_conversations
from ..services.query_service import ConversationQueryService, get_query_service

router = APIRouter(prefix="/conversations", tags=["Admin"])


@router.get("", response_model=ConversationList)
async def list_conversations_endpoint(
    limit: int = Query(1000, ge=1, le=1000),
    service: ConversationQueryService = Depends(get_query_service),
) -> ConversationList:
    """Return the most recent conversations, newest first."""
    conversations = service.list_recent(limit)
    return ConversationList(conversations=conversations, count=len(conversations))


@router.get("/dashboard", response_model=DashboardData)
async def dashboard_endpoint(
    search: str | None = Query(None, max_length=200),
    date_filter: DateFilter = Query(DateFilter.ALL),
    limit: int = Query(1000, ge=1, le=1000),
    service: ConversationQueryService = Depends(get_query_service),
) -> DashboardData:
    """Return filtered conversations plus headline stats over all of them."""
    records = service.list_recent(limit)
    filtered = filter_conversations(records, search=search, date_filter=date_filter)
    return DashboardData(
        conversations=filtered,
        count=len(filtered),
        stats=dashboard_stats(records),
    )
