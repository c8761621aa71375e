"""General helper functions used across the application."""

from __future__ import annotations

from fastapi import Request

from ..models.conversation import UNKNOWN, RequestInfo


def client_ip(request: Request) -> str:
    """Best-effort visitor IP.

    Behind the hosting proxy the first ``X-Forwarded-For`` entry is the
    visitor; ``X-Real-IP`` and the socket peer are fallbacks.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN


def request_info(request: Request) -> RequestInfo:
    """Collect the metadata stored alongside a conversation record."""
    return RequestInfo(
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent") or UNKNOWN,
    )
