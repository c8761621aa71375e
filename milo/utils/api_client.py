"""Simple HTTP client utilities using httpx."""

from __future__ import annotations

import httpx
from typing import Any, Dict, Optional


async def post(
    url: str,
    json: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """Perform an asynchronous HTTP POST request."""
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        return await client.post(url, json=json, headers=headers)
