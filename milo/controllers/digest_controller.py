"""Endpoints that trigger the daily digest, manually or from a cron job."""

import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse
from loguru import logger

from ..config.app_config import AppConfig, get_app_config
from ..models.digest import DigestResponse
from ..services.digest_service import DigestAggregator, get_digest_aggregator

router = APIRouter(prefix="/send-digest", tags=["Digest"])


def _secret_matches(candidate: str | None, expected: str) -> bool:
    if candidate is None:
        return False
    return secrets.compare_digest(candidate.encode(), expected.encode())


async def _run_digest(aggregator: DigestAggregator) -> DigestResponse | JSONResponse:
    try:
        report = await aggregator.build_digest()
    except Exception as exc:
        logger.exception("Error in send-digest endpoint")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc) or type(exc).__name__},
        )
    return DigestResponse(success=True, message=report.message, conversation_count=report.count)


@router.post("", response_model=DigestResponse)
async def send_digest_endpoint(
    authorization: str | None = Header(None),
    app_config: AppConfig = Depends(get_app_config),
    aggregator: DigestAggregator = Depends(get_digest_aggregator),
) -> DigestResponse | JSONResponse:
    """Send the digest.  Requires ``Authorization: Bearer <CRON_SECRET>`` when a secret is set."""
    if app_config.cron_secret and not _secret_matches(authorization, f"Bearer {app_config.cron_secret}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return await _run_digest(aggregator)


@router.get("", response_model=DigestResponse)
async def send_digest_manual_endpoint(
    secret: str | None = Query(None),
    app_config: AppConfig = Depends(get_app_config),
    aggregator: DigestAggregator = Depends(get_digest_aggregator),
) -> DigestResponse | JSONResponse:
    """Manual trigger for testing; in production the ``secret`` query parameter is required."""
    if app_config.is_production and (
        not app_config.cron_secret or not _secret_matches(secret, app_config.cron_secret)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not available in production without secret",
        )
    return await _run_digest(aggregator)
