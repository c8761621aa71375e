"""Daily digest of recent conversations.

A digest run selects every record from the trailing window, renders them
into one HTML e-mail and hands it to the e-mail sender.  Runs are
stateless: each one reads storage from scratch and nothing about a run is
persisted.  Stages::

    IDLE -> SELECTING -> EMPTY
                      -> RENDERING -> SENDING -> SENT | FAILED
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List

from loguru import logger

from ..config.app_config import AppConfig, get_app_config
from ..config.email_config import EmailConfig, get_email_config
from ..models.conversation import ConversationRecord
from ..models.digest import DigestReport, EmailMessage
from ..models.enums import DigestStage
from ..storage.repository import ConversationRepository, get_conversation_repository
from ..utils.error_handler import DeliveryError
from .digest_renderer import render_digest, render_subject
from .email_service import EmailSender, get_email_sender


class DigestAggregator:
    """Build and deliver the conversation digest.

    An empty window produces no e-mail.  Delivery failures are raised as
    :class:`DeliveryError` and never retried here; whoever triggered the
    run decides whether to try again.
    """

    def __init__(
        self,
        repository: ConversationRepository,
        sender: EmailSender,
        email_config: EmailConfig | None = None,
        app_config: AppConfig | None = None,
    ) -> None:
        self.repository = repository
        self.sender = sender
        self.email_config = email_config or get_email_config()
        self.app_config = app_config or get_app_config()
        self.stage = DigestStage.IDLE

    def _enter(self, stage: DigestStage) -> None:
        logger.debug("Digest stage {} -> {}", self.stage.value, stage.value)
        self.stage = stage

    async def select(self, now: datetime) -> List[ConversationRecord]:
        """Return records created in the window ending at ``now``, newest first."""
        cutoff = now - timedelta(hours=self.email_config.digest_window_hours)
        return await asyncio.to_thread(self.repository.list_since, cutoff)

    async def build_digest(self, now: datetime | None = None) -> DigestReport:
        """Run one digest for the window ending at ``now`` (default: current UTC time).

        Raises
        ------
        DeliveryError
            If the e-mail sender rejects the digest.
        StorageError
            If the conversations can not be read.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        else:
            now = now.astimezone(timezone.utc)
        self.stage = DigestStage.IDLE

        self._enter(DigestStage.SELECTING)
        records = await self.select(now)
        if not records:
            self._enter(DigestStage.EMPTY)
            logger.info(
                "No new conversations in the last {} hours. Skipping email.",
                self.email_config.digest_window_hours,
            )
            return DigestReport(
                sent=False,
                count=0,
                stage=self.stage,
                message="No new conversations to report",
            )

        self._enter(DigestStage.RENDERING)
        admin_url = f"{self.app_config.public_base_url.rstrip('/')}/admin"
        message = EmailMessage(
            sender=self.email_config.digest_from,
            to=list(self.email_config.digest_recipients),
            subject=render_subject(len(records)),
            html=render_digest(records, admin_url, self.email_config.digest_window_hours),
        )

        self._enter(DigestStage.SENDING)
        try:
            delivery_id = await self.sender.send(message)
        except DeliveryError:
            self._enter(DigestStage.FAILED)
            logger.exception("Daily digest delivery failed for {} conversation(s)", len(records))
            raise

        self._enter(DigestStage.SENT)
        logger.info("Daily digest sent: {} ({} conversation(s))", delivery_id or "<no id>", len(records))
        return DigestReport(
            sent=True,
            count=len(records),
            stage=self.stage,
            message=f"Email sent successfully with {len(records)} conversation(s)",
            delivery_id=delivery_id or None,
        )


def get_digest_aggregator() -> DigestAggregator:
    """Dependency provider returning a fresh aggregator per run."""
    return DigestAggregator(get_conversation_repository(), get_email_sender())
