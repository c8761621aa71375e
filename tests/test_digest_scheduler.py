from __future__ import annotations

from datetime import datetime, timezone

from milo.models.digest import DigestReport
from milo.models.enums import DigestStage
from milo.services.digest_scheduler import next_run_utc, run_scheduled_digest
from milo.utils.error_handler import DeliveryError


def test_next_run_later_today() -> None:
    now = datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc)

    assert next_run_utc(now, 8, 0) == datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def test_next_run_rolls_over_to_tomorrow() -> None:
    now = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

    assert next_run_utc(now, 8, 0) == datetime(2026, 10, 20, 8, 0, tzinfo=timezone.utc)


class StubAggregator:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list = []

    async def build_digest(self, now=None) -> DigestReport:
        self.calls.append(now)
        if self.error is not None:
            raise self.error
        return DigestReport(sent=True, count=2, stage=DigestStage.SENT, message="sent")


async def test_scheduled_run_uses_window_end() -> None:
    aggregator = StubAggregator()
    window_end = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

    await run_scheduled_digest(lambda: aggregator, window_end=window_end)

    assert aggregator.calls == [window_end]


async def test_scheduled_run_swallows_failures() -> None:
    aggregator = StubAggregator(error=DeliveryError("rejected"))

    await run_scheduled_digest(lambda: aggregator)

    assert aggregator.calls == [None]
