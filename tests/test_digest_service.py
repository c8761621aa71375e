from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from milo.config.app_config import AppConfig
from milo.config.email_config import EmailConfig
from milo.models.enums import DigestStage
from milo.services.digest_renderer import format_timestamp, render_conversation, truncate_session_id
from milo.services.digest_service import DigestAggregator
from milo.utils.error_handler import DeliveryError

from conftest import NOW


def _aggregator(repository, sender) -> DigestAggregator:
    return DigestAggregator(
        repository,
        sender,
        email_config=EmailConfig(
            resend_api_key="re_test",
            digest_recipients=["ops@example.com", "sales@example.com"],
            digest_from="Milo <digest@example.com>",
        ),
        app_config=AppConfig(public_base_url="https://example.com/"),
    )


async def test_empty_window_sends_nothing(repository, insert_row, sender) -> None:
    insert_row(created_at=NOW - timedelta(hours=25))
    insert_row(created_at=None)
    aggregator = _aggregator(repository, sender)

    report = await aggregator.build_digest(NOW)

    assert report.sent is False
    assert report.count == 0
    assert report.stage == DigestStage.EMPTY
    assert sender.sent == []


async def test_recent_records_are_sent_in_one_email(repository, insert_row, sender) -> None:
    insert_row(session_id="first", created_at=NOW - timedelta(hours=20))
    insert_row(session_id="second", created_at=NOW - timedelta(hours=2))
    insert_row(session_id="third", created_at=NOW - timedelta(minutes=5))
    insert_row(session_id="too-old", created_at=NOW - timedelta(days=2))
    aggregator = _aggregator(repository, sender)

    report = await aggregator.build_digest(NOW)

    assert report.sent is True
    assert report.count == 3
    assert report.stage == DigestStage.SENT
    assert report.delivery_id == "email_123"
    assert len(sender.sent) == 1

    email = sender.sent[0]
    assert email.to == ["ops@example.com", "sales@example.com"]
    assert email.sender == "Milo <digest@example.com>"
    assert email.subject.endswith("Daily Digest: 3 New Conversations")
    assert email.html.count('class="conversation"') == 3
    assert "too-old" not in email.html
    # newest first
    assert email.html.index("third") < email.html.index("second") < email.html.index("first")
    assert 'href="https://example.com/admin"' in email.html


async def test_single_record_subject_is_singular(repository, insert_row, sender) -> None:
    insert_row(created_at=NOW - timedelta(hours=1))

    await _aggregator(repository, sender).build_digest(NOW)

    assert sender.sent[0].subject.endswith("Daily Digest: 1 New Conversation")


async def test_delivery_failure_propagates(repository, insert_row, failing_sender) -> None:
    insert_row(created_at=NOW - timedelta(hours=1))
    aggregator = _aggregator(repository, failing_sender)

    with pytest.raises(DeliveryError):
        await aggregator.build_digest(NOW)

    assert aggregator.stage == DigestStage.FAILED
    assert len(failing_sender.sent) == 1


async def test_message_content_is_escaped(repository, insert_row, sender) -> None:
    insert_row(
        messages=[
            {"role": "user", "content": "<script>alert('x')</script>"},
            {"role": "assistant", "content": "Tom & Jerry \"quoted\""},
            {"role": "user", "content": "second question"},
        ],
        created_at=NOW - timedelta(hours=1),
    )

    await _aggregator(repository, sender).build_digest(NOW)

    html = sender.sent[0].html
    assert "<script>" not in html
    assert "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;" in html
    assert "Tom &amp; Jerry &quot;quoted&quot;" in html
    assert "User Message 1:" in html and "User Message 2:" in html
    assert "AI Response 1:" in html
    assert html.index("User Message 1:") < html.index("User Message 2:") < html.index("AI Response 1:")


def test_block_header_fields(repository, insert_row) -> None:
    insert_row(session_id="0123456789abcdefXYZ", ip="198.51.100.23", created_at=NOW)
    record = repository.list_recent(1)[0]

    block = render_conversation(record)

    assert "0123456789abcdef...</code>" in block
    assert "XYZ" not in block
    assert "198.51.100.23" in block
    assert "Oct 19, 2026, 12:00 PM" in block
    assert "<strong style=\"color: #1f2937;\">Messages:</strong> 1" in block


def test_short_session_ids_are_not_truncated() -> None:
    assert truncate_session_id("abc") == "abc"


def test_format_timestamp_uses_12_hour_clock() -> None:
    assert format_timestamp(NOW.replace(hour=0, minute=5)) == "Oct 19, 2026, 12:05 AM"
    assert format_timestamp(NOW.replace(hour=15, minute=4)) == "Oct 19, 2026, 3:04 PM"
    assert format_timestamp(None) == "unknown"


async def test_window_is_the_same_for_non_utc_now(repository, insert_row, sender) -> None:
    insert_row(session_id="stale", created_at=NOW - timedelta(hours=26))
    insert_row(session_id="fresh", created_at=NOW - timedelta(hours=23))
    aggregator = _aggregator(repository, sender)

    report = await aggregator.build_digest(NOW.astimezone(timezone(timedelta(hours=-5))))

    assert report.count == 1
    assert "fresh" in sender.sent[0].html
    assert "stale" not in sender.sent[0].html


async def test_turn_logged_exactly_one_window_ago_is_included(repository, sender) -> None:
    record = repository.add("session-edge", [], "Hello from Milo")
    aggregator = _aggregator(repository, sender)

    report = await aggregator.build_digest(record.created_at + timedelta(hours=24))

    assert report.sent is True
    assert report.count == 1
