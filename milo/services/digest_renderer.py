"""HTML rendering for the daily conversation digest e-mail."""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape
from typing import Sequence

from ..models.conversation import ConversationRecord
from ..models.enums import MessageRole

SESSION_PREFIX_LENGTH = 16


def format_timestamp(value: datetime | None) -> str:
    """Format a timestamp like ``Oct 19, 2026, 3:04 PM`` (UTC)."""
    if value is None:
        return "unknown"
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value:%M} {value:%p}"


def truncate_session_id(session_id: str) -> str:
    if len(session_id) <= SESSION_PREFIX_LENGTH:
        return session_id
    return f"{session_id[:SESSION_PREFIX_LENGTH]}..."


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def render_conversation(record: ConversationRecord) -> str:
    """Render one record as an HTML block.

    User messages are listed first, then assistant messages, each group in
    its original order.  All stored text is HTML-escaped.
    """
    user_messages = [m for m in record.messages if m.role == MessageRole.USER]
    assistant_messages = [m for m in record.messages if m.role == MessageRole.ASSISTANT]

    parts = [
        f'<div class="conversation" data-conversation-id="{record.id}" '
        'style="border: 1px solid #e5e7eb; border-radius: 8px; padding: 16px; '
        'margin-bottom: 24px; background-color: #f9fafb;">',
        '<div style="margin-bottom: 12px;">',
        '<strong style="color: #1f2937;">Session:</strong> '
        f'<code style="background: #e5e7eb; padding: 2px 6px; border-radius: 4px;">'
        f"{escape(truncate_session_id(record.session_id))}</code><br>",
        f'<strong style="color: #1f2937;">IP:</strong> {escape(record.ip)}<br>',
        f'<strong style="color: #1f2937;">Time:</strong> {format_timestamp(record.created_at)}<br>',
        f'<strong style="color: #1f2937;">Messages:</strong> {record.message_count}',
        "</div>",
        '<hr style="border: none; border-top: 1px solid #e5e7eb; margin: 16px 0;">',
    ]

    for index, message in enumerate(user_messages, start=1):
        parts.append(
            '<div style="margin-bottom: 12px; background: #eff6ff; padding: 12px; '
            'border-radius: 6px; border-left: 3px solid #3b82f6;">'
            '<strong style="color: #1e40af; font-size: 12px; text-transform: uppercase;">'
            f"User Message {index}:</strong>"
            '<p style="margin: 8px 0 0 0; color: #1f2937; white-space: pre-wrap;">'
            f"{escape(message.content)}</p></div>"
        )

    for index, message in enumerate(assistant_messages, start=1):
        parts.append(
            '<div style="margin-bottom: 12px; background: #f3f4f6; padding: 12px; '
            'border-radius: 6px; border-left: 3px solid #6b7280;">'
            '<strong style="color: #374151; font-size: 12px; text-transform: uppercase;">'
            f"AI Response {index}:</strong>"
            '<p style="margin: 8px 0 0 0; color: #1f2937; white-space: pre-wrap;">'
            f"{escape(message.content)}</p></div>"
        )

    parts.append("</div>")
    return "\n".join(parts)


def render_subject(count: int) -> str:
    return f"\U0001F4CA Daily Digest: {count} New Conversation{'' if count == 1 else 's'}"


def render_digest(records: Sequence[ConversationRecord], admin_url: str, window_hours: int = 24) -> str:
    """Wrap the rendered records in a complete HTML document."""
    blocks = "\n".join(render_conversation(record) for record in records)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #1f2937; margin: 0; padding: 0;">
  <div style="max-width: 800px; margin: 0 auto; padding: 24px;">
    <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 24px; border-radius: 8px 8px 0 0;">
      <h1 style="margin: 0; font-size: 28px;">Daily Conversation Digest</h1>
      <p style="margin: 8px 0 0 0; opacity: 0.9;">Archpoint Labs Chat Analytics</p>
    </div>
    <div style="padding: 24px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 8px 8px;">
      <p style="font-size: 18px; color: #1e40af;">
        <strong>{len(records)}</strong> new {'conversation' if len(records) == 1 else 'conversations'} in the last {pluralize(window_hours, 'hour')}
      </p>
{blocks}
      <hr style="border: none; border-top: 2px solid #e5e7eb; margin: 24px 0;">
      <div style="text-align: center; color: #6b7280; font-size: 14px;">
        <p>This is an automated daily digest from your Archpoint Labs website.</p>
        <p><a href="{escape(admin_url)}" style="color: #3b82f6; text-decoration: none;">View Admin Dashboard</a></p>
      </div>
    </div>
  </div>
</body>
</html>
"""
