"""Relational storage for logged conversations."""

from .db import create_db_engine, get_engine, init_db  # noqa: F401
from .repository import ConversationRepository, get_conversation_repository  # noqa: F401
