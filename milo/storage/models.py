from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlmodel import Field, SQLModel


class utcnow(FunctionElement):
    """Current UTC time as rendered by the storage backend."""

    type = DateTime(timezone=True)
    inherit_cache = True


@compiles(utcnow)
def _default_utcnow(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(utcnow, "postgresql")
def _pg_utcnow(element, compiler, **kw):
    return "now()"


# Matches SQLAlchemy's SQLite datetime text layout, microseconds included
@compiles(utcnow, "sqlite")
def _sqlite_utcnow(element, compiler, **kw):
    return "(strftime('%Y-%m-%d %H:%M:%f000', 'now'))"


class ConversationRow(SQLModel, table=True):
    """
    One logged chat turn stored in the ``conversations`` table.

    Columns are only ever added to this table; historical rows are
    never migrated.
    """
    __tablename__ = "conversations"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(index=True)
    ip: str = "unknown"
    user_agent: str = "unknown"
    message_count: int = 0
    messages: Any = Field(
        default=None,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )
    ai_response: str = Field(default="", sa_column=Column(Text, nullable=False))
    # Filled by the database; NULL only on rows written before the column existed
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=utcnow(),
            nullable=True,
            index=True,
        ),
    )
