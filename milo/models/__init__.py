"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from milo.models import ChatMessage, ConversationRecord, DigestReport
"""

from .chat_message import ChatMessage  # noqa: F401
from .chat_request import ValidConversationRequest  # noqa: F401
from .chat_response import ChatResponse  # noqa: F401
from .conversation import ConversationList, ConversationRecord, RequestInfo  # noqa: F401
from .dashboard import DashboardData, DashboardStats  # noqa: F401
from .digest import DigestReport, DigestResponse, EmailMessage  # noqa: F401
from .enums import DateFilter, DigestStage, MessageRole  # noqa: F401
