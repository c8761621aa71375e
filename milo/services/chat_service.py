"""Orchestration of a single chat turn.

The ChatService validates the widget's request body, resolves the persona
prompt and asks the completion gateway for a reply.  Persisting the turn
is left to the controller, which schedules it after the response has been
sent.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable

from loguru import logger

from ..models.chat_request import ValidConversationRequest
from ..prompts.system import get_system_prompt
from .llm_service import CompletionGateway, get_completion_gateway
from .validator import validate


class ChatService:
    """Coordinates validation, prompt resolution and the model call."""

    def __init__(
        self,
        gateway: CompletionGateway | None = None,
        prompt_provider: Callable[[], str] = get_system_prompt,
    ) -> None:
        self.gateway = gateway or get_completion_gateway()
        self.prompt_provider = prompt_provider

    async def reply(self, body: Any) -> tuple[ValidConversationRequest, str]:
        """Validate ``body`` and return it together with the model's reply.

        Raises
        ------
        RequestError
            If the body fails validation; the gateway is not called.
        GatewayError
            If the completion provider fails.
        """
        request = validate(body)
        logger.info(
            "Chat turn for session {} with {} message(s)",
            request.session_id,
            len(request.messages),
        )
        text = await self.gateway.complete(self.prompt_provider(), request.messages)
        logger.debug("Completion for session {}: {} characters", request.session_id, len(text))
        return request, text


@lru_cache()
def get_chat_service() -> ChatService:
    """Dependency provider returning a singleton chat service."""
    return ChatService()
