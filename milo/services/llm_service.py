"""Service encapsulating calls to the completion provider.

Uses LangChain's ChatOpenAI integration to talk to an OpenAI-compatible
chat completion API.  The gateway prepends the persona prompt to the
visitor's history, waits for a single non-streaming reply and translates
provider failures into :class:`GatewayError`.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Sequence

import openai
from loguru import logger
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_message import ChatMessage
from ..models.enums import GatewayErrorKind, MessageRole
from ..utils.error_handler import GatewayError


class CompletionGateway:
    """Forward a conversation to the language model and return its reply.

    Model name, ``temperature`` and ``max_tokens`` come from
    :class:`LlmConfig` and are the same for every request.  The whole call,
    retries included, is bounded by ``LlmConfig.timeout`` seconds.
    """

    def __init__(self, llm_config: LlmConfig | None = None, llm: BaseChatModel | None = None) -> None:
        self.llm_config = llm_config or get_llm_config()
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        """The chat model, built from configuration on first use."""
        if self._llm is None:
            llm_kwargs: dict[str, object] = {
                "api_key": self.llm_config.api_key,
                "model": self.llm_config.model,
                "temperature": self.llm_config.temperature,
                "max_tokens": self.llm_config.max_tokens,
                "timeout": self.llm_config.timeout,
            }
            if self.llm_config.base_url:
                llm_kwargs["base_url"] = self.llm_config.base_url
            self._llm = ChatOpenAI(**llm_kwargs)
        return self._llm

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        """Return the model's reply to ``messages``.

        Raises
        ------
        GatewayError
            ``TIMEOUT`` when the call exceeds the configured ceiling,
            ``PROVIDER_UNAVAILABLE`` when the provider answers with an error
            status or can not be reached, ``EMPTY_COMPLETION`` when it
            answers without any text.
        """
        prompt = build_prompt(system_prompt, messages)
        logger.debug("Requesting completion for {} message(s)", len(messages))
        try:
            result = await asyncio.wait_for(self.llm.ainvoke(prompt), timeout=self.llm_config.timeout)
        except (asyncio.TimeoutError, openai.APITimeoutError) as exc:
            raise GatewayError(
                GatewayErrorKind.TIMEOUT,
                f"Completion did not finish within {self.llm_config.timeout}s",
            ) from exc
        except (openai.APIStatusError, openai.APIConnectionError) as exc:
            raise GatewayError(
                GatewayErrorKind.PROVIDER_UNAVAILABLE,
                f"Completion provider error: {exc}",
            ) from exc

        text = extract_text(result)
        if not text.strip():
            raise GatewayError(GatewayErrorKind.EMPTY_COMPLETION, "Completion provider returned no text")
        return text


def build_prompt(system_prompt: str, messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """Convert chat history into LangChain messages led by the persona."""
    prompt: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for message in messages:
        if message.role == MessageRole.USER:
            prompt.append(HumanMessage(content=message.content))
        elif message.role == MessageRole.ASSISTANT:
            prompt.append(AIMessage(content=message.content))
        else:
            prompt.append(SystemMessage(content=message.content))
    return prompt


def extract_text(result: object) -> str:
    """Pull the reply text out of a model response.

    Content may be a plain string or a list of content blocks, of which
    only the text blocks are kept.
    """
    content = getattr(result, "content", None)
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


@lru_cache()
def get_completion_gateway() -> CompletionGateway:
    """Dependency provider returning a singleton gateway."""
    return CompletionGateway()
