"""Adapter around the chat model that decides and phrases each turn.

Two calls per turn at most:

* ``decide``     — catalog bound with automatic tool selection; the model
                   either answers or requests one capability.
* ``synthesize`` — no capability may be requested; the model turns the
                   tool result into the final reply.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, AnyMessage
from langchain_core.tools import BaseTool

from agenda.config import Settings
from agenda.services.metrics import metrics

logger = logging.getLogger(__name__)


def build_chat_model(settings: Settings) -> BaseChatModel:
    """Instantiate the LangChain chat model for the configured provider."""
    if settings.llm_provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=settings.model_name,
            api_key=settings.api_key,
            temperature=settings.temperature,
            max_tokens=1024,
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=settings.model_name,
        api_key=settings.api_key,
        temperature=settings.temperature,
    )


class CompletionService:
    """Stateless request/response wrapper with metrics around each call."""

    def __init__(self, settings: Settings, chat_model: BaseChatModel | None = None) -> None:
        self._settings = settings
        self._model = chat_model or build_chat_model(settings)

    @property
    def provider(self) -> str:
        return self._settings.llm_provider

    def decide(self, messages: Sequence[AnyMessage], tools: Sequence[BaseTool]) -> AIMessage:
        """Ask the model to answer directly or request a capability."""
        llm = self._model.bind_tools(list(tools), tool_choice="auto")
        return self._invoke(llm, messages, "decide")

    def synthesize(self, messages: Sequence[AnyMessage], tools: Sequence[BaseTool]) -> AIMessage:
        """Ask the model for the final natural-language reply.

        The Anthropic Messages API refuses tool-result blocks unless tool
        definitions are present, so there the catalog is bound with tool
        selection ``none``.  Other providers get no catalog at all.
        """
        if self.provider == "anthropic":
            llm = self._model.bind_tools(list(tools), tool_choice={"type": "none"})
        else:
            llm = self._model
        return self._invoke(llm, messages, "synthesize")

    def _invoke(self, llm, messages: Sequence[AnyMessage], operation: str) -> AIMessage:
        t0 = time.perf_counter()
        try:
            response = llm.invoke(list(messages))
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                self.provider, operation,
                error_type=type(exc).__name__, latency_ms=elapsed,
            )
            raise
        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success(self.provider, operation, latency_ms=elapsed)
        logger.debug("%s (%s) responded in %.0fms", operation, self._settings.model_name, elapsed)
        return response
