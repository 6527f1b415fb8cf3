"""Chat-model capability used by the orchestrator, one variant per provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage

from pr_report.agent.registry import ToolRegistry
from pr_report.errors import ModelInvocationFailure
from pr_report.obs.logging import get_logger

logger = get_logger("model")


class ChatModel(ABC):
    """Given the conversation so far and the tools on offer, produce the next AI turn."""

    @abstractmethod
    async def invoke(
        self, messages: Sequence[BaseMessage], registry: ToolRegistry
    ) -> AIMessage:
        """Return the model's next message, possibly carrying tool calls.

        Raises:
            ModelInvocationFailure: the provider call failed.
        """


class OpenAIChatModel(ChatModel):
    """OpenAI chat completions through `langchain_openai.ChatOpenAI`."""

    def __init__(
        self,
        model: str = "gpt-4o",
        *,
        api_key: str | None = None,
        temperature: float = 0.0,
        llm: Any | None = None,
    ) -> None:
        if llm is None:
            from langchain_openai import ChatOpenAI

            kwargs: dict[str, Any] = {"model": model, "temperature": temperature}
            if api_key:
                kwargs["api_key"] = api_key
            llm = ChatOpenAI(**kwargs)
        self.llm = llm
        self.model = model

    async def invoke(
        self, messages: Sequence[BaseMessage], registry: ToolRegistry
    ) -> AIMessage:
        bound = self.llm.bind_tools(registry.tool_definitions())
        try:
            response = await bound.ainvoke(list(messages))
        except Exception as exc:
            logger.error("model_invocation_failed", model=self.model, error=str(exc))
            raise ModelInvocationFailure(f"{self.model} call failed: {exc}") from exc

        if not isinstance(response, AIMessage):
            raise ModelInvocationFailure(
                f"{self.model} returned {type(response).__name__}, expected AIMessage"
            )
        return response
