"""Tool-calling agent loop driving one report run to completion."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from pydantic import BaseModel, ValidationError

from pr_report.agent.models import ChatModel
from pr_report.agent.registry import ToolRegistry
from pr_report.config import AgentConfig
from pr_report.errors import (
    AgentBudgetExceeded,
    SchemaValidationFailure,
    ToolConfigurationError,
)
from pr_report.obs.logging import get_logger
from pr_report.types import ToolTrace

logger = get_logger("agent")


class AgentState(str, Enum):
    AGENT = "agent"
    TOOLS = "tools"
    END = "end"


@dataclass(frozen=True, slots=True)
class Conversation:
    """Append-only message sequence; `append` returns a new value."""

    messages: tuple[BaseMessage, ...] = ()

    def append(self, *messages: BaseMessage) -> "Conversation":
        return Conversation(self.messages + messages)

    @property
    def last(self) -> BaseMessage:
        return self.messages[-1]

    def __len__(self) -> int:
        return len(self.messages)


@dataclass(slots=True)
class AgentRun:
    """Outcome of one completed run."""

    report: BaseModel
    conversation: Conversation
    states: list[AgentState]
    tool_traces: list[ToolTrace] = field(default_factory=list)


class AgentOrchestrator:
    """State machine over `AGENT -> TOOLS -> AGENT ... -> END`.

    `AGENT` asks the model for its next turn. If that turn carries no tool
    call, or its first call names the terminal tool, the run ends and the
    terminal call's arguments are validated into the result. Otherwise every
    pending call is executed in `TOOLS`, one `ToolMessage` per call id, and
    control returns to `AGENT`.

    Each run is bounded by `AgentConfig.max_tool_cycles` and
    `AgentConfig.timeout_seconds`; running out of either raises
    `AgentBudgetExceeded`.
    """

    def __init__(
        self,
        *,
        model: ChatModel,
        tool_registry: ToolRegistry,
        system_prompt: str,
        config: AgentConfig | None = None,
        parse_result: Callable[[dict[str, Any]], BaseModel] | None = None,
    ) -> None:
        self.model = model
        self.tool_registry = tool_registry
        self.system_prompt = system_prompt
        self.config = config or AgentConfig()

        terminal = [spec for spec in tool_registry.specs() if spec.terminal]
        if len(terminal) != 1:
            raise ToolConfigurationError(
                f"expected exactly one terminal tool, found {len(terminal)}"
            )
        self.terminal_tool = terminal[0]
        self._parse_result = parse_result or self._validate_terminal_args

    async def run(self, prompt: str) -> AgentRun:
        """Run the loop for one prompt within the configured budget."""

        run_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(run_id=run_id):
            try:
                return await asyncio.wait_for(
                    self._loop(prompt), timeout=self.config.timeout_seconds
                )
            except asyncio.TimeoutError as exc:
                logger.error("agent_timeout", timeout_seconds=self.config.timeout_seconds)
                raise AgentBudgetExceeded(
                    f"agent run exceeded {self.config.timeout_seconds}s"
                ) from exc

    async def _loop(self, prompt: str) -> AgentRun:
        conversation = Conversation(
            (SystemMessage(content=self.system_prompt), HumanMessage(content=prompt))
        )
        states: list[AgentState] = []
        traces: list[ToolTrace] = []
        cycles = 0
        state = AgentState.AGENT

        while True:
            states.append(state)
            logger.debug("agent_step", state=state.value, messages=len(conversation))

            if state is AgentState.AGENT:
                message = await self.model.invoke(conversation.messages, self.tool_registry)
                conversation = conversation.append(message)
                state = self._route(message)

            elif state is AgentState.TOOLS:
                if cycles >= self.config.max_tool_cycles:
                    logger.error("agent_cycle_budget_exhausted", cycles=cycles)
                    raise AgentBudgetExceeded(
                        f"agent exceeded {self.config.max_tool_cycles} tool cycles"
                    )
                cycles += 1
                results = await self._run_tools(conversation.last, traces)
                conversation = conversation.append(*results)
                state = AgentState.AGENT

            else:
                report = self._finish(conversation.last)
                logger.info("agent_finished", tool_cycles=cycles, messages=len(conversation))
                return AgentRun(
                    report=report,
                    conversation=conversation,
                    states=states,
                    tool_traces=traces,
                )

    def _route(self, message: AIMessage) -> AgentState:
        if not message.tool_calls:
            return AgentState.END
        if message.tool_calls[0]["name"] == self.terminal_tool.name:
            return AgentState.END
        return AgentState.TOOLS

    async def _run_tools(
        self, message: BaseMessage, traces: list[ToolTrace]
    ) -> list[ToolMessage]:
        results: list[ToolMessage] = []
        for call in getattr(message, "tool_calls", []):
            name = call["name"]
            call_id = call["id"] or ""
            spec = self.tool_registry.get(name)

            if spec.terminal:
                # Only a first-position terminal call ends the run.
                results.append(ToolMessage(content="", tool_call_id=call_id, name=name))
                continue

            try:
                output = await asyncio.to_thread(
                    self.tool_registry.execute, name, call["args"], observer=traces.append
                )
            except ValidationError as exc:
                logger.warning("tool_arguments_invalid", tool=name, error=str(exc))
                results.append(
                    ToolMessage(
                        content=f"Error: invalid arguments for {name}: {exc}",
                        tool_call_id=call_id,
                        name=name,
                        status="error",
                    )
                )
                continue

            logger.info(
                "tool_called",
                tool=name,
                latency_ms=round(traces[-1].latency_ms, 2) if traces else None,
            )
            results.append(ToolMessage(content=output, tool_call_id=call_id, name=name))
        return results

    def _finish(self, message: BaseMessage) -> BaseModel:
        tool_calls = getattr(message, "tool_calls", None) or []
        if not tool_calls:
            raise SchemaValidationFailure(
                f"model finished without calling {self.terminal_tool.name}"
            )
        return self._parse_result(tool_calls[0]["args"])

    def _validate_terminal_args(self, args: dict[str, Any]) -> BaseModel:
        try:
            return self.terminal_tool.args_schema.model_validate(args)
        except ValidationError as exc:
            raise SchemaValidationFailure(str(exc)) from exc
