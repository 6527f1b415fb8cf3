"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from langchain_core.utils.json_schema import dereference_refs
from pydantic import BaseModel, ConfigDict, Field

from pr_report.errors import ToolConfigurationError
from pr_report.obs.tracing import Timer, preview
from pr_report.types import ToolTrace

ToolObserver = Callable[[ToolTrace], None]


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation.

    A `terminal` tool carries the final answer: the model calling it ends the
    run, and its handler is never dispatched by the orchestrator.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], str]
    terminal: bool = False
    tags: list[str] = Field(default_factory=list)

    def invoke(self, payload: dict[str, Any]) -> str:
        data = self.args_schema.model_validate(payload)
        return self.handler(data)


class ToolRegistry:
    """Stores tool specs and exports them as chat-model tool definitions.

    The registry holds no per-run state, so one instance can serve any number
    of concurrent runs.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise ToolConfigurationError(f"Unknown tool: {name}")
        return spec

    def execute(
        self,
        name: str,
        payload: dict[str, Any],
        *,
        observer: ToolObserver | None = None,
    ) -> str:
        """Validate `payload`, run the tool and report a trace to `observer`."""
        return self._execute_spec(self.get(name), payload, observer)

    def tool_definitions(self) -> list[dict[str, Any]]:
        """OpenAI-format function definitions for every registered tool.

        Parameters are the JSON schema of `args_schema` under its aliases, with
        nested models inlined, so the model fills in the wire field names.
        """
        return [_tool_definition(spec) for spec in self._tools.values()]

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    @staticmethod
    def _execute_spec(
        spec: ToolSpec, payload: dict[str, Any], observer: ToolObserver | None
    ) -> str:
        with Timer() as timer:
            output = spec.invoke(payload)

        if observer is not None:
            observer(
                ToolTrace(
                    name=spec.name,
                    input_payload=payload,
                    output_preview=preview(output),
                    latency_ms=timer.elapsed_ms,
                )
            )
        return output


def _tool_definition(spec: ToolSpec) -> dict[str, Any]:
    schema = dereference_refs(spec.args_schema.model_json_schema(by_alias=True))
    schema.pop("$defs", None)
    schema.pop("title", None)
    return {
        "type": "function",
        "function": {
            "name": spec.name,
            "description": spec.description,
            "parameters": schema,
        },
    }
