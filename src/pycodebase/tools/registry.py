from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError

from .base import ErrorType, Tool, ToolArgumentError, ToolContext, ToolResult, ToolSpec
from ..events.store import EventStore

log = logging.getLogger(__name__)


@dataclass
class ToolRegistry:
    _tools: Dict[str, Tool] = None  # type: ignore
    events: Optional[EventStore] = None

    def __post_init__(self):
        if self._tools is None:
            self._tools = {}

    def register(self, tool: Tool) -> None:
        name = tool.spec.name
        if name in self._tools:
            log.debug("replacing tool %s", name)
        self._tools[name] = tool
        log.info("registered tool: %s v%s", name, tool.spec.version)

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def list(
        self,
        category: str | None = None,
        permissions: Iterable[str] | None = None,
    ) -> list[Tool]:
        """Tools matching all given filters.

        `permissions` matches a tool that declares at least one of them.
        """
        out = list(self._tools.values())
        if category:
            out = [t for t in out if t.spec.metadata.category == category]
        if permissions is not None:
            wanted = set(permissions)
            out = [t for t in out if wanted.intersection(t.spec.permissions)]
        return out

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def manifest(self, category: str | None = None, permissions: Iterable[str] | None = None) -> list[dict[str, Any]]:
        """OpenAI-style function list for the tools shown to the model."""
        out = []
        for t in self.list(category=category, permissions=permissions):
            out.append({
                "type": "function",
                "function": {
                    "name": t.spec.name,
                    "description": t.spec.description,
                    "parameters": t.spec.parameters,
                },
            })
        return out

    def invoke(self, name: str, args: Any, ctx: ToolContext) -> ToolResult:
        tool = self.get(name)
        if tool is None:
            return ToolResult.fail(ErrorType.FATAL, f"Tool not found: {name}", retryable=False)

        try:
            parsed = tool.spec.input_model.model_validate(args if args is not None else {})
        except ValidationError as e:
            res = ToolResult.fail(ErrorType.VALIDATION, f"Invalid arguments for {name}: {e}", retryable=False)
            self._record(name, res, 0)
            return res

        t0 = time.perf_counter()
        try:
            res = tool.execute(ctx, parsed)
        except ToolArgumentError as e:
            res = ToolResult.fail(ErrorType.VALIDATION, str(e), retryable=False)
        except Exception as e:
            log.exception("tool %s failed", name)
            res = ToolResult.fail(ErrorType.TRANSIENT, str(e) or "Unknown error", retryable=True)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        log.info("tool %s executed in %dms", name, elapsed_ms)
        self._record(name, res, elapsed_ms)
        return res

    def _record(self, name: str, res: ToolResult, elapsed_ms: int) -> None:
        if self.events is None:
            return
        self.events.record_invocation(
            name,
            res.success,
            res.error.type.value if res.error else None,
            elapsed_ms,
        )

    def count(self) -> int:
        return len(self._tools)

    def clear(self) -> None:
        self._tools.clear()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
