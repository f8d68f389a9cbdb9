from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .codebase.store import CodebaseStore
from .config.models import ToolsConfig
from .events.store import EventStore
from .tools.base import ErrorType, ToolContext, ToolResult
from .tools.builtin import register_codebase_tools
from .tools.normalize import NormalizationError, loads_arguments
from .tools.permissions import PermissionConfig, PermissionGate
from .tools.registry import ToolRegistry

log = logging.getLogger(__name__)


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: Any  # raw, as sent by the model

    @staticmethod
    def from_openai(tc: dict[str, Any]) -> "ToolCall":
        fn = tc.get("function") or {}
        return ToolCall(
            id=str(tc.get("id") or ""),
            name=str(fn.get("name") or tc.get("name") or ""),
            arguments=fn.get("arguments", tc.get("arguments")),
        )


@dataclass
class CodebaseSession:
    """Everything one generation session needs: its own store, tools and context.

    Sessions never share a store, so several can run in one process.
    """

    store: CodebaseStore
    tools: ToolRegistry
    context: ToolContext
    permissions: PermissionGate
    config: ToolsConfig
    events: EventStore | None = None

    @staticmethod
    def open(
        payload: str | None = None,
        *,
        user_id: str = "",
        organization_id: str = "",
        doc_id: str | None = None,
        connectors: list[Any] | None = None,
        config: ToolsConfig | None = None,
        session_id: str | None = None,
        events_dir: Path | None = None,
    ) -> "CodebaseSession":
        config = config or ToolsConfig()
        store = CodebaseStore.from_payload(payload) if payload else CodebaseStore()

        events = EventStore.open(session_id, directory=events_dir) if config.record_events else None
        tools = ToolRegistry(events=events)
        register_codebase_tools(tools, max_write_files=config.max_write_files, disabled=config.disabled_tools)

        perm_cfg = PermissionConfig()
        for key, decision in config.permission_defaults.items():
            perm_cfg.set(key, decision)
        perm_cfg.apply_rules(config.permissions)
        permissions = PermissionGate(config=perm_cfg, auto_approve=config.auto_approve)

        context = ToolContext(
            store=store,
            user_id=user_id,
            organization_id=organization_id,
            doc_id=doc_id,
            connectors=connectors,
        )
        return CodebaseSession(
            store=store,
            tools=tools,
            context=context,
            permissions=permissions,
            config=config,
            events=events,
        )

    def manifest(self) -> list[dict[str, Any]]:
        return self.tools.manifest()

    def readme(self) -> str:
        return self.store.get_readme()

    def export(self) -> dict[str, Any]:
        return self.store.export()

    def call(self, name: str, args: Any, *, confirmed: bool = False) -> ToolResult:
        """Invoke one tool after the permission check.

        Calls that need approval come back with requires_confirm set and the
        arguments in confirm_payload; re-issue them with confirmed=True.
        """
        tool = self.tools.get(name)
        if tool is not None:
            spec = tool.spec
            decision = self.permissions.decide(spec.permissions, spec.name, spec.metadata.requires_confirm)
            if decision == "deny":
                return ToolResult.fail(ErrorType.FATAL, f"Tool {name} was denied by permissions.", retryable=False)
            if decision == "ask" and not confirmed:
                return ToolResult(
                    success=False,
                    requires_confirm=True,
                    confirm_payload={"tool": name, "args": args},
                )
        return self.tools.invoke(name, args, self.context)

    def dispatch(self, tool_call: dict[str, Any] | ToolCall) -> dict[str, Any]:
        """Run an OpenAI-style tool call and return the tool message for it."""
        tc = tool_call if isinstance(tool_call, ToolCall) else ToolCall.from_openai(tool_call)
        try:
            args = loads_arguments(tc.arguments)
        except NormalizationError as e:
            res = ToolResult.fail(ErrorType.VALIDATION, str(e), retryable=False)
        else:
            res = self.call(tc.name, args)
        if not res.success:
            log.info("tool call %s (%s) failed: %s", tc.name, tc.id, res.to_text())
        return {"role": "tool", "tool_call_id": tc.id, "content": res.to_text()}
