from __future__ import annotations
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Protocol

from pydantic import BaseModel

from ..codebase.store import CodebaseStore

Category = Literal["db", "web", "code", "system"]


class ErrorType(str, Enum):
    VALIDATION = "validation_error"   # bad arguments, caller must fix the payload
    TRANSIENT = "transient_error"     # handler raised, same call may be retried
    FATAL = "fatal_error"             # unknown tool, registry/config bug


class ToolArgumentError(ValueError):
    """Raised by a tool when its (schema-valid) arguments cannot be used.

    The registry reports it as a non-retryable validation_error; the message is
    read by the LLM, so it should say what the expected input looks like.
    """


@dataclass(frozen=True)
class ToolMetadata:
    category: Category = "code"
    requires_confirm: bool = False
    max_retries: int = 0
    timeout_ms: int | None = None   # advisory, enforced by the caller if at all


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    version: str = "1.0.0"
    permissions: tuple[str, ...] = ("read",)
    metadata: ToolMetadata = field(default_factory=ToolMetadata)

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema of the arguments, as published in the tool manifest."""
        return self.input_model.model_json_schema()

    @property
    def permission_key(self) -> str:
        return self.permissions[0] if self.permissions else "read"


@dataclass
class ToolContext:
    store: CodebaseStore
    user_id: str = ""
    organization_id: str = ""
    doc_id: str | None = None
    connectors: list[Any] | None = None


@dataclass
class ToolError:
    type: ErrorType
    message: str
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "message": self.message, "retryable": self.retryable}


@dataclass
class ToolResult:
    success: bool
    output: Any = None
    error: ToolError | None = None
    requires_confirm: bool = False
    confirm_payload: Any = None

    @staticmethod
    def ok(output: Any) -> "ToolResult":
        return ToolResult(success=True, output=output)

    @staticmethod
    def fail(error_type: ErrorType, message: str, *, retryable: bool = False) -> "ToolResult":
        return ToolResult(success=False, error=ToolError(type=error_type, message=message, retryable=retryable))

    @property
    def is_error(self) -> bool:
        return not self.success

    def to_text(self) -> str:
        """Plain-text form fed back into the model context."""
        if self.success:
            if isinstance(self.output, str):
                return self.output
            return json.dumps(self.output, ensure_ascii=False, indent=2)
        if self.requires_confirm:
            return "Tool call requires confirmation before it can run."
        if self.error is None:
            return "Error: unknown failure"
        return f"Error ({self.error.type.value}): {self.error.message}"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"success": self.success}
        if self.output is not None:
            d["output"] = self.output
        if self.error is not None:
            d["error"] = self.error.to_dict()
        if self.requires_confirm:
            d["requiresConfirm"] = True
            d["confirmPayload"] = self.confirm_payload
        return d


class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: ToolContext, args: Any) -> ToolResult: ...
