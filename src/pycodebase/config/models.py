from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..tools.permissions import Decision, PermissionRule

# write_files batch cap; keeps one tool call within a model's context budget.
DEFAULT_MAX_WRITE_FILES = 8


@dataclass
class ToolsConfig:
    """Settings for the codebase tool layer.

    Loaded from JSON or YAML, see loader.load_tools_config.
    """

    max_write_files: int = DEFAULT_MAX_WRITE_FILES
    disabled_tools: list[str] = field(default_factory=list)
    permission_defaults: dict[str, Decision] = field(default_factory=dict)
    permissions: list[PermissionRule] = field(default_factory=list)
    auto_approve: bool = False
    record_events: bool = False
    log_level: str = "WARNING"

    loaded_from: Path | None = None
