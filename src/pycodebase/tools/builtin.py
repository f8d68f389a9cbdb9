from __future__ import annotations
from typing import Iterable

from .registry import ToolRegistry
from .base import Tool
from ..config.models import DEFAULT_MAX_WRITE_FILES

from .builtin_tools.list_files import ListFilesTool
from .builtin_tools.get_files_content import GetFilesContentTool
from .builtin_tools.find_files import FindFilesTool
from .builtin_tools.write_files import WriteFilesTool
from .builtin_tools.delete_files import DeleteFilesTool
from .builtin_tools.plan_files import PlanFilesTool
from .builtin_tools.search_replace import SearchReplaceTool


def codebase_tools(max_write_files: int = DEFAULT_MAX_WRITE_FILES) -> list[Tool]:
    return [
        GetFilesContentTool(),
        ListFilesTool(),
        FindFilesTool(),
        WriteFilesTool(max_files=max_write_files),
        PlanFilesTool(),
        DeleteFilesTool(),
        SearchReplaceTool(),
    ]


def register_codebase_tools(
    registry: ToolRegistry,
    *,
    max_write_files: int = DEFAULT_MAX_WRITE_FILES,
    disabled: Iterable[str] = (),
) -> None:
    skip = set(disabled)
    for tool in codebase_tools(max_write_files):
        if tool.spec.name in skip:
            continue
        registry.register(tool)
