from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.paths import filter_by_directory


class ListFilesArgs(BaseModel):
    directory: Optional[str] = Field(
        default=None,
        description="Directory path to list files from. If empty or '.', lists all files.",
    )


@dataclass
class ListFilesTool:
    spec: ToolSpec = ToolSpec(
        name="list_files",
        description="Lists files from the codebase, optionally filtered by directory.",
        input_model=ListFilesArgs,
        permissions=("read",),
    )

    def execute(self, ctx: ToolContext, args: ListFilesArgs) -> ToolResult:
        paths = filter_by_directory(ctx.store.list_paths(), args.directory)
        return ToolResult.ok({"files": sorted(paths)})
