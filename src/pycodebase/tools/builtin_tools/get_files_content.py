from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolResult, ToolContext


class GetFilesContentArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_paths: list[str] = Field(alias="filePaths", description="Array of file paths from the codebase to read.")


@dataclass
class GetFilesContentTool:
    spec: ToolSpec = ToolSpec(
        name="get_files_content",
        description=(
            "Reads the contents of specified files from the current codebase "
            "to help understand and improve the code."
        ),
        input_model=GetFilesContentArgs,
        permissions=("read",),
    )

    def execute(self, ctx: ToolContext, args: GetFilesContentArgs) -> ToolResult:
        # a missing path is reported on its own entry, the rest still succeed
        out: list[dict[str, Any]] = []
        for path in args.file_paths:
            content = ctx.store.get_content(path)
            if content is None:
                out.append({"path": path, "content": None, "error": f"File not found in codebase: {path}"})
            else:
                out.append({"path": path, "content": content, "error": None})
        return ToolResult.ok(out)
