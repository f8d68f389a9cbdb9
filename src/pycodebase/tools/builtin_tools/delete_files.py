from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolResult, ToolContext
from ..normalize import DELETE_EXAMPLE, normalize_file_paths


class DeleteFilesArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_paths: Any = Field(alias="filePaths", description="Array of file paths to delete from the codebase.")


@dataclass
class DeleteFilesTool:
    spec: ToolSpec = ToolSpec(
        name="delete_files",
        description=(
            "Delete multiple files from the codebase. Files that don't exist will be ignored. "
            f"Pass the paths directly, NEVER as a stringified JSON string. Format: {DELETE_EXAMPLE}."
        ),
        input_model=DeleteFilesArgs,
        permissions=("write",),
    )

    def execute(self, ctx: ToolContext, args: DeleteFilesArgs) -> ToolResult:
        paths = normalize_file_paths(args.file_paths, tool=self.spec.name)
        if not paths:
            return ToolResult.ok("No files deleted.")
        lines = []
        for path in paths:
            if ctx.store.delete(path):
                lines.append(f"Successfully deleted file: {path}")
            else:
                lines.append(f"File not found (ignored): {path}")
        return ToolResult.ok("\n".join(lines))
