from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, Field

from ..base import ToolSpec, ToolResult, ToolContext, ToolMetadata
from ..normalize import FileWrite, WRITE_EXAMPLE, normalize_file_records
from ...codebase.models import CodeFile, DEFAULT_FILE_TYPE
from ...config.models import DEFAULT_MAX_WRITE_FILES


def _description(limit: int) -> str:
    return (
        f"Write content to multiple files (max {limit} files per call). If a file doesn't exist, it will be "
        "created. If it exists, it will be overwritten. Pass the files array directly, NEVER as a "
        f"stringified JSON string. Format: {WRITE_EXAMPLE}."
    )


class WriteFilesArgs(BaseModel):
    files: Any = Field(
        description="Files to write: an array of {filePath, fileContent} objects. Never pass a JSON string.",
    )


def _build(ctx: ToolContext, rec: FileWrite) -> tuple[CodeFile, str]:
    existing = ctx.store.get(rec.file_path)
    ftype = existing.type if (existing is not None and existing.type) else DEFAULT_FILE_TYPE
    verb = "updated" if existing is not None else "created"
    f = CodeFile(path=rec.file_path, content=rec.file_content, type=ftype)
    return f, f"Successfully {verb} file: {rec.file_path}"


@dataclass
class WriteFilesTool:
    max_files: int = DEFAULT_MAX_WRITE_FILES
    spec: ToolSpec = ToolSpec(
        name="write_files",
        description=_description(DEFAULT_MAX_WRITE_FILES),
        input_model=WriteFilesArgs,
        permissions=("write",),
        metadata=ToolMetadata(category="code", max_retries=2),
    )

    def __post_init__(self):
        if self.max_files < 1:
            raise ValueError(f"max_files must be positive, got {self.max_files}")
        if self.max_files != DEFAULT_MAX_WRITE_FILES:
            self.spec = replace(self.spec, description=_description(self.max_files))

    def execute(self, ctx: ToolContext, args: WriteFilesArgs) -> ToolResult:
        records = normalize_file_records(args.files, max_files=self.max_files, tool=self.spec.name)
        if not records:
            return ToolResult.ok("No files written.")

        # paths are disjoint, so records are built independently; the store is
        # only touched once, after all of them are ready
        with ThreadPoolExecutor(max_workers=len(records)) as pool:
            built = list(pool.map(lambda r: _build(ctx, r), records))

        ctx.store.set_many(f for f, _ in built)
        return ToolResult.ok("\n".join(line for _, line in built))
