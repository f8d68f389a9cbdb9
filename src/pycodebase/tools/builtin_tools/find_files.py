from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.paths import filter_by_directory


class FindFilesArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keyword: str = Field(description="Literal text string to search for in files (not a regex pattern).")
    case_sensitive: Optional[bool] = Field(
        default=False, alias="caseSensitive", description="Whether the search should be case sensitive."
    )
    directory: Optional[str] = Field(default=None, description="Optional directory to limit search scope.")


@dataclass
class FindFilesTool:
    spec: ToolSpec = ToolSpec(
        name="find_files_with_text",
        description="Finds files in the codebase that contain a given keyword (plain substring match).",
        input_model=FindFilesArgs,
        permissions=("read",),
    )

    def execute(self, ctx: ToolContext, args: FindFilesArgs) -> ToolResult:
        case_sensitive = bool(args.case_sensitive)
        needle = args.keyword if case_sensitive else args.keyword.lower()

        matches = []
        for path in filter_by_directory(ctx.store.list_paths(), args.directory):
            content = ctx.store.get_content(path)
            if content is None:
                continue
            haystack = content if case_sensitive else content.lower()
            if needle in haystack:
                matches.append(path)

        matches.sort()
        return ToolResult.ok({
            "keyword": args.keyword,
            "caseSensitive": case_sensitive,
            "matchingFiles": matches,
            "count": len(matches),
        })
