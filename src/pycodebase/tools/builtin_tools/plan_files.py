from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from ..base import ToolSpec, ToolResult, ToolContext
from ..normalize import PLAN_EXAMPLE, normalize_plan_records


class PlanFilesArgs(BaseModel):
    files: Any = Field(
        description="Files to plan: an array of {filePath, purpose} objects. Never pass a JSON string.",
    )


@dataclass
class PlanFilesTool:
    """Announces a batch of file changes. Does not touch the codebase."""

    spec: ToolSpec = ToolSpec(
        name="plan_files",
        description=(
            "List the files you plan to create or modify, with a brief description of each change "
            "using the present participle form. Does not perform any writing. Pass the files array "
            f"directly, NEVER as a stringified JSON string. Format: {PLAN_EXAMPLE}."
        ),
        input_model=PlanFilesArgs,
        permissions=("read",),
    )

    def execute(self, ctx: ToolContext, args: PlanFilesArgs) -> ToolResult:
        records = normalize_plan_records(args.files, tool=self.spec.name)
        if not records:
            return ToolResult.ok("No files planned.")
        lines = ["### Files to be created or modified:"]
        for rec in records:
            lines.append(f"- `{rec.file_path}`: {rec.purpose or 'No description provided'}")
        return ToolResult.ok("\n".join(lines))
