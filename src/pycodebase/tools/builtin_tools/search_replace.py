from __future__ import annotations
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolResult, ToolContext


class Replacement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath", description="Path to the file to update.")
    old_string: str = Field(
        alias="oldString", description="The exact string to replace (must match file content exactly)."
    )
    new_string: str = Field(alias="newString", description="The replacement string.")
    replace_all: bool = Field(
        default=False, alias="replaceAll", description="Replace all occurrences (default: false)."
    )


class SearchReplaceArgs(BaseModel):
    replacements: list[Replacement] = Field(description="Array of replacement operations to perform.")


@dataclass
class SearchReplaceTool:
    spec: ToolSpec = ToolSpec(
        name="search_replace",
        description=(
            "Search and replace content in an existing file. Use this for targeted updates instead of "
            "rewriting entire files. The oldString must match the file content exactly (including "
            "whitespace and indentation)."
        ),
        input_model=SearchReplaceArgs,
        permissions=("write",),
    )

    def execute(self, ctx: ToolContext, args: SearchReplaceArgs) -> ToolResult:
        # replacements for one file apply in order against the running content
        by_file: dict[str, list[Replacement]] = {}
        for r in args.replacements:
            by_file.setdefault(r.file_path, []).append(r)

        lines: list[str] = []
        for path, reps in by_file.items():
            content = ctx.store.get_content(path)
            if content is None:
                lines.extend(f"❌ Error: File '{path}' not found in codebase." for _ in reps)
                continue

            changed = False
            for r in reps:
                if r.old_string == "":
                    lines.append(f"❌ Error: oldString for '{path}' is empty.")
                    continue
                occurrences = content.count(r.old_string)
                if occurrences == 0:
                    lines.append(
                        f"❌ Error: The string to replace was not found in '{path}'. "
                        "Please check the exact content including whitespace and indentation."
                    )
                    continue
                if r.replace_all:
                    content = content.replace(r.old_string, r.new_string)
                    replaced = occurrences
                else:
                    content = content.replace(r.old_string, r.new_string, 1)
                    replaced = 1
                changed = True
                lines.append(f"✅ Successfully replaced {replaced} occurrence(s) in '{path}'.")

            if changed:
                ctx.store.set_one(path, content)

        return ToolResult.ok("\n".join(lines))
