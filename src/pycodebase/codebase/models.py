from __future__ import annotations
from dataclasses import dataclass
from typing import Any

# Type assigned to entries created by tool calls.
DEFAULT_FILE_TYPE = "file"


@dataclass
class CodeFile:
    path: str
    content: str
    # free-form; usually extension-derived, "file" for freshly created entries
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"path": self.path, "content": self.content}
        if self.type is not None:
            d["type"] = self.type
        return d

    @staticmethod
    def from_dict(d: Any) -> "CodeFile":
        if not isinstance(d, dict):
            raise ValueError(f"code file entry must be an object, got {type(d).__name__}")
        path = d.get("path")
        content = d.get("content")
        ftype = d.get("type")
        if not isinstance(path, str):
            raise ValueError("code file entry is missing a string 'path'")
        if not isinstance(content, str):
            raise ValueError(f"code file entry {path!r} is missing a string 'content'")
        if ftype is not None and not isinstance(ftype, str):
            ftype = str(ftype)
        return CodeFile(path=path, content=content, type=ftype)
