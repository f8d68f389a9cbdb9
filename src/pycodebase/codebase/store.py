from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from .models import CodeFile, DEFAULT_FILE_TYPE

log = logging.getLogger(__name__)

README_PATH = "README.md"


@dataclass
class CodebaseStore:
    """In-memory codebase for one generation session.

    Maps path -> CodeFile. Nothing is persisted; callers that want to keep
    the result must call export() and hand it to their own storage.
    """

    files: dict[str, CodeFile] = field(default_factory=dict)

    @staticmethod
    def from_payload(payload: str) -> "CodebaseStore":
        store = CodebaseStore()
        if not store.replace_all(payload):
            log.warning("initial codebase payload rejected; starting with an empty codebase")
        return store

    def replace_all(self, payload: str) -> bool:
        """Replace the whole map from a JSON `{"files": [...]}` payload.

        Returns False and leaves the current map untouched if the payload does
        not parse or has the wrong shape.
        """
        try:
            data = json.loads(payload)
            if not isinstance(data, dict) or not isinstance(data.get("files"), list):
                raise ValueError("payload must be an object with a 'files' array")
            new_files: dict[str, CodeFile] = {}
            for entry in data["files"]:
                f = CodeFile.from_dict(entry)
                # last one wins on duplicate paths
                new_files.pop(f.path, None)
                new_files[f.path] = f
        except (ValueError, TypeError) as e:
            log.warning("failed to update codebase: %s", e)
            return False
        self.files = new_files
        return True

    def list_paths(self) -> list[str]:
        return list(self.files.keys())

    def get(self, path: str) -> CodeFile | None:
        return self.files.get(path)

    def get_content(self, path: str) -> str | None:
        f = self.files.get(path)
        return f.content if f is not None else None

    def get_special_file(self, path: str) -> str:
        f = self.files.get(path)
        return f.content if f is not None else ""

    def get_readme(self) -> str:
        return self.get_special_file(README_PATH)

    def set_one(self, path: str, content: str, preserve_type: bool = True) -> bool:
        """Upsert one file. Returns True if the path already existed."""
        existing = self.files.get(path)
        ftype = existing.type if (existing is not None and preserve_type and existing.type) else DEFAULT_FILE_TYPE
        self.files[path] = CodeFile(path=path, content=content, type=ftype)
        return existing is not None

    def set_many(self, files: Iterable[CodeFile]) -> None:
        # built first, then merged in one step so no partial batch is visible
        staged = dict(self.files)
        for f in files:
            staged[f.path] = f
        self.files = staged

    def delete(self, path: str) -> bool:
        return self.files.pop(path, None) is not None

    def export(self) -> dict[str, Any]:
        return {"files": [f.to_dict() for f in self.files.values()]}

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.export(), ensure_ascii=False, indent=indent)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files
