from __future__ import annotations
from typing import Iterable


def normalize_directory(directory: str | None) -> str:
    """'' means the whole codebase. Trailing slashes are dropped."""
    if directory is None:
        return ""
    d = directory.strip()
    if d in {"", "."}:
        return ""
    return d.rstrip("/")


def in_directory(path: str, directory: str | None) -> bool:
    d = normalize_directory(directory)
    if not d:
        return True
    # the separator is part of the prefix: "src" must not match "srcfoo.ts"
    return path == d or path.startswith(d + "/")


def filter_by_directory(paths: Iterable[str], directory: str | None) -> list[str]:
    return [p for p in paths if in_directory(p, directory)]
