"""Recover canonical argument shapes from LLM tool calls.

Models routinely send the `files` argument of a mutating tool in the wrong
shape: a JSON string (sometimes stringified twice), a string with escaped
control characters, the bare array, a `{"files": [...]}` wrapper inside the
argument, a single record instead of a list, or a JSON object buried in prose.

`normalize_records` tries, in order:

1. a string that looks like ``{...}`` is parsed once; a ``key`` list inside wins;
2. otherwise the value is parsed repeatedly while it is still a string, at most
   ``MAX_PARSE_ATTEMPTS`` times;
3. if the first parse fails, one unescape pass (``\\n``, ``\\t``, ``\\"``,
   ``\\\\``) is tried before giving up on parsing;
4. the result is classified: list -> as is, ``{key: [...]}`` -> unwrapped,
   a single record -> wrapped in a list;
5. as a last resort the first top-level ``{...}`` block of the original string
   goes through 1-4 again.

Anything else raises `NormalizationError` with a message meant for the model.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from .base import ToolArgumentError

log = logging.getLogger(__name__)

# Bounds the reparse loop; payloads stringified more deeply than this are rejected.
MAX_PARSE_ATTEMPTS = 5

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

WRITE_EXAMPLE = '{files: [{filePath: "path/to/file.ts", fileContent: "file content"}]}'
PLAN_EXAMPLE = '{files: [{filePath: "path/to/file.ts", purpose: "description"}]}'
DELETE_EXAMPLE = '{filePaths: ["path/to/file1.ts", "path/to/file2.ts"]}'


class NormalizationError(ToolArgumentError):
    pass


@dataclass(frozen=True)
class FileWrite:
    file_path: str
    file_content: str


@dataclass(frozen=True)
class FilePlan:
    file_path: str
    purpose: str


def _unescape(text: str) -> str:
    return (
        text.replace("\\n", "\n")
        .replace("\\t", "\t")
        .replace('\\"', '"')
        .replace("\\\\", "\\")
    )


def _reparse(text: str) -> tuple[Any, int]:
    current: Any = text
    attempts = 0
    while isinstance(current, str) and attempts < MAX_PARSE_ATTEMPTS:
        try:
            current = json.loads(current, strict=False)
            attempts += 1
            log.debug("parse attempt %d ok", attempts)
        except ValueError:
            if attempts == 0:
                try:
                    current = json.loads(_unescape(current), strict=False)
                    attempts += 1
                    log.debug("parse attempt %d ok after unescaping", attempts)
                    continue
                except ValueError:
                    log.debug("unescaping did not help")
            break
    return current, attempts


def _first_json_block(text: str) -> str | None:
    """Leftmost balanced ``{...}`` in text, ignoring braces inside strings.

    One pass: if the first ``{`` never closes, the closed block with the
    smallest start wins.
    """
    start = text.find("{")
    if start == -1:
        return None
    opened: list[int] = []
    best: tuple[int, int] | None = None
    in_str = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            opened.append(i)
        elif ch == "}" and opened:
            s = opened.pop()
            if not opened:
                return text[s:i + 1]
            if best is None or s < best[0]:
                best = (s, i)
    if best is not None:
        return text[best[0]:best[1] + 1]
    m = _JSON_BLOCK.search(text)
    return m.group(0) if m else None


def _classify(value: Any, key: str, is_record: Callable[[Any], bool], depth: int) -> list[Any] | None:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        inner = value.get(key)
        if isinstance(inner, list):
            return inner
        if isinstance(inner, str) and depth == 0:
            return _from_string(inner, key, is_record, depth + 1)
        if is_record(value):
            return [value]
    return None


def _from_string(text: str, key: str, is_record: Callable[[Any], bool], depth: int) -> list[Any] | None:
    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        try:
            parsed = json.loads(stripped, strict=False)
        except ValueError:
            log.debug("not a plain JSON object, trying the reparse loop")
        else:
            if isinstance(parsed, dict) and isinstance(parsed.get(key), list):
                return parsed[key]

    current, attempts = _reparse(text)
    found = _classify(current, key, is_record, depth)
    if found is not None:
        log.debug("recovered %r after %d parse attempt(s)", key, attempts)
    return found


def normalize_records(raw: Any, *, key: str, is_record: Callable[[Any], bool], example: str, tool: str) -> list[Any]:
    """Return the list of records carried by `raw`, or raise NormalizationError."""
    if isinstance(raw, str):
        found = _from_string(raw, key, is_record, 0)
        if found is None:
            block = _first_json_block(raw)
            if block is not None and block != raw.strip():
                log.debug("extracted embedded JSON block for %s", tool)
                found = _from_string(block, key, is_record, 0)
    else:
        found = _classify(raw, key, is_record, 0)

    if found is None:
        raise NormalizationError(
            f"Could not read the '{key}' argument of {tool} (received {type(raw).__name__}). "
            f"Expected format: {example}. "
            f"Pass '{key}' as a JSON array of objects, never as a stringified JSON string."
        )
    return found


def _looks_like_write(value: Any) -> bool:
    return isinstance(value, dict) and "filePath" in value and "fileContent" in value


def _looks_like_plan(value: Any) -> bool:
    return isinstance(value, dict) and "filePath" in value and ("purpose" in value or "description" in value)


def _check_path(path: Any, tool: str, example: str) -> str:
    if not isinstance(path, str):
        raise NormalizationError(f"filePath must be a string. Expected format: {example}. Do not stringify {tool} input.")
    if path == "":
        raise NormalizationError(f"File path cannot be empty. Expected format: {example}.")
    return path


def normalize_file_records(raw: Any, *, max_files: int | None = None, tool: str = "write_files") -> list[FileWrite]:
    records = normalize_records(raw, key="files", is_record=_looks_like_write, example=WRITE_EXAMPLE, tool=tool)
    if max_files is not None and len(records) > max_files:
        raise NormalizationError(
            f"Too many files in single call ({len(records)}); the limit is {max_files} files per call. "
            f"Write files in smaller batches of at most {max_files}."
        )
    out: list[FileWrite] = []
    for rec in records:
        if not isinstance(rec, dict):
            raise NormalizationError(
                f"Each file must be an object with filePath and fileContent properties. "
                f"Expected format: {WRITE_EXAMPLE}. Do not stringify {tool} input."
            )
        path = _check_path(rec.get("filePath"), tool, WRITE_EXAMPLE)
        content = rec.get("fileContent")
        if not isinstance(content, str):
            raise NormalizationError(
                f"fileContent for {path} must be a string. Expected format: {WRITE_EXAMPLE}. Do not stringify {tool} input."
            )
        out.append(FileWrite(file_path=path, file_content=content))
    return out


def normalize_plan_records(raw: Any, *, tool: str = "plan_files") -> list[FilePlan]:
    records = normalize_records(raw, key="files", is_record=_looks_like_plan, example=PLAN_EXAMPLE, tool=tool)
    out: list[FilePlan] = []
    for rec in records:
        if not isinstance(rec, dict):
            raise NormalizationError(
                f"Each file must be an object with filePath and purpose properties. "
                f"Expected format: {PLAN_EXAMPLE}. Do not stringify {tool} input."
            )
        path = _check_path(rec.get("filePath"), tool, PLAN_EXAMPLE)
        purpose = rec.get("purpose")
        if purpose is None:
            purpose = rec.get("description")
        if not isinstance(purpose, str):
            raise NormalizationError(
                f"purpose for {path} must be a string. Expected format: {PLAN_EXAMPLE}. Do not stringify {tool} input."
            )
        out.append(FilePlan(file_path=path, purpose=purpose))
    return out


def normalize_file_paths(raw: Any, *, tool: str = "delete_files") -> list[str]:
    records = normalize_records(raw, key="filePaths", is_record=lambda v: False, example=DELETE_EXAMPLE, tool=tool)
    return [_check_path(p, tool, DELETE_EXAMPLE) for p in records]


def loads_arguments(raw: Any) -> dict[str, Any]:
    """Decode the `arguments` field of a tool call into a dict.

    Accepts a dict as is; strings go through the same bounded reparse used for
    record lists.
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        current, _ = _reparse(raw)
        if isinstance(current, dict):
            return current
        block = _first_json_block(raw)
        if block is not None:
            current, _ = _reparse(block)
            if isinstance(current, dict):
                return current
    raise NormalizationError(
        f"Tool call arguments must be a JSON object (received {type(raw).__name__}). "
        "Send the arguments as an object, never as a stringified JSON string."
    )
