from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

log = logging.getLogger(__name__)

TOOL_INVOKE = "tool.invoke"


@dataclass
class ToolInvocation:
    """One registry call: which tool ran, how it ended and how long it took."""

    tool: str
    success: bool
    error_type: str | None = None
    elapsed_ms: int = 0
    type: str = TOOL_INVOKE
    ts: float = field(default_factory=time.time)

    @staticmethod
    def from_line(line: str) -> "ToolInvocation | None":
        try:
            obj = json.loads(line)
        except ValueError:
            return None
        if not isinstance(obj, dict) or not isinstance(obj.get("tool"), str):
            return None
        err = obj.get("error_type")
        return ToolInvocation(
            tool=obj["tool"],
            success=obj.get("success") is True,
            error_type=err if isinstance(err, str) else None,
            elapsed_ms=int(obj.get("elapsed_ms") or 0),
            type=str(obj.get("type") or TOOL_INVOKE),
            ts=float(obj.get("ts") or 0.0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EventStore:
    """Append-only jsonl of tool invocations, one file per session.

    Lives under the user data dir unless a directory is given.
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str | None = None, directory: Path | None = None) -> "EventStore":
        sid = session_id or uuid.uuid4().hex[:12]
        d = directory or Path(user_data_dir("pycodebase")) / "events"
        d.mkdir(parents=True, exist_ok=True)
        return EventStore(session_id=sid, path=d / f"{sid}.jsonl")

    def record(self, event: ToolInvocation) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event.to_dict(), ensure_ascii=False) + "\n")

    def record_invocation(self, tool: str, success: bool, error_type: str | None, elapsed_ms: int) -> ToolInvocation:
        ev = ToolInvocation(tool=tool, success=success, error_type=error_type, elapsed_ms=elapsed_ms)
        self.record(ev)
        return ev

    def iter_events(self, event_type: str | None = TOOL_INVOKE) -> list[ToolInvocation]:
        """Recorded events in order. Pass event_type=None to get every type."""
        if not self.path.exists():
            return []
        out: list[ToolInvocation] = []
        for n, line in enumerate(self.path.read_text(encoding="utf-8", errors="replace").splitlines(), 1):
            if not line.strip():
                continue
            ev = ToolInvocation.from_line(line)
            if ev is None:
                log.debug("skipping unreadable event line %d in %s", n, self.path)
                continue
            if event_type is None or ev.type == event_type:
                out.append(ev)
        return out
