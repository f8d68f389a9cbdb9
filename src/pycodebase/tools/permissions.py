from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import Any, Literal

Decision = Literal["allow", "ask", "deny"]


@dataclass
class PermissionRule:
    """A single permission rule.

    match supports:
    - "tool:<name_or_pattern>"  -> matches tool name only
    - otherwise: fnmatch against both the permission key and the tool name
    """

    match: str
    decision: Decision

    @staticmethod
    def from_obj(obj: Any) -> "PermissionRule | None":
        if not isinstance(obj, dict):
            return None
        m = obj.get("match")
        d = obj.get("decision")
        if not isinstance(m, str) or d not in {"allow", "ask", "deny"}:
            return None
        return PermissionRule(match=m, decision=d)


@dataclass
class PermissionConfig:
    # The codebase is virtual, so edits are allowed unless configured otherwise.
    defaults: dict[str, Decision] = field(default_factory=lambda: {"read": "allow", "write": "allow"})
    rules: list[PermissionRule] = field(default_factory=list)

    def set(self, key: str, decision: Decision) -> None:
        self.defaults[key] = decision

    def apply_rules(self, rules: list[PermissionRule]) -> None:
        # appended after defaults; later rules win.
        self.rules.extend(rules)

    def _match_rules(self, permission_key: str, tool_name: str) -> Decision | None:
        decision: Decision | None = None
        for rule in self.rules:
            m = rule.match
            if m.startswith("tool:"):
                pat = m[len("tool:") :]
                if fnmatch(tool_name, pat):
                    decision = rule.decision
            else:
                if fnmatch(permission_key, m) or fnmatch(tool_name, m):
                    decision = rule.decision
        return decision

    def decide(self, permission_key: str, tool_name: str) -> Decision:
        r = self._match_rules(permission_key, tool_name)
        if r is not None:
            return r
        return self.defaults.get(permission_key, self.defaults.get(tool_name, "ask"))


class PermissionGate:
    """Turns a decision into allow / confirm / deny for one tool call.

    "ask" never prompts here: the caller gets a result with requires_confirm
    set and decides how to ask its user.
    """

    def __init__(self, config: PermissionConfig, auto_approve: bool = False):
        self.config = config
        self.auto_approve = auto_approve

    def decide(self, permissions: tuple[str, ...], tool_name: str, requires_confirm: bool = False) -> Decision:
        decisions = [self.config.decide(key, tool_name) for key in (permissions or ("read",))]
        if "deny" in decisions:
            return "deny"
        if "ask" in decisions or requires_confirm:
            return "allow" if self.auto_approve else "ask"
        return "allow"
