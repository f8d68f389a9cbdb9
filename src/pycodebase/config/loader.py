from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from .models import ToolsConfig
from ..tools.permissions import PermissionRule

APP_NAME = "pycodebase"


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".pycodebase.json",
        cwd / "pycodebase.json",
        cwd / "pycodebase.yaml",
        cwd / "pycodebase.yml",
    ]


def _global_candidate_paths() -> list[Path]:
    cfg_dir = Path(user_config_dir(APP_NAME))
    return [
        cfg_dir / "pycodebase.json",
        cfg_dir / "pycodebase.yaml",
    ]


def _load_file(p: Path) -> dict[str, Any] | None:
    try:
        text = p.read_text(encoding="utf-8")
        if p.suffix in {".yaml", ".yml"}:
            obj = yaml.safe_load(text)
        else:
            obj = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError):
        return None
    return obj if isinstance(obj, dict) else None


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)  # type: ignore
        else:
            out[k] = v
    return out


def load_tools_config(*, cwd: Path, explicit_path: Path | None = None) -> ToolsConfig:
    """Load tool settings.

    Merge order: global < project < explicit_path. Unreadable files are skipped.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in _global_candidate_paths():
        if p.exists() and p.is_file():
            obj = _load_file(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    for p in _candidate_paths(cwd):
        if p.exists() and p.is_file():
            obj = _load_file(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p
                break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        obj = _load_file(p)
        if obj is None:
            raise ValueError(f"Config file must contain a mapping: {p}")
        merged = _merge_dicts(merged, obj)
        loaded_from = p

    cfg = ToolsConfig()
    cfg.loaded_from = loaded_from

    mwf = merged.get("max_write_files")
    if isinstance(mwf, int) and not isinstance(mwf, bool) and mwf > 0:
        cfg.max_write_files = mwf

    disabled = merged.get("disabled_tools", [])
    if isinstance(disabled, list):
        cfg.disabled_tools = [d for d in disabled if isinstance(d, str) and d.strip()]

    defaults = merged.get("permission_defaults", {})
    if isinstance(defaults, dict):
        for k, v in defaults.items():
            if isinstance(k, str) and v in {"allow", "ask", "deny"}:
                cfg.permission_defaults[k] = v

    perms = merged.get("permissions", [])
    if isinstance(perms, list):
        for it in perms:
            r = PermissionRule.from_obj(it)
            if r is not None:
                cfg.permissions.append(r)

    for flag in ("auto_approve", "record_events"):
        v = merged.get(flag)
        if isinstance(v, bool):
            setattr(cfg, flag, v)

    lvl = merged.get("log_level")
    if isinstance(lvl, str) and lvl.strip():
        cfg.log_level = lvl.strip().upper()

    return cfg
