from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


load_dotenv(override=False)

ROOT_ENV = "RECRUITFLOW_ROOT"


def _project_root() -> Path:
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    # In source layout, this file is under <root>/recruitflow/core
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "recruitflow" / "config"


def _work_dir() -> Path:
    return _project_root() / "recruitflow" / "work"


def ensure_work_dirs() -> dict[str, Path]:
    """Create the runtime directories and return them keyed by purpose."""

    base = _work_dir()
    mailbox = base / "mailbox"
    out = base / "out"
    reports = base / "reports"
    logs = base / "logs"
    for p in (mailbox, out, reports, logs):
        p.mkdir(parents=True, exist_ok=True)
    return {"mailbox": mailbox, "out": out, "reports": reports, "logs": logs}


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    # Support paths with or without leading 'recruitflow/'
    parts = p.parts
    if parts and parts[0] == "recruitflow":
        return _project_root() / p
    return _config_dir() / p
