"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
PROJECT_ROOT, HTTP_VERIFY, GITHUB_API_URL, storage location and limits).
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Sandbox for local files (upload sources, downloads, exports)
PROJECT_ROOT = Path(os.environ.get("PROJECT_ROOT", ".")).resolve()

# Network / HTTP
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").strip()
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 20.0)

# Persistent registrations
STORAGE_PATH = Path(
    os.environ.get("STORAGE_PATH", str(Path.home() / ".github-repo-manager" / "storage.json"))
).expanduser()
STORAGE_KEY = os.environ.get("STORAGE_KEY", "github-repos-manager-v2").strip()

# Limits
MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 100 * 1024 * 1024)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
