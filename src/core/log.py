"""
Logging utilities.

Named loggers under the "repo_manager" hierarchy plus helpers that keep
access tokens out of log output.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

_ROOT_NAME = "repo_manager"
_root_logger = logging.getLogger(_ROOT_NAME)

_TOKEN_RE = re.compile(r"\b(ghp_|github_pat_|gho_|ghs_)[A-Za-z0-9_]+")
_SENSITIVE_KEYS = {"token", "authorization", "password", "secret"}

_PREVIEW_LENGTH = 4


def configure_logging(
    level: Union[int, str] = logging.INFO,
    handler: Optional[logging.Handler] = None,
    format_string: Optional[str] = None,
) -> None:
    """Attach a handler to the package logger.

    Logs go to stderr by default, which keeps stdout free for the MCP stdio
    transport.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger or one of its children ("http", "workflows", ...)."""
    if name is None:
        return _root_logger
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def mask_token(token: str) -> str:
    """Show only the first few characters of a token."""
    t = token or ""
    if len(t) <= _PREVIEW_LENGTH * 2:
        return "[REDACTED]"
    return f"{t[:_PREVIEW_LENGTH]}...[REDACTED]"


def mask_sensitive_data(text: str) -> str:
    """Replace anything that looks like a GitHub token in free text."""
    return _TOKEN_RE.sub(lambda m: f"{m.group(1)}[REDACTED]", text or "")


def safe_log_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of `data` with token-like values masked (recursive)."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in _SENSITIVE_KEYS:
            result[key] = mask_token(value) if isinstance(value, str) else "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value)
        else:
            result[key] = value
    return result
