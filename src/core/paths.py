from __future__ import annotations

import re
from typing import Tuple

"""
Path utilities used across the project.

Provides consistent POSIX-style normalization for repository paths, the
name allow-list used by create/rename, and the byte formatter used when
presenting listings.
"""

_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def normalize_posix_relpath(p: str) -> str:
    """Normalize a user path to a clean POSIX relative path.

    Converts backslashes to '/', trims whitespace, removes leading and
    trailing '/' and repeated './' markers. The repository root is ''.
    """
    s = (p or "").strip()
    s = s.replace("\\", "/")        # Unify path separators across OSes.
    s = s.lstrip("/")               # Prevent accidental absolute paths.
    while s.startswith("./"):       # Drop repeated "./" prefixes.
        s = s[2:]
    if s == ".":
        return ""
    return s.rstrip("/")


def split_posix(p: str) -> Tuple[str, ...]:
    """Split a POSIX path into non-empty segments."""
    s = (p or "").strip().replace("\\", "/").strip("/")
    if not s:
        return tuple()
    return tuple(seg for seg in s.split("/") if seg)


def join_path(parent: str, name: str) -> str:
    """Join a directory path and a child name; '' parent means repository root."""
    parent_clean = normalize_posix_relpath(parent)
    return f"{parent_clean}/{name}" if parent_clean else name


def parent_path(path: str) -> str:
    parts = split_posix(path)
    return "/".join(parts[:-1])


def base_name(path: str) -> str:
    parts = split_posix(path)
    return parts[-1] if parts else ""


def is_valid_name(name: str) -> bool:
    """True if `name` only uses letters, digits, '.', '_' and '-'."""
    return bool(_NAME_RE.match(name or ""))


def format_bytes(size: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 B"
    i = 0
    while size >= 1024 ** (i + 1) and i < len(_BYTE_UNITS) - 1:
        i += 1
    value = round(size / (1024 ** i), 1)
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[i]}"
