from __future__ import annotations

from typing import Tuple

from core.errors import ValidationError
from core.paths import is_valid_name, normalize_posix_relpath


TOKEN_PREFIXES = ("ghp_", "github_pat_")


def looks_like_token(token: str) -> bool:
    # Classic and fine-grained personal access tokens
    return (token or "").strip().startswith(TOKEN_PREFIXES)


def normalize_registration(token: str, owner: str, repo: str) -> Tuple[str, str, str]:
    token_clean = (token or "").strip()
    owner_clean = (owner or "").strip()
    repo_clean = (repo or "").strip()
    if not token_clean or not owner_clean or not repo_clean:
        raise ValidationError("Please fill all fields")
    return token_clean, owner_clean, repo_clean


def normalize_dir_path(path: str) -> str:
    # Directory paths may be empty: '' is the repository root
    return normalize_posix_relpath(path)


def normalize_path(path: str) -> str:
    # File paths must name something below the root
    path_clean = normalize_posix_relpath(path)
    if not path_clean:
        raise ValidationError("path must be non-empty")
    return path_clean


def validate_name(name: str, *, what: str = "Name") -> str:
    name_clean = (name or "").strip()
    if not name_clean:
        raise ValidationError(f"{what} is required")
    if not is_valid_name(name_clean):
        raise ValidationError(f"{what} contains invalid characters")
    return name_clean


def normalize_message(message: str, default: str) -> str:
    msg = (message or "").strip()
    return msg or default
