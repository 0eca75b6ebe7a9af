"""Registry workflows that involve the user: confirmations and file exchange."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clients.github.inputs import looks_like_token, normalize_registration
from core.interfaces import Confirm
from core.log import get_logger
from core.models import AddResult, RepositoryRegistration
from session.session import Session
from sources.local_source import LocalSource

logger = get_logger("workflows")


def add_repository(session: Session, token: str, owner: str, repo: str, confirm: Confirm) -> Optional[AddResult]:
    """Register a repository, asking before unusual tokens or overwrites.

    Returns None when the user declines either question.
    """
    token_clean, owner_clean, repo_clean = normalize_registration(token, owner, repo)

    if not looks_like_token(token_clean):
        if not confirm("Token format looks incorrect. Continue anyway?"):
            return None

    if session.registry.find(owner_clean, repo_clean) is not None:
        if not confirm("Repository already exists. Update token?"):
            return None

    return session.add_repository(token_clean, owner_clean, repo_clean)


def remove_repository(session: Session, repo_id: str, confirm: Confirm) -> Optional[RepositoryRegistration]:
    session.registry.require(repo_id)
    if not confirm("Remove this repository from the list?"):
        return None
    return session.remove_repository(repo_id)


def clear_repositories(session: Session, confirm: Confirm) -> Optional[int]:
    if not confirm("Clear all repositories? This action cannot be undone."):
        return None
    return session.clear_repositories()


async def export_repositories(session: Session, local: LocalSource, destination: Optional[str] = None) -> Path:
    """Write the registry (plaintext tokens included) to a JSON file in the sandbox."""
    payload = session.registry.export()
    target = destination or session.registry.export_filename()
    path = await local.write_bytes(target, payload)
    logger.info("Exported %d repositories to %s", len(session.registry), path)
    return path


async def import_repositories(session: Session, local: LocalSource, source: str) -> int:
    data = await local.read_bytes(source)
    return session.import_repositories(data)
