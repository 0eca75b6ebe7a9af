"""File and folder workflows for the active repository.

Each workflow is a short sequence of Contents API calls against the
session's active repository. Successful mutations refresh the current
listing. None of them retry, and rename is not transactional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clients.github.inputs import normalize_message, normalize_path, validate_name
from core.errors import PartialRenameError, RemoteError, RepoManagerError, ValidationError
from core.interfaces import Confirm
from core.log import get_logger
from core.models import EntryType, FileContent
from core.paths import base_name, join_path, parent_path
from session.session import Session
from sources.local_source import LocalSource

logger = get_logger("workflows")

FOLDER_PLACEHOLDER = ".gitkeep"


async def refresh_after_change(session: Session) -> None:
    """Reload the current listing after a successful mutation.

    A failed reload is already recorded as listing-error on the navigator, so
    it does not turn the completed mutation into a failure.
    """
    try:
        await session.refresh()
    except RepoManagerError as e:
        logger.warning("Listing refresh failed after change: %s", e)


async def create_file(session: Session, name: str, content: str, message: Optional[str] = None) -> str:
    """Create a new file in the current folder; returns its sha."""
    name_clean = validate_name(name, what="File name")
    client = session.client()
    path = join_path(session.current_path, name_clean)

    sha = await client.write_file(path, content or "", normalize_message(message, f"Create {name_clean}"))
    logger.info("Created %s", path)
    await refresh_after_change(session)
    return sha


async def create_folder(session: Session, name: str, message: Optional[str] = None) -> str:
    """Create a folder by committing an empty placeholder file inside it.

    The Contents API has no notion of an empty directory.
    """
    name_clean = validate_name(name, what="Folder name")
    client = session.client()
    path = join_path(join_path(session.current_path, name_clean), FOLDER_PLACEHOLDER)

    sha = await client.write_file(path, "", normalize_message(message, f"Create folder {name_clean}"))
    logger.info("Created folder %s", parent_path(path))
    await refresh_after_change(session)
    return sha


async def open_file(session: Session, path: str) -> FileContent:
    """Read a file for editing; keep the returned sha for `save_file`."""
    return await session.client().read_file(path)


async def save_file(
    session: Session,
    path: str,
    content: str,
    sha: str,
    message: Optional[str] = None,
) -> str:
    """Write edited content back using the sha obtained when the file was opened.

    If the file changed remotely in the meantime GitHub rejects the write and
    the RemoteError propagates unchanged.
    """
    path_clean = normalize_path(path)
    if not (sha or "").strip():
        raise ValidationError("sha is required to update a file")

    new_sha = await session.client().write_file(
        path_clean,
        content or "",
        normalize_message(message, f"Update {base_name(path_clean)}"),
        existing_sha=sha,
    )
    logger.info("Saved %s", path_clean)
    await refresh_after_change(session)
    return new_sha


async def rename_entry(
    session: Session,
    path: str,
    new_name: str,
    sha: Optional[str] = None,
    message: Optional[str] = None,
) -> str:
    """Rename a file in three separate commits: read, create copy, delete original.

    This is not atomic. If the copy is created but the original cannot be
    deleted, both files remain and PartialRenameError is raised; nothing is
    rolled back. Returns the new path.
    """
    name_clean = validate_name(new_name, what="New name")
    source = normalize_path(path)
    old_name = base_name(source)
    destination = join_path(parent_path(source), name_clean)
    if destination == source:
        raise ValidationError("New name is the same as the current name")

    client = session.client()

    # 1) current payload and sha of the source
    raw = await client.read_raw(source)

    # 2) copy to destination, assuming nothing exists there yet
    await client.upload_binary(
        destination,
        raw.content_b64,
        normalize_message(message, f"Rename {old_name}"),
        check_existing=False,
    )

    # 3) delete the source at the sha it had when listed (or when read)
    try:
        await client.delete_entry(source, sha or raw.sha, f"Delete {old_name}")
    except RepoManagerError as e:
        logger.warning("Rename left both %s and %s in place: %s", source, destination, e)
        raise PartialRenameError(
            f"Created {destination} but failed to delete {source}: {e}",
            source=source,
            destination=destination,
            status=e.status if isinstance(e, RemoteError) else None,
        ) from e

    logger.info("Renamed %s -> %s", source, destination)
    await refresh_after_change(session)
    return destination


async def delete_entry(
    session: Session,
    path: str,
    sha: str,
    entry_type: EntryType | str,
    confirm: Confirm,
    message: Optional[str] = None,
) -> bool:
    """Delete after confirmation; returns False if the user declined."""
    path_clean = normalize_path(path)
    kind = entry_type.value if isinstance(entry_type, EntryType) else str(entry_type or "file")
    client = session.client()

    if not confirm(f"Are you sure you want to delete this {kind}?"):
        return False

    await client.delete_entry(path_clean, sha, normalize_message(message, f"Delete {path_clean}"))
    logger.info("Deleted %s", path_clean)
    await refresh_after_change(session)
    return True


async def download_file(session: Session, path: str, local: LocalSource, destination: Optional[str] = None) -> Path:
    """Save the decoded text of a repository file to the local sandbox."""
    file = await session.client().read_file(path)
    target = destination or base_name(file.path)
    return await local.write_bytes(target, file.content.encode("utf-8"))
