"""MCP tools that browse the active repository.

Registers 'navigate', 'refresh', 'breadcrumbs' and 'read_file'. Listings
come back with breadcrumbs so a client can render the current folder.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

from mcp.server.fastmcp import FastMCP

from core.models import DirectoryEntry
from core.notifications import guard
from core.paths import format_bytes
from session.session import Session
from workflows.files import open_file


def entry_view(entry: DirectoryEntry) -> Dict[str, Any]:
    out = entry.to_dict()
    out["size_display"] = "-" if entry.is_directory else format_bytes(entry.size or 0)
    return out


def listing_view(session: Session, entries: Sequence[DirectoryEntry]) -> Dict[str, Any]:
    active = session.active_repository
    return {
        "repository": active.full_name if active else None,
        "path": session.current_path or "/",
        "breadcrumbs": [{"label": c.label, "path": c.path} for c in session.navigator.breadcrumbs()],
        "entries": [entry_view(e) for e in entries],
    }


def register(mcp: FastMCP, *, session: Session) -> None:
    @mcp.tool(name="navigate")
    async def navigate(path: str = "") -> Dict[str, Any]:
        """List a folder of the active repository ('' is the root) and make it current."""

        async def _run() -> Dict[str, Any]:
            entries = await session.navigate_to(path)
            return listing_view(session, entries)

        return await guard(_run)

    @mcp.tool(name="refresh")
    async def refresh() -> Dict[str, Any]:
        """Reload the current folder."""

        async def _run() -> Dict[str, Any]:
            entries = await session.refresh()
            return listing_view(session, entries)

        return await guard(_run)

    @mcp.tool(name="breadcrumbs")
    async def breadcrumbs() -> Dict[str, Any]:
        """Breadcrumb trail for the current folder; each path can be passed to 'navigate'."""
        return {"breadcrumbs": [{"label": c.label, "path": c.path} for c in session.navigator.breadcrumbs()]}

    @mcp.tool(name="read_file")
    async def read_file(path: str) -> Dict[str, Any]:
        """Read a text file of the active repository.

        Returns the decoded content and the sha needed to save changes with
        'save_file'.
        """

        async def _run() -> Dict[str, Any]:
            file = await open_file(session, path)
            return {"path": file.path, "sha": file.sha, "content": file.content}

        return await guard(_run)
