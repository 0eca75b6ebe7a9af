"""MCP tools that manage the repository registry.

Registers tools to add, list, select, update, remove, clear, export and
import repository registrations. Tokens never leave the server through
these tools except in an explicit export file.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.interfaces import PresetConfirm
from core.models import AddOutcome, Notification, RepositoryRegistration
from core.notifications import guard, success
from session.session import Session
from sources.local_source import LocalSource
from tools.browse import listing_view
from workflows import repositories as repo_workflows


def registration_view(reg: RepositoryRegistration, *, active_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": reg.id,
        "full_name": reg.full_name,
        "owner": reg.owner,
        "repo": reg.repo,
        "token": reg.masked_token,
        "added_at": reg.added_at,
        "updated_at": reg.updated_at,
        "active": reg.id == active_id,
    }


def _cancelled(question: Optional[str]) -> Dict[str, Any]:
    text = f"Cancelled: {question} (pass confirm=true to proceed)" if question else "Cancelled"
    return {"notification": Notification(title="Cancelled", message=text, severity="info").to_dict()}


def register(mcp: FastMCP, *, session: Session, local: LocalSource) -> None:
    @mcp.tool(name="add_repository")
    async def add_repository(token: str, owner: str, repo: str, confirm: bool = False) -> Dict[str, Any]:
        """Register a GitHub repository (owner/repo) with a personal access token.

        If the token does not look like a personal access token, or the
        repository is already registered (its token would be replaced), the
        call is cancelled unless confirm is true.
        """

        async def _run() -> Dict[str, Any]:
            answer = PresetConfirm(confirm)
            result = repo_workflows.add_repository(session, token, owner, repo, answer)
            if result is None:
                return _cancelled(answer.declined)
            verb = "updated" if result.outcome is AddOutcome.UPDATED else "added"
            return {
                "notification": success(f"Repository {verb} successfully").to_dict(),
                "outcome": result.outcome.value,
                "repository": registration_view(result.registration),
            }

        return await guard(_run)

    @mcp.tool(name="list_repositories")
    async def list_repositories() -> Dict[str, Any]:
        """List registered repositories (tokens masked)."""
        active = session.active_repository
        active_id = active.id if active else None
        return {
            "repositories": [registration_view(r, active_id=active_id) for r in session.registry],
            "summary": session.summary(),
        }

    @mcp.tool(name="select_repository")
    async def select_repository(repo_id: str) -> Dict[str, Any]:
        """Make a registered repository active and list its root folder."""

        async def _run() -> Dict[str, Any]:
            entries = await session.select_repository(repo_id)
            return {
                "notification": success(f"Opened {session.active_repository.full_name}").to_dict(),
                **listing_view(session, entries),
            }

        return await guard(_run)

    @mcp.tool(name="update_repository")
    async def update_repository(repo_id: str, token: str) -> Dict[str, Any]:
        """Replace the token stored for a registered repository."""

        async def _run() -> Dict[str, Any]:
            reg = session.update_repository(repo_id, token)
            return {
                "notification": success("Repository updated successfully").to_dict(),
                "repository": registration_view(reg),
            }

        return await guard(_run)

    @mcp.tool(name="remove_repository")
    async def remove_repository(repo_id: str, confirm: bool = False) -> Dict[str, Any]:
        """Remove a repository from the list (requires confirm=true)."""

        async def _run() -> Dict[str, Any]:
            answer = PresetConfirm(confirm)
            removed = repo_workflows.remove_repository(session, repo_id, answer)
            if removed is None:
                return _cancelled(answer.declined)
            return {"notification": success("Repository removed").to_dict(), "removed": removed.full_name}

        return await guard(_run)

    @mcp.tool(name="clear_repositories")
    async def clear_repositories(confirm: bool = False) -> Dict[str, Any]:
        """Remove every registered repository (requires confirm=true)."""

        async def _run() -> Dict[str, Any]:
            answer = PresetConfirm(confirm)
            count = repo_workflows.clear_repositories(session, answer)
            if count is None:
                return _cancelled(answer.declined)
            return {"notification": success("All repositories cleared").to_dict(), "removed": count}

        return await guard(_run)

    @mcp.tool(name="export_repositories")
    async def export_repositories(destination: Optional[str] = None) -> Dict[str, Any]:
        """Export all registrations to a JSON file under the project root.

        The file contains plaintext tokens; treat it as a secret.
        """

        async def _run() -> Dict[str, Any]:
            path = await repo_workflows.export_repositories(session, local, destination)
            return {
                "notification": success("Repositories exported successfully").to_dict(),
                "path": str(path),
                "warning": "The export contains plaintext access tokens.",
            }

        return await guard(_run)

    @mcp.tool(name="import_repositories")
    async def import_repositories(source: str) -> Dict[str, Any]:
        """Replace the registry with the registrations in a JSON export file."""

        async def _run() -> Dict[str, Any]:
            count = await repo_workflows.import_repositories(session, local, source)
            return {"notification": success(f"Imported {count} repositories").to_dict(), "count": count}

        return await guard(_run)

    @mcp.tool(name="session_summary")
    async def session_summary() -> Dict[str, Any]:
        """Totals, active repository and current folder."""
        return session.summary()
