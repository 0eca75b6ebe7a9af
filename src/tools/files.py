"""MCP tools that change files in the active repository.

Registers create_file, create_folder, save_file, rename_entry,
delete_entry, upload_files and download_file. Each returns a
notification; deletes need confirm=true.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from config import MAX_UPLOAD_BYTES
from core.interfaces import PresetConfirm
from core.models import Notification
from core.notifications import guard, success
from session.session import Session
from sources.local_source import LocalSource
from workflows import files as file_workflows
from workflows.upload import upload_files as run_upload
from workflows.upload import upload_notification


def register(mcp: FastMCP, *, session: Session, local: LocalSource) -> None:
    @mcp.tool(name="create_file")
    async def create_file(name: str, content: str = "", message: Optional[str] = None) -> Dict[str, Any]:
        """Create a text file in the current folder.

        Names may only use letters, digits, '.', '_' and '-'.
        """

        async def _run() -> Dict[str, Any]:
            sha = await file_workflows.create_file(session, name, content, message)
            return {"notification": success("File created successfully").to_dict(), "sha": sha}

        return await guard(_run)

    @mcp.tool(name="create_folder")
    async def create_folder(name: str, message: Optional[str] = None) -> Dict[str, Any]:
        """Create a folder in the current folder (commits a .gitkeep placeholder)."""

        async def _run() -> Dict[str, Any]:
            sha = await file_workflows.create_folder(session, name, message)
            return {"notification": success("Folder created successfully").to_dict(), "sha": sha}

        return await guard(_run)

    @mcp.tool(name="save_file")
    async def save_file(path: str, content: str, sha: str, message: Optional[str] = None) -> Dict[str, Any]:
        """Save edited content; `sha` must be the one returned by 'read_file'.

        If the file changed on GitHub since it was read, the save is rejected.
        """

        async def _run() -> Dict[str, Any]:
            new_sha = await file_workflows.save_file(session, path, content, sha, message)
            return {"notification": success("File saved successfully").to_dict(), "sha": new_sha}

        return await guard(_run)

    @mcp.tool(name="rename_entry")
    async def rename_entry(
        path: str,
        new_name: str,
        sha: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Rename a file within its folder.

        Runs as copy-then-delete; if the delete fails both files remain.
        """

        async def _run() -> Dict[str, Any]:
            new_path = await file_workflows.rename_entry(session, path, new_name, sha, message)
            return {"notification": success("Renamed successfully").to_dict(), "path": new_path}

        return await guard(_run)

    @mcp.tool(name="delete_entry")
    async def delete_entry(
        path: str,
        sha: str,
        entry_type: str = "file",
        confirm: bool = False,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Delete a file (requires confirm=true and the sha from the listing)."""

        async def _run() -> Dict[str, Any]:
            answer = PresetConfirm(confirm)
            deleted = await file_workflows.delete_entry(session, path, sha, entry_type, answer, message)
            if not deleted:
                text = f"Cancelled: {answer.declined} (pass confirm=true to proceed)"
                return {"notification": Notification(title="Cancelled", message=text, severity="info").to_dict()}
            return {"notification": success("Deleted successfully").to_dict()}

        return await guard(_run)

    @mcp.tool(name="upload_files")
    async def upload_files(paths: List[str], message: str = "Upload files") -> Dict[str, Any]:
        """Upload local files (paths under the project root) into the current folder.

        Existing files with the same name are overwritten. Files are sent one
        at a time and a failure does not stop the rest.
        """

        async def _run() -> Dict[str, Any]:
            items = await local.load_upload_files(paths)
            report = await run_upload(session, items, message, max_total_bytes=MAX_UPLOAD_BYTES)
            return {
                "notification": upload_notification(report).to_dict(),
                "succeeded": report.success_count,
                "failed": report.failure_count,
                "errors": report.errors,
            }

        return await guard(_run)

    @mcp.tool(name="download_file")
    async def download_file(path: str, destination: Optional[str] = None) -> Dict[str, Any]:
        """Save a repository file to the project root (default: its own name)."""

        async def _run() -> Dict[str, Any]:
            written = await file_workflows.download_file(session, path, local, destination)
            return {"notification": success("File downloaded").to_dict(), "path": str(written)}

        return await guard(_run)
