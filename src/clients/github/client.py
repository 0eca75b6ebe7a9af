"""GitHub Contents API client: list, read, write and delete repository files.

This module provides a small async client around the
`/repos/{owner}/{repo}/contents/{path}` endpoint family for a single
repository registration. It is stateless between calls: every mutation
carries the sha it replaces, and shas are threaded through by the caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from core.errors import (
    DecodeError,
    NotFoundError,
    RemoteError,
    UnauthorizedError,
    ValidationError,
)
from core.log import get_logger
from core.models import DirectoryEntry, FileContent, RawFile, RepositoryRegistration

from .codec import decode_text, encode_text
from .inputs import normalize_dir_path, normalize_path

logger = get_logger("http")


class ContentsClient:
    """Async GitHub Contents API client bound to one repository registration.

    Purpose:
      - list_directory(path) -> List[DirectoryEntry]
      - read_file(path) -> FileContent (decoded text + sha)
      - write_file / upload_binary -> new sha
      - delete_entry(path, sha, message)

    Key behavior:
      - 401 -> UnauthorizedError, 404 -> NotFoundError, any other non-2xx ->
        RemoteError carrying GitHub's `message` and the status code.
      - No caching, no retries.
    """

    BASE_URL = "https://api.github.com"
    JSON_ACCEPT = "application/vnd.github.v3+json"
    USER_AGENT = "github-repo-manager"

    def __init__(
        self,
        registration: RepositoryRegistration,
        *,
        base_url: str = BASE_URL,
        timeout: float = 20.0,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._registration = registration
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._transport = transport

        self._headers = self._build_headers()

    @property
    def registration(self) -> RepositoryRegistration:
        return self._registration

    async def list_directory(self, path: str = "") -> List[DirectoryEntry]:
        """List a directory; a file path yields a one-element listing."""
        path_clean = normalize_dir_path(path)
        data = await self._get_json(path_clean, context="list_directory")

        # The API answers with an object for files and an array for directories
        items = data if isinstance(data, list) else [data]
        return [DirectoryEntry.from_api(item) for item in items if isinstance(item, dict)]

    async def read_raw(self, path: str) -> RawFile:
        """Read a file without decoding its base64 payload."""
        path_clean = normalize_path(path)
        data = await self._get_json(path_clean, context="read_file")

        if isinstance(data, list):
            raise ValidationError(f"Not a file: {path_clean}")

        content = data.get("content")
        if not isinstance(content, str):
            raise DecodeError(f"No inline content returned for: {path_clean}")
        # GitHub wraps the payload at 60 columns; keep it as one base64 string
        return RawFile(path=path_clean, content_b64="".join(content.split()), sha=str(data.get("sha", "")))

    async def read_file(self, path: str) -> FileContent:
        raw = await self.read_raw(path)
        return FileContent(path=raw.path, content=decode_text(raw.content_b64), sha=raw.sha)

    async def find_sha(self, path: str) -> Optional[str]:
        """Return the sha of an existing file at `path`, or None if nothing is there."""
        path_clean = normalize_path(path)
        try:
            data = await self._get_json(path_clean, context="find_sha")
        except NotFoundError:
            return None

        if isinstance(data, dict):
            return data.get("sha") or None
        return None

    async def write_file(
        self,
        path: str,
        content: str,
        message: str,
        existing_sha: Optional[str] = None,
    ) -> str:
        """Create (no sha) or update (sha of the version being replaced) a text file."""
        return await self._put(normalize_path(path), encode_text(content), message, existing_sha)

    async def upload_binary(
        self,
        path: str,
        content_b64: str,
        message: str,
        existing_sha: Optional[str] = None,
        *,
        check_existing: bool = True,
    ) -> str:
        """Write an already base64-encoded payload.

        When no sha is given and `check_existing` is set, the current sha is
        looked up first so an existing file is overwritten instead of rejected.
        """
        path_clean = normalize_path(path)
        if existing_sha is None and check_existing:
            existing_sha = await self.find_sha(path_clean)
        return await self._put(path_clean, content_b64, message, existing_sha)

    async def delete_entry(self, path: str, sha: str, message: str) -> None:
        path_clean = normalize_path(path)
        if not (sha or "").strip():
            raise ValidationError("sha is required to delete")

        await self._send(
            "DELETE",
            path_clean,
            json={"message": message, "sha": sha},
            context="delete_entry",
        )

    # --- HTTP helpers ---

    def _build_headers(self) -> dict[str, str]:
        return {
            "Accept": self.JSON_ACCEPT,
            "Authorization": f"token {self._registration.token}",
            "User-Agent": self.USER_AGENT,
        }

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
            transport=self._transport,
        )

    def _contents_url(self, path: str) -> str:
        reg = self._registration
        # '#', '?' and spaces in file names must not become fragment or query
        return f"/repos/{quote(reg.owner, safe='')}/{quote(reg.repo, safe='')}/contents/{quote(path, safe='/')}"

    async def _put(self, path: str, content_b64: str, message: str, sha: Optional[str]) -> str:
        body: Dict[str, Any] = {"message": message, "content": content_b64}
        if sha:
            body["sha"] = sha

        resp = await self._send("PUT", path, json=body, context="write_file")
        data = self._json(resp, context="write_file")
        try:
            return str(data["content"]["sha"])
        except (KeyError, TypeError) as e:
            raise RemoteError("GitHub response did not include the new sha", resp.status_code) from e

    async def _get_json(self, path: str, *, context: str) -> Any:
        resp = await self._send("GET", path, context=context)
        return self._json(resp, context=context)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        context: str,
    ) -> httpx.Response:
        url = self._contents_url(path)
        try:
            async with self._create_client() as client:
                resp = await client.request(method, url, json=json)
        except httpx.HTTPError as e:
            raise RemoteError(f"GitHub request failed ({context}): {e}") from e

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        self._raise_for_status(resp, path=path)
        return resp

    def _raise_for_status(self, resp: httpx.Response, *, path: str) -> None:
        if resp.is_success:
            return

        status = resp.status_code
        remote_message = self._remote_message(resp)

        if status == 401:
            raise UnauthorizedError("Invalid token or unauthorized")
        if status == 404:
            raise NotFoundError(f"Repository or path not found: {path or '/'}")
        raise RemoteError(remote_message or f"GitHub request failed ({status})", status)

    def _remote_message(self, resp: httpx.Response) -> Optional[str]:
        try:
            data = resp.json()
        except ValueError:
            return None
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            return data["message"]
        return None

    def _json(self, resp: httpx.Response, *, context: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError(f"GitHub returned invalid JSON ({context})", resp.status_code) from e
