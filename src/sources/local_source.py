from __future__ import annotations

import asyncio
import functools
from pathlib import Path, PurePath
from typing import List, Sequence

from core.errors import AccessDeniedError, NotFoundError, RepoManagerError, ValidationError
from core.models import UploadFile


"""Local filesystem sandbox.

Provides safe access to files under PROJECT_ROOT for the workflows that
touch the local disk: reading files to upload, writing downloaded files and
registry exports, and reading import documents.
"""


class LocalSource:
    # Local filesystem access confined to the project root.

    def __init__(self, *, project_root: Path) -> None:
        self._project_root = project_root.resolve()

    @property
    def project_root(self) -> Path:
        return self._project_root

    def resolve(self, rel_path: str) -> Path:
        raw = (rel_path or "").strip()
        if not raw:
            raise ValidationError("Path is empty")

        p = (self._project_root / raw).resolve()

        # Strong containment check to prevent directory traversal/outside access
        try:
            p.relative_to(self._project_root)
        except ValueError as e:
            raise AccessDeniedError("Access outside project root is not allowed") from e

        return p

    async def read_bytes(self, path: str) -> bytes:
        p = self.resolve(path)

        def _do() -> bytes:
            if not p.exists():
                raise NotFoundError(f"File not found: {path}")
            if not p.is_file():
                raise ValidationError(f"Not a file: {path}")
            return p.read_bytes()

        # Offload blocking filesystem IO to a thread to keep async loop responsive
        return await asyncio.to_thread(_do)

    async def load_upload_files(self, paths: Sequence[str]) -> List[UploadFile]:
        """Describe each path as an UploadFile named after its last segment.

        Only sizes are looked up here. Contents are read when the file is
        uploaded, so a missing or unreadable path fails on its own.
        """
        out: List[UploadFile] = []
        for path in paths:
            size = await asyncio.to_thread(self._size_of, path)
            out.append(
                UploadFile(
                    name=PurePath((path or "").strip()).name or path,
                    loader=functools.partial(self.read_bytes, path),
                    declared_size=size,
                )
            )
        return out

    def _size_of(self, path: str) -> int:
        # Errors resurface with their own message when the file is read
        try:
            p = self.resolve(path)
            return p.stat().st_size if p.is_file() else 0
        except (RepoManagerError, OSError):
            return 0

    async def write_bytes(self, path: str, data: bytes) -> Path:
        p = self.resolve(path)

        def _do() -> Path:
            if p.exists() and p.is_dir():
                raise ValidationError(f"Is a directory: {path}")
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
            return p

        return await asyncio.to_thread(_do)
