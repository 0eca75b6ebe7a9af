"""Dataclasses for the records the manager keeps and exchanges.

Includes the persisted repository registration, the ephemeral directory
entries fetched from GitHub, file read results, upload inputs/reports and
the user-facing notification payload.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Literal, Mapping, Optional


Severity = Literal["success", "warning", "error", "info"]

REQUIRED_RECORD_FIELDS = ("id", "token", "owner", "repo", "addedAt")


@dataclass
class RepositoryRegistration:
    """A stored (owner, repo, token) tuple.

    Field names mirror the persisted record, which uses camelCase keys:
    {id, token, owner, repo, addedAt, updatedAt?}.
    """

    id: str
    token: str
    owner: str
    repo: str
    added_at: str
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def masked_token(self) -> str:
        return f"{self.token[:10]}..."

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "token": self.token,
            "owner": self.owner,
            "repo": self.repo,
            "addedAt": self.added_at,
        }
        if self.updated_at is not None:
            out["updatedAt"] = self.updated_at
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RepositoryRegistration":
        updated = data.get("updatedAt")
        return cls(
            id=str(data["id"]),
            token=str(data["token"]),
            owner=str(data["owner"]),
            repo=str(data["repo"]),
            added_at=str(data["addedAt"]),
            updated_at=str(updated) if updated is not None else None,
        )


class EntryType(str, enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: str
    type: EntryType
    sha: str
    size: Optional[int] = None

    @property
    def is_directory(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "DirectoryEntry":
        # GitHub reports "dir" for folders; files, symlinks and submodules are all leaf entries here
        kind = EntryType.DIRECTORY if item.get("type") == "dir" else EntryType.FILE
        size = item.get("size")
        return cls(
            name=str(item.get("name", "")),
            path=str(item.get("path", "")),
            type=kind,
            sha=str(item.get("sha", "")),
            size=int(size) if kind is EntryType.FILE and size is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.type.value,
            "sha": self.sha,
            "size": self.size,
        }


@dataclass(frozen=True)
class FileContent:
    """Decoded text of a file plus the sha it was read at."""

    path: str
    content: str
    sha: str


@dataclass(frozen=True)
class RawFile:
    """Undecoded (base64) file payload plus its sha."""

    path: str
    content_b64: str
    sha: str


class AddOutcome(str, enum.Enum):
    ADDED = "added"
    UPDATED = "updated"


@dataclass(frozen=True)
class AddResult:
    outcome: AddOutcome
    registration: RepositoryRegistration


@dataclass(frozen=True)
class UploadFile:
    """One file of an upload batch.

    Either holds its bytes (`data`) or a `loader` that reads them when the
    file's turn comes; `declared_size` is then the size known up front.
    """

    name: str
    data: bytes = b""
    loader: Optional[Callable[[], Awaitable[bytes]]] = None
    declared_size: Optional[int] = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)

    async def read(self) -> bytes:
        if self.loader is not None:
            return await self.loader()
        return self.data


@dataclass(frozen=True)
class UploadFailure:
    name: str
    message: str


@dataclass
class UploadReport:
    succeeded: List[str] = field(default_factory=list)
    failed: List[UploadFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def errors(self) -> List[str]:
        return [f"{f.name}: {f.message}" for f in self.failed]


@dataclass(frozen=True)
class Notification:
    """User-visible outcome of a workflow (title / message / severity)."""

    title: str
    message: str
    severity: Severity = "info"

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "message": self.message, "severity": self.severity}
