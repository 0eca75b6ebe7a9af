"""In-memory registry of repository registrations, kept in sync with the store.

Every mutation is written through to the CredentialStore immediately.
"""

from __future__ import annotations

import json
import time
from datetime import date, datetime, timezone
from typing import Callable, Iterator, List, Optional

from clients.github.inputs import looks_like_token, normalize_registration
from core.errors import (
    EmptyCollectionError,
    InvalidFormatError,
    InvalidRecordError,
    ValidationError,
)
from core.log import get_logger, safe_log_dict
from core.models import REQUIRED_RECORD_FIELDS, AddOutcome, AddResult, RepositoryRegistration
from storage.credential_store import CredentialStore

logger = get_logger("registry")


def _utc_now_iso() -> str:
    # Millisecond precision with a Z suffix, e.g. 2024-05-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _millis_id() -> str:
    return str(int(time.time() * 1000))


class RepositoryRegistry:
    def __init__(
        self,
        store: CredentialStore,
        *,
        clock: Callable[[], str] = _utc_now_iso,
        id_factory: Callable[[], str] = _millis_id,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory
        self._items: List[RepositoryRegistration] = store.load()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[RepositoryRegistration]:
        return iter(list(self._items))

    def list(self) -> List[RepositoryRegistration]:
        return list(self._items)

    def get(self, repo_id: str) -> Optional[RepositoryRegistration]:
        for item in self._items:
            if item.id == repo_id:
                return item
        return None

    def require(self, repo_id: str) -> RepositoryRegistration:
        item = self.get(repo_id)
        if item is None:
            raise ValidationError(f"Unknown repository id: {repo_id}")
        return item

    def find(self, owner: str, repo: str) -> Optional[RepositoryRegistration]:
        owner_clean = (owner or "").strip()
        repo_clean = (repo or "").strip()
        for item in self._items:
            if item.owner == owner_clean and item.repo == repo_clean:
                return item
        return None

    @staticmethod
    def looks_like_token(token: str) -> bool:
        """Soft check only; `add` never rejects on token format."""
        return looks_like_token(token)

    def add(self, token: str, owner: str, repo: str) -> AddResult:
        token_clean, owner_clean, repo_clean = normalize_registration(token, owner, repo)

        existing = self.find(owner_clean, repo_clean)
        if existing is not None:
            existing.token = token_clean
            existing.updated_at = self._clock()
            self._save()
            logger.info("Updated token for %s", existing.full_name)
            return AddResult(outcome=AddOutcome.UPDATED, registration=existing)

        registration = RepositoryRegistration(
            id=self._new_id(),
            token=token_clean,
            owner=owner_clean,
            repo=repo_clean,
            added_at=self._clock(),
        )
        self._items.append(registration)
        self._save()
        logger.info("Added %s", registration.full_name)
        logger.debug("Stored registration %s", safe_log_dict(registration.to_dict()))
        return AddResult(outcome=AddOutcome.ADDED, registration=registration)

    def update(self, repo_id: str, token: str) -> RepositoryRegistration:
        """Replace the token of an existing registration in place."""
        item = self.require(repo_id)
        token_clean = (token or "").strip()
        if not token_clean:
            raise ValidationError("Token is required")
        item.token = token_clean
        item.updated_at = self._clock()
        self._save()
        return item

    def remove(self, repo_id: str) -> RepositoryRegistration:
        item = self.require(repo_id)
        self._items = [r for r in self._items if r.id != repo_id]
        self._save()
        logger.info("Removed %s", item.full_name)
        return item

    def clear(self) -> int:
        count = len(self._items)
        self._items = []
        self._save()
        return count

    def export(self) -> bytes:
        """Serialize every registration, tokens included, as pretty JSON."""
        if not self._items:
            raise EmptyCollectionError("No repositories to export")
        return json.dumps([r.to_dict() for r in self._items], indent=2).encode("utf-8")

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        day = today or datetime.now(timezone.utc).date()
        return f"github-repos-backup-{day.isoformat()}.json"

    def import_(self, data: bytes | str) -> int:
        """Replace the whole registry with the records in `data`; returns the count.

        Nothing changes unless every record validates.
        """
        try:
            parsed = json.loads(data)
        except (ValueError, TypeError) as e:
            raise InvalidFormatError("Invalid data format") from e

        if not isinstance(parsed, list):
            raise InvalidFormatError("Invalid data format")

        for record in parsed:
            if not isinstance(record, dict) or not all(record.get(k) for k in REQUIRED_RECORD_FIELDS):
                raise InvalidRecordError("Invalid repository data")

        self._items = [RepositoryRegistration.from_dict(r) for r in parsed]
        self._save()
        logger.info("Imported %d repositories", len(self._items))
        return len(self._items)

    def _new_id(self) -> str:
        candidate = self._id_factory()
        taken = {r.id for r in self._items}
        # Two adds within the same millisecond would otherwise collide
        while candidate in taken:
            candidate = str(int(candidate) + 1) if candidate.isdigit() else f"{candidate}-1"
        return candidate

    def _save(self) -> None:
        self._store.save(self._items)
