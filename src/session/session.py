"""The single owned session object passed to every workflow.

Holds the repository registry, the navigation state and the factory used
to build a Contents API client for the active repository. All mutation
happens on the event loop that owns the session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx

from clients.github import ContentsClient
from config import GITHUB_API_URL, HTTP_TIMEOUT, HTTP_VERIFY, STORAGE_KEY, STORAGE_PATH
from core.events import EventEmitter
from core.models import AddResult, DirectoryEntry, RepositoryRegistration
from session.navigation import Navigator
from session.registry import RepositoryRegistry
from storage.credential_store import CredentialStore
from storage.kv_store import JsonFileStore

ClientFactory = Callable[[RepositoryRegistration], ContentsClient]


class Session:
    def __init__(
        self,
        registry: RepositoryRegistry,
        *,
        client_factory: ClientFactory,
        events: Optional[EventEmitter] = None,
    ) -> None:
        self.registry = registry
        self.events = events or EventEmitter()
        self._client_factory = client_factory
        self.navigator = Navigator(self._list_directory, events=self.events)

    async def _list_directory(self, registration: RepositoryRegistration, path: str) -> List[DirectoryEntry]:
        return await self._client_factory(registration).list_directory(path)

    @property
    def active_repository(self) -> Optional[RepositoryRegistration]:
        return self.navigator.active_repository

    @property
    def current_path(self) -> str:
        return self.navigator.current_path

    def client(self) -> ContentsClient:
        """Contents client for the active repository (NoRepositorySelectedError otherwise)."""
        return self._client_factory(self.navigator.require_active())

    async def select_repository(self, repo_id: str) -> List[DirectoryEntry]:
        registration = self.registry.require(repo_id)
        return await self.navigator.select_repository(registration)

    async def navigate_to(self, path: str) -> List[DirectoryEntry]:
        return await self.navigator.navigate_to(path)

    async def refresh(self) -> List[DirectoryEntry]:
        return await self.navigator.refresh()

    def add_repository(self, token: str, owner: str, repo: str) -> AddResult:
        result = self.registry.add(token, owner, repo)
        self._registry_changed()
        return result

    def update_repository(self, repo_id: str, token: str) -> RepositoryRegistration:
        registration = self.registry.update(repo_id, token)
        self.navigator.rebind(registration)
        self._registry_changed()
        return registration

    def remove_repository(self, repo_id: str) -> RepositoryRegistration:
        removed = self.registry.remove(repo_id)
        active = self.navigator.active_repository
        if active is not None and active.id == repo_id:
            self.navigator.clear()
        self._registry_changed()
        return removed

    def clear_repositories(self) -> int:
        count = self.registry.clear()
        self.navigator.clear()
        self._registry_changed()
        return count

    def import_repositories(self, data: bytes | str) -> int:
        count = self.registry.import_(data)

        # Keep the selection only if the same id still names the same repository
        active = self.navigator.active_repository
        if active is not None:
            replacement = self.registry.get(active.id)
            if replacement is not None and (replacement.owner, replacement.repo) == (active.owner, active.repo):
                self.navigator.rebind(replacement)
            else:
                self.navigator.clear()
        self._registry_changed()
        return count

    def summary(self) -> Dict[str, Any]:
        """Totals and current position, as shown in a stats panel."""
        active = self.navigator.active_repository
        state = self.navigator.state
        return {
            "total_repositories": len(self.registry),
            "active_repository": active.full_name if active else None,
            "current_folder": state.current_path or "/",
            "status": state.status,
        }

    def _registry_changed(self) -> None:
        self.events.emit("registry", total=len(self.registry))


def build_session(
    *,
    storage_path: Path = STORAGE_PATH,
    storage_key: str = STORAGE_KEY,
    base_url: str = GITHUB_API_URL,
    timeout: float = HTTP_TIMEOUT,
    verify: bool = HTTP_VERIFY,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Session:
    """Wire a session backed by the JSON file store and real GitHub clients."""
    store = CredentialStore(JsonFileStore(storage_path), key=storage_key)
    registry = RepositoryRegistry(store)

    def client_factory(registration: RepositoryRegistration) -> ContentsClient:
        return ContentsClient(
            registration,
            base_url=base_url,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    return Session(registry, client_factory=client_factory)
