"""Navigation state machine for the active repository.

States:
  - no-repository: nothing selected
  - listing(path): `current_listing` holds the entries of `current_path`
  - listing-error(path, error): the last fetch for `current_path` failed;
    the listing is empty rather than showing entries of another path

A fetch in flight never touches the visible state; only the most recently
started navigation may apply its result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Literal, Optional, Tuple

from clients.github.inputs import normalize_dir_path
from core.errors import NoRepositorySelectedError, RepoManagerError
from core.events import EventEmitter
from core.log import get_logger
from core.models import DirectoryEntry, RepositoryRegistration
from core.paths import split_posix

logger = get_logger("navigation")

NavStatus = Literal["no-repository", "listing", "listing-error"]

Lister = Callable[[RepositoryRegistration, str], Awaitable[List[DirectoryEntry]]]


@dataclass(frozen=True)
class Breadcrumb:
    label: str
    path: str


@dataclass(frozen=True)
class NavigationState:
    status: NavStatus = "no-repository"
    active_repository_id: Optional[str] = None
    current_path: str = ""
    current_listing: Tuple[DirectoryEntry, ...] = field(default_factory=tuple)
    error: Optional[RepoManagerError] = None


def breadcrumbs_for(path: str) -> List[Breadcrumb]:
    """Root plus one crumb per path segment, each pointing at its prefix."""
    crumbs = [Breadcrumb(label="root", path="")]
    current = ""
    for part in split_posix(path):
        current = f"{current}/{part}" if current else part
        crumbs.append(Breadcrumb(label=part, path=current))
    return crumbs


class Navigator:
    def __init__(self, lister: Lister, *, events: Optional[EventEmitter] = None) -> None:
        self._lister = lister
        self._events = events or EventEmitter()
        self._state = NavigationState()
        self._active: Optional[RepositoryRegistration] = None
        self._generation = 0

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def active_repository(self) -> Optional[RepositoryRegistration]:
        return self._active

    @property
    def current_path(self) -> str:
        return self._state.current_path

    def require_active(self) -> RepositoryRegistration:
        if self._active is None:
            raise NoRepositorySelectedError("Select a repository first")
        return self._active

    async def select_repository(self, registration: RepositoryRegistration) -> List[DirectoryEntry]:
        self._active = registration
        self._set_state(
            NavigationState(status="listing", active_repository_id=registration.id, current_path="")
        )
        return await self.navigate_to("")

    async def navigate_to(self, path: str) -> List[DirectoryEntry]:
        """Fetch `path` and make it the current listing.

        On failure the state becomes listing-error with an empty listing and
        the error is re-raised to the caller.
        """
        registration = self.require_active()
        path_clean = normalize_dir_path(path)

        self._generation += 1
        generation = self._generation

        try:
            entries = await self._lister(registration, path_clean)
        except RepoManagerError as e:
            if self._is_current(generation, registration):
                self._set_state(
                    NavigationState(
                        status="listing-error",
                        active_repository_id=registration.id,
                        current_path=path_clean,
                        error=e,
                    )
                )
            raise

        if self._is_current(generation, registration):
            self._set_state(
                NavigationState(
                    status="listing",
                    active_repository_id=registration.id,
                    current_path=path_clean,
                    current_listing=tuple(entries),
                )
            )
        else:
            logger.debug("Discarding superseded listing for %r", path_clean)
        return list(entries)

    async def refresh(self) -> List[DirectoryEntry]:
        return await self.navigate_to(self._state.current_path)

    def clear(self) -> None:
        """Forget the active repository and go back to no-repository."""
        self._active = None
        self._generation += 1
        self._set_state(NavigationState())

    def rebind(self, registration: RepositoryRegistration) -> None:
        """Point at an updated registration (e.g. new token) without refetching."""
        if self._active is not None and self._active.id == registration.id:
            self._active = registration

    def breadcrumbs(self) -> List[Breadcrumb]:
        return breadcrumbs_for(self._state.current_path)

    def _is_current(self, generation: int, registration: RepositoryRegistration) -> bool:
        return (
            generation == self._generation
            and self._active is not None
            and self._active.id == registration.id
        )

    def _set_state(self, state: NavigationState) -> None:
        self._state = state
        self._events.emit(
            "navigation",
            status=state.status,
            active_repository_id=state.active_repository_id,
            current_path=state.current_path,
            entries=len(state.current_listing),
        )
