from __future__ import annotations

import json
from typing import List, Sequence

from core.interfaces import KeyValueStore
from core.log import get_logger
from core.models import RepositoryRegistration

logger = get_logger("storage")

DEFAULT_STORAGE_KEY = "github-repos-manager-v2"


class CredentialStore:
    """Persists the list of repository registrations under one storage key.

    Tokens are stored as given; nothing here talks to GitHub.
    """

    def __init__(self, store: KeyValueStore, *, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._store = store
        self._key = key or DEFAULT_STORAGE_KEY

    def load(self) -> List[RepositoryRegistration]:
        """Return the saved registrations; anything unparsable loads as an empty list."""
        raw = self._store.get_item(self._key)
        if not raw:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored registrations are not a list")
            return [RepositoryRegistration.from_dict(item) for item in data]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Discarding unreadable registrations under %r: %s", self._key, e)
            return []

    def save(self, registrations: Sequence[RepositoryRegistration]) -> None:
        payload = json.dumps([r.to_dict() for r in registrations])
        self._store.set_item(self._key, payload)
