"""Core protocol and interface definitions.

Defines the collaborators the manager depends on but does not own: a
key-value persistent store for registrations and a confirmation
capability for destructive actions.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol


class KeyValueStore(Protocol):
    """Contract for a string key-value store that survives restarts."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


# Asked a yes/no question before destructive actions; True means proceed.
Confirm = Callable[[str], bool]


def confirm_always(answer: bool) -> Confirm:
    """Return a Confirm that gives the same answer to every question."""

    def _confirm(_question: str) -> bool:
        return answer

    return _confirm


class PresetConfirm:
    """Confirm backed by an answer given in advance; remembers what was asked."""

    def __init__(self, answer: bool) -> None:
        self._answer = bool(answer)
        self.asked: List[str] = []

    def __call__(self, question: str) -> bool:
        self.asked.append(question)
        return self._answer

    @property
    def declined(self) -> Optional[str]:
        # The question that was turned down, if any
        if self._answer or not self.asked:
            return None
        return self.asked[-1]
