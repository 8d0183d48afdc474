"""Person directory contract consumed by the kinship core."""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PersonDirectory(Protocol):
    """Identity facts the core needs about people it does not own."""

    def person_exists(self, person_id: str) -> bool:
        ...

    def current_active_spouse(self, person_id: str) -> str | None:
        """The person's active spouse or partner, if any."""
        ...

    def display_name(self, person_id: str) -> str:
        ...
