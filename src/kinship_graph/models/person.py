"""Person and family summary models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from pydantic import BaseModel, Field

from .edge import new_id


class Person(BaseModel):
    """A person as held by the person directory.

    The kinship core only ever references people by ``person_id``; the
    remaining fields exist for display and for the directory's own
    lookups.
    """

    person_id: str = Field(default_factory=new_id)
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    birthday: date | None = None
    date_died: date | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    @property
    def display_name(self) -> str:
        """Full name, falling back to email, then id."""
        return self.full_name or self.email or self.person_id

    def is_deceased(self, today: date | None = None) -> bool:
        today = today or date.today()
        return self.date_died is not None and self.date_died <= today

    def age(self, today: date | None = None) -> int | None:
        """Current age, or age at death."""
        if self.birthday is None:
            return None
        today = today or date.today()
        end = self.date_died if self.is_deceased(today) else today
        years = end.year - self.birthday.year
        if (end.month, end.day) < (self.birthday.month, self.birthday.day):
            years -= 1
        return years


@dataclass
class FamilyOverview:
    """Immediate and extended family centred on one person."""
    person_id: str
    parents: list[str] = field(default_factory=list)
    siblings: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    spouse: str | None = None
    extended: list[str] = field(default_factory=list)

    @property
    def immediate(self) -> list[str]:
        members = ([self.spouse] if self.spouse else []) + self.parents + self.siblings + self.children
        return list(dict.fromkeys(members))

    @property
    def family_size(self) -> int:
        """Everyone in the overview, focal person included."""
        return 1 + len(self.immediate) + len(self.extended)
