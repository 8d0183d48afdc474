"""SQLite-backed person directory."""
from __future__ import annotations

import sqlite3
from datetime import date, datetime

from ..logging import get_logger
from ..models.person import Person
from ..models.relationship import CURRENT_UNION_TYPES, RelationshipStatus
from .database import Database
from .edges import SQLiteEdgeStore

logger = get_logger(__name__)


class SQLitePersonDirectory:
    """Default ``PersonDirectory`` living in the same database as the edges.

    Spousal lookups read the approved, active spouse/partner edges, so the
    directory and the traversal service agree on who is married to whom.
    """

    def __init__(self, database: Database):
        self.db = database
        self._edges = SQLiteEdgeStore(database)

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        return Person(
            person_id=row["person_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            birthday=date.fromisoformat(row["birthday"]) if row["birthday"] else None,
            date_died=date.fromisoformat(row["date_died"]) if row["date_died"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def save_person(self, person: Person) -> Person:
        """Insert or replace a person."""
        self.db.execute(
            """
            INSERT INTO people (person_id, first_name, last_name, email, birthday, date_died, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(person_id) DO UPDATE SET
                first_name = excluded.first_name,
                last_name = excluded.last_name,
                email = excluded.email,
                birthday = excluded.birthday,
                date_died = excluded.date_died
            """,
            (
                person.person_id,
                person.first_name,
                person.last_name,
                person.email,
                person.birthday.isoformat() if person.birthday else None,
                person.date_died.isoformat() if person.date_died else None,
                person.created_at.isoformat(),
            ),
        )
        logger.info("person.saved", person_id=person.person_id)
        return person

    def add_person(self, **fields) -> Person:
        return self.save_person(Person(**fields))

    def get_person(self, person_id: str) -> Person | None:
        row = self.db.fetchone("SELECT * FROM people WHERE person_id = ?", (person_id,))
        return self._row_to_person(row) if row else None

    def list_people(self, limit: int = 100, offset: int = 0) -> list[Person]:
        rows = self.db.fetchall(
            "SELECT * FROM people ORDER BY last_name, first_name, person_id LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_person(row) for row in rows]

    # ----------------------- PersonDirectory API ------------------------

    def person_exists(self, person_id: str) -> bool:
        return self.db.fetchone("SELECT 1 FROM people WHERE person_id = ?", (person_id,)) is not None

    def display_name(self, person_id: str) -> str:
        person = self.get_person(person_id)
        return person.display_name if person else person_id

    def current_active_spouse(self, person_id: str) -> str | None:
        edges = self._edges.query(
            subject_id=person_id,
            types=CURRENT_UNION_TYPES,
            status=RelationshipStatus.APPROVED,
            active_on=date.today(),
        )
        return edges[0].object_id if edges else None
