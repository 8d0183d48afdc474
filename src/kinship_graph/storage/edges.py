"""Relationship edge store.

Persists directed edges keyed by ``(subject, object, type)``. The store is
deliberately dumb: it validates nothing beyond what the schema enforces
and never touches mirrors. Mirror handling lives in
``kinship_graph.reciprocal``.
"""
from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, date, datetime

from ..logging import get_logger
from ..models.edge import RelationshipEdge
from ..models.relationship import RelationshipStatus, RelationshipType
from .database import Database

logger = get_logger(__name__)


class DuplicateEdgeError(Exception):
    """The (subject, object, type) triple is already stored."""

    def __init__(self, key: tuple[str, str, RelationshipType]):
        super().__init__(f"edge already exists: {key[0]} -[{key[2].value}]-> {key[1]}")
        self.key = key


class EdgeStore(ABC):
    """Abstract edge storage."""

    @abstractmethod
    def insert(self, edge: RelationshipEdge) -> RelationshipEdge:
        """Insert an edge. Raises DuplicateEdgeError on a uniqueness conflict."""
        ...

    @abstractmethod
    def get(self, edge_id: str) -> RelationshipEdge | None:
        ...

    @abstractmethod
    def find(
        self, subject_id: str, object_id: str, relationship_type: RelationshipType
    ) -> RelationshipEdge | None:
        """Look up an edge by its unique triple."""
        ...

    @abstractmethod
    def query(
        self,
        *,
        subject_id: str | None = None,
        object_id: str | None = None,
        types: Iterable[RelationshipType] | None = None,
        status: RelationshipStatus | None = None,
        initiated_by_id: str | None = None,
        exclude_initiator: str | None = None,
        exclude_object: str | None = None,
        active_on: date | None = None,
    ) -> list[RelationshipEdge]:
        ...

    @abstractmethod
    def involving(self, person_id: str, status: RelationshipStatus | None = None) -> list[RelationshipEdge]:
        """Edges with the person at either end."""
        ...

    @abstractmethod
    def write_fields(self, edge_id: str, **fields) -> bool:
        """Overwrite columns of one row directly. No cascade."""
        ...

    @abstractmethod
    def delete_one(self, edge_id: str) -> bool:
        """Delete one row. Returns False when it was already gone. No cascade."""
        ...


_WRITABLE = {"status", "start_date", "end_date", "notes", "initiated_by_id"}


class SQLiteEdgeStore(EdgeStore):
    """Edge storage over the shared SQLite ``Database``."""

    def __init__(self, database: Database):
        self.db = database

    # --------------------------- Serialization ---------------------------

    @staticmethod
    def _serialize_value(value):
        if isinstance(value, (RelationshipStatus, RelationshipType)):
            return value.value
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value

    @staticmethod
    def _row_to_edge(row: sqlite3.Row) -> RelationshipEdge:
        return RelationshipEdge(
            edge_id=row["edge_id"],
            subject_id=row["subject_id"],
            object_id=row["object_id"],
            relationship_type=RelationshipType(row["relationship_type"]),
            status=RelationshipStatus(row["status"]),
            initiated_by_id=row["initiated_by_id"],
            start_date=date.fromisoformat(row["start_date"]) if row["start_date"] else None,
            end_date=date.fromisoformat(row["end_date"]) if row["end_date"] else None,
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    # ------------------------------ Writes ------------------------------

    def insert(self, edge: RelationshipEdge) -> RelationshipEdge:
        try:
            self.db.execute(
                """
                INSERT INTO relationships (
                    edge_id, subject_id, object_id, relationship_type, status,
                    initiated_by_id, start_date, end_date, notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    edge.edge_id,
                    edge.subject_id,
                    edge.object_id,
                    edge.relationship_type.value,
                    edge.status.value,
                    edge.initiated_by_id,
                    self._serialize_value(edge.start_date),
                    self._serialize_value(edge.end_date),
                    edge.notes,
                    edge.created_at.isoformat(),
                    edge.updated_at.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise DuplicateEdgeError(edge.key) from e
            raise
        logger.debug(
            "edge.inserted",
            edge_id=edge.edge_id,
            subject=edge.subject_id,
            object=edge.object_id,
            type=edge.relationship_type.value,
            status=edge.status.value,
        )
        return edge

    def write_fields(self, edge_id: str, **fields) -> bool:
        unknown = set(fields) - _WRITABLE
        if unknown:
            raise ValueError(f"cannot write edge columns: {sorted(unknown)}")
        if not fields:
            return False
        assignments = ", ".join(f"{name} = ?" for name in fields)
        params = [self._serialize_value(v) for v in fields.values()]
        params += [datetime.now(UTC).isoformat(), edge_id]
        cursor = self.db.execute(
            f"UPDATE relationships SET {assignments}, updated_at = ? WHERE edge_id = ?",
            params,
        )
        return cursor.rowcount > 0

    def delete_one(self, edge_id: str) -> bool:
        cursor = self.db.execute("DELETE FROM relationships WHERE edge_id = ?", (edge_id,))
        return cursor.rowcount > 0

    # ------------------------------ Reads -------------------------------

    def get(self, edge_id: str) -> RelationshipEdge | None:
        row = self.db.fetchone("SELECT * FROM relationships WHERE edge_id = ?", (edge_id,))
        return self._row_to_edge(row) if row else None

    def find(
        self, subject_id: str, object_id: str, relationship_type: RelationshipType
    ) -> RelationshipEdge | None:
        row = self.db.fetchone(
            """
            SELECT * FROM relationships
            WHERE subject_id = ? AND object_id = ? AND relationship_type = ?
            """,
            (subject_id, object_id, RelationshipType.parse(relationship_type).value),
        )
        return self._row_to_edge(row) if row else None

    def query(
        self,
        *,
        subject_id: str | None = None,
        object_id: str | None = None,
        types: Iterable[RelationshipType] | None = None,
        status: RelationshipStatus | None = None,
        initiated_by_id: str | None = None,
        exclude_initiator: str | None = None,
        exclude_object: str | None = None,
        active_on: date | None = None,
    ) -> list[RelationshipEdge]:
        clauses: list[str] = []
        params: list = []

        if subject_id is not None:
            clauses.append("subject_id = ?")
            params.append(subject_id)
        if object_id is not None:
            clauses.append("object_id = ?")
            params.append(object_id)
        if types is not None:
            type_values = [RelationshipType.parse(t).value for t in types]
            if not type_values:
                return []
            clauses.append(f"relationship_type IN ({', '.join('?' for _ in type_values)})")
            params.extend(type_values)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if initiated_by_id is not None:
            clauses.append("initiated_by_id = ?")
            params.append(initiated_by_id)
        if exclude_initiator is not None:
            clauses.append("(initiated_by_id IS NULL OR initiated_by_id <> ?)")
            params.append(exclude_initiator)
        if exclude_object is not None:
            clauses.append("object_id <> ?")
            params.append(exclude_object)
        if active_on is not None:
            clauses.append("(end_date IS NULL OR end_date > ?)")
            params.append(active_on.isoformat())

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self.db.fetchall(
            f"SELECT * FROM relationships {where} ORDER BY created_at, edge_id",
            params,
        )
        return [self._row_to_edge(row) for row in rows]

    def involving(self, person_id: str, status: RelationshipStatus | None = None) -> list[RelationshipEdge]:
        sql = "SELECT * FROM relationships WHERE (subject_id = ? OR object_id = ?)"
        params: list = [person_id, person_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(status.value)
        rows = self.db.fetchall(sql + " ORDER BY created_at, edge_id", params)
        return [self._row_to_edge(row) for row in rows]

    def count(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) AS n FROM relationships")
        return int(row["n"]) if row else 0
