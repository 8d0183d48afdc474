"""Reciprocal consistency: every edge travels with its mirror.

The mirror of ``(A, B, t)`` is ``(B, A, reciprocal(t))`` with the same
status, initiator, dates and notes. Mirrors are written with the store's
raw primitives (``insert``, ``write_fields``, ``delete_one``) so that
keeping one side in step never re-enters the cascade for the other.
"""
from __future__ import annotations

from .exceptions import MirrorConsistencyError
from .logging import get_logger
from .models.edge import RelationshipEdge
from .storage.edges import DuplicateEdgeError, EdgeStore

logger = get_logger(__name__)


class ReciprocalManager:
    """Creates, synchronises and removes mirror edges."""

    def __init__(self, store: EdgeStore):
        self.store = store

    def find_mirror(self, edge: RelationshipEdge) -> RelationshipEdge | None:
        subject_id, object_id, relationship_type = edge.mirror_key
        return self.store.find(subject_id, object_id, relationship_type)

    def ensure_mirror(self, edge: RelationshipEdge) -> RelationshipEdge:
        """Fetch or create the mirror of ``edge``.

        A uniqueness conflict means another writer got there first; the
        mirror is re-read. If it still cannot be found the caller's
        transaction must not commit, so MirrorConsistencyError is raised.
        """
        existing = self.find_mirror(edge)
        if existing is not None:
            return existing

        mirror = edge.build_mirror()
        try:
            self.store.insert(mirror)
        except DuplicateEdgeError:
            logger.warning("mirror.race", edge_id=edge.edge_id, mirror_key=_key(edge))
            existing = self.find_mirror(edge)
            if existing is None:
                raise MirrorConsistencyError(edge.edge_id) from None
            return existing

        logger.debug("mirror.created", edge_id=edge.edge_id, mirror_id=mirror.edge_id)
        return mirror

    def sync_mirror(self, edge: RelationshipEdge) -> RelationshipEdge | None:
        """Copy dates, notes and status onto the mirror."""
        mirror = self.find_mirror(edge)
        if mirror is None:
            logger.warning("mirror.missing", edge_id=edge.edge_id, mirror_key=_key(edge))
            return None
        self.store.write_fields(
            mirror.edge_id,
            start_date=edge.start_date,
            end_date=edge.end_date,
            notes=edge.notes,
            status=edge.status,
        )
        return self.store.get(mirror.edge_id)

    def delete_mirror(self, edge: RelationshipEdge) -> bool:
        """Remove the mirror once. A mirror that is already gone is fine."""
        mirror = self.find_mirror(edge)
        if mirror is None:
            return False
        return self.store.delete_one(mirror.edge_id)


def _key(edge: RelationshipEdge) -> str:
    subject_id, object_id, relationship_type = edge.mirror_key
    return f"{subject_id}:{object_id}:{relationship_type.value}"
