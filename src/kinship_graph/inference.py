"""Relationship inference from parent declarations.

When a child declares their own parent ``p`` two kinds of edges are
derived, both approved and carrying the original initiator:

- a step-parent edge to ``p``'s current spouse or partner;
- sibling edges to every other child of ``p``.

Derived edges are written through the normal create pipeline, so they are
mirrored like any other edge. None of them is a self-declared parent edge,
which bounds the cascade to a single pass.
"""
from __future__ import annotations

from collections.abc import Callable

from .directory import PersonDirectory
from .exceptions import KinshipError
from .logging import get_logger
from .models.edge import RelationshipEdge
from .models.relationship import (
    CHILD_TYPES,
    RelationshipStatus,
    RelationshipType,
)
from .storage.database import Database
from .storage.edges import DuplicateEdgeError, EdgeStore

logger = get_logger(__name__)

EdgeWriter = Callable[[RelationshipEdge], RelationshipEdge]


class InferenceEngine:
    """Derives step-parent and sibling edges."""

    def __init__(
        self,
        database: Database,
        store: EdgeStore,
        directory: PersonDirectory,
        writer: EdgeWriter,
    ):
        """
        Args:
            database: Shared database; each derived edge gets its own savepoint
            store: Edge store used for existence checks
            directory: Source of spouse lookups and display names
            writer: Create pipeline entry point for derived edges
        """
        self.db = database
        self.store = store
        self.directory = directory
        self.writer = writer

    @staticmethod
    def should_fire(edge: RelationshipEdge) -> bool:
        return edge.declares_own_parent()

    def infer(self, edge: RelationshipEdge) -> list[RelationshipEdge]:
        """Run one inference pass for a freshly created edge."""
        if not self.should_fire(edge):
            return []

        child_id = edge.subject_id
        parent_id = edge.object_id
        derived: list[RelationshipEdge] = []

        step_parent = self._infer_step_parent(edge, child_id, parent_id)
        if step_parent is not None:
            derived.append(step_parent)
        derived.extend(self._infer_siblings(edge, child_id, parent_id))

        logger.info(
            "inference.completed",
            edge_id=edge.edge_id,
            child=child_id,
            parent=parent_id,
            derived=len(derived),
        )
        return derived

    def _infer_step_parent(
        self, edge: RelationshipEdge, child_id: str, parent_id: str
    ) -> RelationshipEdge | None:
        spouse_id = self.directory.current_active_spouse(parent_id)
        if spouse_id is None or spouse_id == child_id:
            return None
        if self.store.find(child_id, spouse_id, RelationshipType.STEP_PARENT) is not None:
            logger.debug("inference.skipped", kind="step_parent", child=child_id, spouse=spouse_id)
            return None

        candidate = RelationshipEdge(
            subject_id=child_id,
            object_id=spouse_id,
            relationship_type=RelationshipType.STEP_PARENT,
            status=RelationshipStatus.APPROVED,
            initiated_by_id=edge.initiator,
            start_date=edge.start_date,
            notes=f"Auto-generated: {self.directory.display_name(parent_id)}'s spouse",
        )
        return self._write(candidate, kind="step_parent")

    def _infer_siblings(
        self, edge: RelationshipEdge, child_id: str, parent_id: str
    ) -> list[RelationshipEdge]:
        other_children = dict.fromkeys(
            e.object_id
            for e in self.store.query(
                subject_id=parent_id, types=CHILD_TYPES, exclude_object=child_id
            )
        )
        sibling_type = (
            RelationshipType.STEP_SIBLING
            if edge.relationship_type.reciprocal == RelationshipType.STEP_CHILD
            else RelationshipType.SIBLING
        )
        parent_name = self.directory.display_name(parent_id)

        created: list[RelationshipEdge] = []
        for sibling_id in other_children:
            if sibling_id == child_id:
                continue
            if self.store.find(child_id, sibling_id, sibling_type) is not None:
                logger.debug("inference.skipped", kind="sibling", child=child_id, sibling=sibling_id)
                continue

            candidate = RelationshipEdge(
                subject_id=child_id,
                object_id=sibling_id,
                relationship_type=sibling_type,
                status=RelationshipStatus.APPROVED,
                initiated_by_id=edge.initiator,
                start_date=edge.start_date,
                notes=f"Auto-generated: shares parent {parent_name}",
            )
            written = self._write(candidate, kind="sibling")
            if written is not None:
                created.append(written)
        return created

    def _write(self, candidate: RelationshipEdge, *, kind: str) -> RelationshipEdge | None:
        """Persist one derived edge in its own savepoint; failures stay local."""
        try:
            with self.db.transaction():
                return self.writer(candidate)
        except (KinshipError, DuplicateEdgeError) as e:
            logger.info(
                "inference.failed",
                kind=kind,
                subject=candidate.subject_id,
                object=candidate.object_id,
                error=str(e),
            )
            return None
