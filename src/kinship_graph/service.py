"""Kinship graph facade - the surface the calling layer talks to.

Write pipeline for one request, all inside one transaction:

    validate ─▶ insert edge ─▶ ensure mirror ─▶ inference (one savepoint
                                                per derived edge)

Derived edges re-enter ``_persist`` so they are mirrored the same way.
Approval, rejection, edits and deletion each run in their own
transaction and always touch both sides of the pair.
"""
from __future__ import annotations

from datetime import date
from pathlib import Path

from .approval import ApprovalWorkflow
from .config import CONFIG, KinshipConfig
from .directory import PersonDirectory
from .exceptions import (
    AuthorizationError,
    AuthorizationReason,
    EdgeNotFoundError,
    RelationshipValidationError,
    ValidationReason,
)
from .inference import InferenceEngine
from .logging import get_logger
from .models.edge import EdgeUpdate, RelationshipEdge, check_date_order
from .models.relationship import RelationshipStatus, RelationshipType
from .reciprocal import ReciprocalManager
from .storage.database import Database
from .storage.edges import DuplicateEdgeError, SQLiteEdgeStore
from .storage.people import SQLitePersonDirectory
from .traversal import FamilyTraversal

logger = get_logger(__name__)


class KinshipGraph:
    """Bidirectional kinship graph with mirrored edges, approval and inference.

    Example:
        >>> graph = KinshipGraph.open("family.db")
        >>> alice = graph.people.add_person(first_name="Alice")
        >>> bob = graph.people.add_person(first_name="Bob")
        >>> edge = graph.create_edge(alice.person_id, bob.person_id, "parent")
        >>> graph.approve(edge.edge_id, bob.person_id)
        >>> graph.family.parents(alice.person_id)
        ['<bob id>']
    """

    def __init__(
        self,
        database: Database,
        directory: PersonDirectory | None = None,
        *,
        inference_enabled: bool = True,
    ):
        self.db = database
        self.store = SQLiteEdgeStore(database)
        self.people = SQLitePersonDirectory(database)
        self.directory: PersonDirectory = directory if directory is not None else self.people
        self.inference_enabled = inference_enabled

        self.reciprocal = ReciprocalManager(self.store)
        self.approval = ApprovalWorkflow(database, self.store)
        self.inference = InferenceEngine(database, self.store, self.directory, writer=self._persist_derived)
        self.family = FamilyTraversal(database, self.store)

    @classmethod
    def open(cls, db_path: Path | str | None = None, config: KinshipConfig | None = None) -> KinshipGraph:
        """Open (or create) a graph database using configuration defaults."""
        config = config or CONFIG
        database = Database(db_path or config.db_path, busy_timeout_ms=config.busy_timeout_ms)
        return cls(database, inference_enabled=config.inference_enabled)

    def close(self) -> None:
        self.db.close()

    # ------------------------------ Create ------------------------------

    def create_edge(
        self,
        subject_id: str,
        object_id: str,
        relationship_type: RelationshipType | str,
        start_date: date | None = None,
        end_date: date | None = None,
        notes: str | None = None,
        initiator_id: str | None = None,
    ) -> RelationshipEdge:
        """Request a relationship. The edge and its mirror start pending.

        Raises:
            RelationshipValidationError: self relation, unknown type or
                person, end before start, or an existing edge for the triple
        """
        edge = RelationshipEdge(
            subject_id=subject_id,
            object_id=object_id,
            relationship_type=RelationshipType.parse(relationship_type),
            status=RelationshipStatus.PENDING,
            initiated_by_id=initiator_id or subject_id,
            start_date=start_date,
            end_date=end_date,
            notes=notes,
        )
        edge.validate_invariants()
        for person_id in (subject_id, object_id):
            if not self.directory.person_exists(person_id):
                raise RelationshipValidationError(
                    ValidationReason.UNKNOWN_PERSON, f"no such person {person_id}"
                )

        with self.db.transaction():
            self._clear_rejected(edge)
            created = self._persist(edge)

        logger.info(
            "edge.created",
            edge_id=created.edge_id,
            subject=created.subject_id,
            object=created.object_id,
            type=created.relationship_type.value,
            initiator=created.initiated_by_id,
        )
        return created

    def _persist(self, edge: RelationshipEdge, *, derived: bool = False) -> RelationshipEdge:
        """Insert an edge, materialize its mirror, then run inference.

        Derived edges copy the initiator of the declaration that produced
        them, so a derived step-parent edge looks self-declared; they are
        never fed back into inference.
        """
        edge.validate_invariants()
        try:
            self.store.insert(edge)
        except DuplicateEdgeError:
            raise RelationshipValidationError(
                ValidationReason.DUPLICATE_EDGE, "this relationship already exists"
            ) from None
        self.reciprocal.ensure_mirror(edge)

        if self.inference_enabled and not derived and self.inference.should_fire(edge):
            self.inference.infer(edge)
        return edge

    def _persist_derived(self, edge: RelationshipEdge) -> RelationshipEdge:
        return self._persist(edge, derived=True)

    def _clear_rejected(self, edge: RelationshipEdge) -> None:
        """A rejected request stays terminal; asking again starts a fresh pair."""
        existing = self.store.find(*edge.key)
        if existing is not None and existing.is_rejected():
            self.reciprocal.delete_mirror(existing)
            self.store.delete_one(existing.edge_id)
            logger.info("edge.rerequested", previous_edge_id=existing.edge_id)

    # --------------------------- Update/delete --------------------------

    def get_edge(self, edge_id: str) -> RelationshipEdge | None:
        return self.store.get(edge_id)

    def _require_participant(self, edge_id: str, acting_person_id: str) -> RelationshipEdge:
        edge = self.store.get(edge_id)
        if edge is None:
            raise EdgeNotFoundError(edge_id)
        if not edge.involves(acting_person_id):
            raise AuthorizationError(AuthorizationReason.NOT_PARTICIPANT, edge_id, acting_person_id)
        return edge

    def update_edge(self, edge_id: str, acting_person_id: str, update: EdgeUpdate) -> RelationshipEdge:
        """Edit dates and notes on both sides of a relationship."""
        changes = update.changes()
        with self.db.transaction():
            edge = self._require_participant(edge_id, acting_person_id)
            if not changes:
                return edge
            merged = edge.model_copy(update=changes)
            check_date_order(merged.start_date, merged.end_date)

            self.store.write_fields(edge_id, **changes)
            updated = self.store.get(edge_id)
            self.reciprocal.sync_mirror(updated)

        logger.info("edge.updated", edge_id=edge_id, fields=sorted(changes), by=acting_person_id)
        return updated

    def delete_edge(self, edge_id: str, acting_person_id: str) -> bool:
        """Delete a relationship (both sides). Already gone is not an error."""
        with self.db.transaction():
            edge = self.store.get(edge_id)
            if edge is None:
                logger.info("edge.delete_noop", edge_id=edge_id)
                return False
            if not edge.involves(acting_person_id):
                raise AuthorizationError(AuthorizationReason.NOT_PARTICIPANT, edge_id, acting_person_id)
            self.store.delete_one(edge_id)
            mirror_deleted = self.reciprocal.delete_mirror(edge)

        logger.info("edge.deleted", edge_id=edge_id, mirror_deleted=mirror_deleted, by=acting_person_id)
        return True

    # ----------------------------- Approval -----------------------------

    def approve(self, edge_id: str, acting_person_id: str) -> RelationshipEdge:
        return self.approval.approve(edge_id, acting_person_id)

    def reject(self, edge_id: str, acting_person_id: str) -> RelationshipEdge:
        return self.approval.reject(edge_id, acting_person_id)

    def pending_requests(self, person_id: str) -> list[RelationshipEdge]:
        return self.family.pending_requests(person_id)

    def sent_requests(self, person_id: str) -> list[RelationshipEdge]:
        return self.family.sent_requests(person_id)
