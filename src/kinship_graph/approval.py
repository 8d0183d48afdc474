"""Two-party approval workflow.

    pending ──approve──▶ approved
       │
       └────reject────▶ rejected

Only the recipient (the edge's object) may answer a request, and never
the person who initiated it. Both sides of the pair change status in one
transaction.
"""
from __future__ import annotations

from .exceptions import (
    AuthorizationError,
    AuthorizationReason,
    EdgeNotFoundError,
    InvalidTransitionError,
)
from .logging import get_logger
from .models.edge import RelationshipEdge
from .models.relationship import RelationshipStatus
from .storage.database import Database
from .storage.edges import EdgeStore

logger = get_logger(__name__)


ALLOWED_TRANSITIONS: dict[RelationshipStatus, frozenset[RelationshipStatus]] = {
    RelationshipStatus.PENDING: frozenset({RelationshipStatus.APPROVED, RelationshipStatus.REJECTED}),
    RelationshipStatus.APPROVED: frozenset(),
    RelationshipStatus.REJECTED: frozenset(),
}


def check_answer_rights(edge: RelationshipEdge, acting_person_id: str) -> None:
    """Raise AuthorizationError unless the acting person may approve/reject."""
    if acting_person_id != edge.object_id:
        raise AuthorizationError(AuthorizationReason.NOT_RECIPIENT, edge.edge_id, acting_person_id)
    if acting_person_id == edge.initiator:
        raise AuthorizationError(AuthorizationReason.IS_INITIATOR, edge.edge_id, acting_person_id)


class ApprovalWorkflow:
    def __init__(self, database: Database, store: EdgeStore):
        self.db = database
        self.store = store

    def approve(self, edge_id: str, acting_person_id: str) -> RelationshipEdge:
        return self._transition(edge_id, acting_person_id, RelationshipStatus.APPROVED)

    def reject(self, edge_id: str, acting_person_id: str) -> RelationshipEdge:
        return self._transition(edge_id, acting_person_id, RelationshipStatus.REJECTED)

    def _transition(
        self, edge_id: str, acting_person_id: str, target: RelationshipStatus
    ) -> RelationshipEdge:
        with self.db.transaction():
            edge = self.store.get(edge_id)
            if edge is None:
                raise EdgeNotFoundError(edge_id)
            check_answer_rights(edge, acting_person_id)

            if edge.status == target:
                logger.info("approval.noop", edge_id=edge_id, status=target.value)
                return edge
            if target not in ALLOWED_TRANSITIONS[edge.status]:
                raise InvalidTransitionError(edge_id, edge.status.value, target.value)

            self.store.write_fields(edge.edge_id, status=target)
            # The mirror's status is written directly, not through the
            # reciprocal sync path.
            mirror_subject, mirror_object, mirror_type = edge.mirror_key
            mirror = self.store.find(mirror_subject, mirror_object, mirror_type)
            if mirror is not None:
                self.store.write_fields(mirror.edge_id, status=target)
            else:
                logger.warning("approval.mirror_missing", edge_id=edge_id)

            logger.info(
                f"approval.{target.value}",
                edge_id=edge_id,
                mirror_id=mirror.edge_id if mirror else None,
                by=acting_person_id,
            )
            return self.store.get(edge_id)
