"""Relationship edge model - one directed row of the kinship graph."""
from __future__ import annotations

from datetime import UTC, date, datetime
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_utils import uuid7 as _uuid7

from ..exceptions import RelationshipValidationError, ValidationReason
from .relationship import RelationshipStatus, RelationshipType, Role


def uuid7() -> UUID:
    """Generate a UUID7 compatible with stdlib UUID."""
    return UUID(str(_uuid7()))


def new_id() -> str:
    return str(uuid7())


class RelationshipEdge(BaseModel):
    """A directed relationship from ``subject_id`` to ``object_id``.

    Read as "object is the subject's <type>": ``(A, B, parent)`` means B is
    A's parent. Every edge is stored together with its mirror
    ``(B, A, child)``; the pair is the relationship.
    """

    edge_id: str = Field(default_factory=new_id)
    subject_id: str
    object_id: str
    relationship_type: RelationshipType
    status: RelationshipStatus = Field(default=RelationshipStatus.PENDING)
    initiated_by_id: str | None = Field(
        default=None, description="Person who requested the relationship"
    )

    # Validity window
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, str, RelationshipType]:
        return (self.subject_id, self.object_id, self.relationship_type)

    @property
    def mirror_key(self) -> tuple[str, str, RelationshipType]:
        return (self.object_id, self.subject_id, self.relationship_type.reciprocal)

    @property
    def initiator(self) -> str:
        return self.initiated_by_id or self.subject_id

    def is_active(self, today: date | None = None) -> bool:
        """No end date, or an end date strictly in the future."""
        today = today or date.today()
        return self.end_date is None or self.end_date > today

    def is_rejected(self) -> bool:
        return self.status == RelationshipStatus.REJECTED

    def declares_own_parent(self) -> bool:
        """A child naming their own parent - the only edge that drives inference."""
        return (
            self.relationship_type.role == Role.PARENT
            and self.initiator == self.subject_id
        )

    def involves(self, person_id: str) -> bool:
        return person_id in (self.subject_id, self.object_id)

    def validate_invariants(self) -> None:
        """Raise RelationshipValidationError if the edge cannot be stored."""
        if self.subject_id == self.object_id:
            raise RelationshipValidationError(
                ValidationReason.SELF_RELATION, "a person cannot be their own relative"
            )
        check_date_order(self.start_date, self.end_date)

    def build_mirror(self) -> RelationshipEdge:
        """The reciprocal edge carrying the same status, initiator, dates and notes."""
        return RelationshipEdge(
            subject_id=self.object_id,
            object_id=self.subject_id,
            relationship_type=self.relationship_type.reciprocal,
            status=self.status,
            initiated_by_id=self.initiator,
            start_date=self.start_date,
            end_date=self.end_date,
            notes=self.notes,
        )


class EdgeUpdate(BaseModel):
    """Editable edge fields. Only fields explicitly set are applied."""

    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


def check_date_order(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise RelationshipValidationError(
            ValidationReason.BAD_DATE_ORDER, "end date must not precede start date"
        )
