"""Closed relationship vocabulary.

Every relationship type is listed once in ``RELATIONSHIP_TABLE`` together
with its role family, its role and its reciprocal. All type logic (mirror
typing, parent/child partitioning, inference triggers) reads this table.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..exceptions import RelationshipValidationError, ValidationReason


class RelationshipType(str, Enum):
    """Types of relationship edges."""

    # Parent/child
    PARENT = "parent"
    CHILD = "child"
    BIOLOGICAL_PARENT = "biological_parent"
    BIOLOGICAL_CHILD = "biological_child"
    ADOPTIVE_PARENT = "adoptive_parent"
    ADOPTIVE_CHILD = "adoptive_child"
    STEP_PARENT = "step_parent"
    STEP_CHILD = "step_child"

    # Spousal
    SPOUSE = "spouse"
    EX_SPOUSE = "ex_spouse"
    PARTNER = "partner"
    EX_PARTNER = "ex_partner"

    # Sibling
    SIBLING = "sibling"
    HALF_SIBLING = "half_sibling"
    STEP_SIBLING = "step_sibling"

    @classmethod
    def parse(cls, value: RelationshipType | str) -> RelationshipType:
        """Coerce a string to a type, rejecting anything outside the closed set."""
        if isinstance(value, RelationshipType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise RelationshipValidationError(
                ValidationReason.INVALID_TYPE, f"unknown relationship type {value!r}"
            ) from None

    @property
    def traits(self) -> TypeTraits:
        return RELATIONSHIP_TABLE[self]

    @property
    def family(self) -> RoleFamily:
        return self.traits.family

    @property
    def role(self) -> Role:
        return self.traits.role

    @property
    def reciprocal(self) -> RelationshipType:
        return self.traits.reciprocal

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``Step Parent``."""
        return self.value.replace("_", " ").title()


class RoleFamily(str, Enum):
    PARENT_CHILD = "parent_child"
    SPOUSAL = "spousal"
    SIBLING = "sibling"


class Role(str, Enum):
    """Which end of the relationship the object sits on, seen from the subject."""

    PARENT = "parent"  # object is the subject's parent
    CHILD = "child"  # object is the subject's child
    PEER = "peer"  # spousal and sibling types


class RelationshipStatus(str, Enum):
    """Approval status of an edge."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TypeTraits:
    family: RoleFamily
    role: Role
    reciprocal: RelationshipType
    current_union: bool = False  # spouse/partner, as opposed to ex-*


_T = RelationshipType

RELATIONSHIP_TABLE: dict[RelationshipType, TypeTraits] = {
    _T.PARENT: TypeTraits(RoleFamily.PARENT_CHILD, Role.PARENT, _T.CHILD),
    _T.CHILD: TypeTraits(RoleFamily.PARENT_CHILD, Role.CHILD, _T.PARENT),
    _T.BIOLOGICAL_PARENT: TypeTraits(RoleFamily.PARENT_CHILD, Role.PARENT, _T.BIOLOGICAL_CHILD),
    _T.BIOLOGICAL_CHILD: TypeTraits(RoleFamily.PARENT_CHILD, Role.CHILD, _T.BIOLOGICAL_PARENT),
    _T.ADOPTIVE_PARENT: TypeTraits(RoleFamily.PARENT_CHILD, Role.PARENT, _T.ADOPTIVE_CHILD),
    _T.ADOPTIVE_CHILD: TypeTraits(RoleFamily.PARENT_CHILD, Role.CHILD, _T.ADOPTIVE_PARENT),
    _T.STEP_PARENT: TypeTraits(RoleFamily.PARENT_CHILD, Role.PARENT, _T.STEP_CHILD),
    _T.STEP_CHILD: TypeTraits(RoleFamily.PARENT_CHILD, Role.CHILD, _T.STEP_PARENT),
    _T.SPOUSE: TypeTraits(RoleFamily.SPOUSAL, Role.PEER, _T.SPOUSE, current_union=True),
    _T.EX_SPOUSE: TypeTraits(RoleFamily.SPOUSAL, Role.PEER, _T.EX_SPOUSE),
    _T.PARTNER: TypeTraits(RoleFamily.SPOUSAL, Role.PEER, _T.PARTNER, current_union=True),
    _T.EX_PARTNER: TypeTraits(RoleFamily.SPOUSAL, Role.PEER, _T.EX_PARTNER),
    _T.SIBLING: TypeTraits(RoleFamily.SIBLING, Role.PEER, _T.SIBLING),
    _T.HALF_SIBLING: TypeTraits(RoleFamily.SIBLING, Role.PEER, _T.HALF_SIBLING),
    _T.STEP_SIBLING: TypeTraits(RoleFamily.SIBLING, Role.PEER, _T.STEP_SIBLING),
}


def reciprocal(relationship_type: RelationshipType | str) -> RelationshipType:
    """Type of the mirror edge."""
    return RelationshipType.parse(relationship_type).reciprocal


def _select(*, family: RoleFamily | None = None, role: Role | None = None) -> tuple[RelationshipType, ...]:
    return tuple(
        t
        for t, traits in RELATIONSHIP_TABLE.items()
        if (family is None or traits.family == family) and (role is None or traits.role == role)
    )


PARENT_TYPES = _select(family=RoleFamily.PARENT_CHILD, role=Role.PARENT)
CHILD_TYPES = _select(family=RoleFamily.PARENT_CHILD, role=Role.CHILD)
SPOUSAL_TYPES = _select(family=RoleFamily.SPOUSAL)
SIBLING_TYPES = _select(family=RoleFamily.SIBLING)
CURRENT_UNION_TYPES = tuple(t for t in SPOUSAL_TYPES if RELATIONSHIP_TABLE[t].current_union)


def types_in(family: RoleFamily, role: Role | None = None) -> tuple[RelationshipType, ...]:
    """All types of a role family, optionally narrowed to one role."""
    return _select(family=family, role=role)
