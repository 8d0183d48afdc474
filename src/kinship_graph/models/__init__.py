"""Pydantic data models."""

from .edge import EdgeUpdate, RelationshipEdge, new_id
from .person import FamilyOverview, Person
from .relationship import (
    CHILD_TYPES,
    CURRENT_UNION_TYPES,
    PARENT_TYPES,
    RELATIONSHIP_TABLE,
    SIBLING_TYPES,
    SPOUSAL_TYPES,
    RelationshipStatus,
    RelationshipType,
    Role,
    RoleFamily,
    TypeTraits,
    reciprocal,
    types_in,
)

__all__ = [
    "RelationshipEdge",
    "EdgeUpdate",
    "new_id",
    "Person",
    "FamilyOverview",
    "RelationshipType",
    "RelationshipStatus",
    "RoleFamily",
    "Role",
    "TypeTraits",
    "RELATIONSHIP_TABLE",
    "PARENT_TYPES",
    "CHILD_TYPES",
    "SPOUSAL_TYPES",
    "SIBLING_TYPES",
    "CURRENT_UNION_TYPES",
    "reciprocal",
    "types_in",
]
