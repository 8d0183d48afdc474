"""Errors raised by the kinship graph core.

Every error derives from ``KinshipError`` so the calling layer can catch
one type. Validation and authorization errors carry a machine-readable
``reason`` alongside the human message.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationReason(str, Enum):
    SELF_RELATION = "self_relation"
    INVALID_TYPE = "invalid_type"
    BAD_DATE_ORDER = "bad_date_order"
    DUPLICATE_EDGE = "duplicate_edge"
    UNKNOWN_PERSON = "unknown_person"


class AuthorizationReason(str, Enum):
    NOT_RECIPIENT = "not_recipient"  # only the object of an edge may answer it
    IS_INITIATOR = "is_initiator"  # the requester cannot approve their own request
    NOT_PARTICIPANT = "not_participant"  # edits/deletes need subject or object


class KinshipError(Exception):
    """Base class for kinship graph errors."""


@dataclass
class RelationshipValidationError(KinshipError):
    """An edge request broke an invariant; nothing was persisted."""

    reason: ValidationReason
    message: str = ""

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.message}" if self.message else self.reason.value


@dataclass
class AuthorizationError(KinshipError):
    """The acting person may not perform this operation on the edge."""

    reason: AuthorizationReason
    edge_id: str | None = None
    person_id: str | None = None

    def __str__(self) -> str:
        return f"{self.reason.value} (edge={self.edge_id}, person={self.person_id})"


@dataclass
class InvalidTransitionError(KinshipError):
    edge_id: str
    current: str
    requested: str

    def __str__(self) -> str:
        return f"edge {self.edge_id} cannot move from {self.current} to {self.requested}"


@dataclass
class EdgeNotFoundError(KinshipError):
    edge_id: str

    def __str__(self) -> str:
        return f"edge {self.edge_id} not found"


@dataclass
class MirrorConsistencyError(KinshipError):
    """The reciprocal edge could neither be created nor found."""

    edge_id: str

    def __str__(self) -> str:
        return f"could not materialize mirror for edge {self.edge_id}"
