"""Family traversal queries over approved edges.

Provides:
- Direct relations (parents, children, siblings, spouses)
- Derived aggregates (grandparents, aunts and uncles, cousins, ...)
- Bounded ancestor/descendant closure
- Whole-family connectivity

The relationship graph is not a tree (spousal loops, shared children,
remarriage, adoption chains), so every unbounded walk keeps a visited set.
Results are person ids in first-seen order without duplicates.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date

from .logging import get_logger
from .models.edge import RelationshipEdge
from .models.person import FamilyOverview
from .models.relationship import (
    CHILD_TYPES,
    CURRENT_UNION_TYPES,
    PARENT_TYPES,
    SIBLING_TYPES,
    SPOUSAL_TYPES,
    RelationshipStatus,
    RelationshipType,
)
from .storage.database import Database
from .storage.edges import EdgeStore

logger = get_logger(__name__)

APPROVED = RelationshipStatus.APPROVED


def _unique(ids: Iterable[str], exclude: str | None = None) -> list[str]:
    return [i for i in dict.fromkeys(ids) if i != exclude]


def _narrow(
    family_types: tuple[RelationshipType, ...], relationship_type: RelationshipType | str | None
) -> tuple[RelationshipType, ...]:
    if relationship_type is None:
        return family_types
    wanted = RelationshipType.parse(relationship_type)
    return (wanted,) if wanted in family_types else ()


class FamilyTraversal:
    """Read-only family queries.

    Example:
        >>> family = FamilyTraversal(database, store)
        >>> family.ancestors(person_id, generations=2)
        ['<parent id>', '<grandparent id>']
    """

    def __init__(self, database: Database, store: EdgeStore):
        self.db = database
        self.store = store

    # ------------------------- Direct relations -------------------------

    def _objects(
        self, person_id: str, types: tuple[RelationshipType, ...], active_on: date | None = None
    ) -> list[str]:
        if not types:
            return []
        edges = self.store.query(
            subject_id=person_id, types=types, status=APPROVED, active_on=active_on
        )
        return _unique((e.object_id for e in edges), exclude=person_id)

    def parents(self, person_id: str, relationship_type: RelationshipType | str | None = None) -> list[str]:
        return self._objects(person_id, _narrow(PARENT_TYPES, relationship_type))

    def children(self, person_id: str, relationship_type: RelationshipType | str | None = None) -> list[str]:
        return self._objects(person_id, _narrow(CHILD_TYPES, relationship_type))

    def siblings(self, person_id: str, relationship_type: RelationshipType | str | None = None) -> list[str]:
        return self._objects(person_id, _narrow(SIBLING_TYPES, relationship_type))

    def spouses(self, person_id: str, include_ex: bool = False) -> list[str]:
        return self._objects(person_id, SPOUSAL_TYPES if include_ex else CURRENT_UNION_TYPES)

    def current_spouse(self, person_id: str, today: date | None = None) -> str | None:
        """The first active spouse/partner, or None."""
        active = self._objects(person_id, CURRENT_UNION_TYPES, active_on=today or date.today())
        return active[0] if active else None

    # ------------------------ Derived aggregates ------------------------

    def _expand(
        self, person_id: str, first: Callable[[str], list[str]], then: Callable[[str], list[str]]
    ) -> list[str]:
        with self.db.snapshot():
            return _unique(
                (relative for hop in first(person_id) for relative in then(hop)),
                exclude=person_id,
            )

    def grandparents(self, person_id: str) -> list[str]:
        return self._expand(person_id, self.parents, self.parents)

    def grandchildren(self, person_id: str) -> list[str]:
        return self._expand(person_id, self.children, self.children)

    def aunts_and_uncles(self, person_id: str) -> list[str]:
        return self._expand(person_id, self.parents, self.siblings)

    def nieces_and_nephews(self, person_id: str) -> list[str]:
        return self._expand(person_id, self.siblings, self.children)

    def cousins(self, person_id: str) -> list[str]:
        return self._expand(person_id, self.aunts_and_uncles, self.children)

    # ---------------------- Ancestors / descendants ---------------------

    def ancestors(self, person_id: str, generations: int | None = None) -> list[str]:
        """Everyone up to ``generations`` levels above (1 = parents).

        ``None`` walks until a level has no parents.
        """
        return self._closure(person_id, self.parents, generations)

    def descendants(self, person_id: str, generations: int | None = None) -> list[str]:
        """Everyone up to ``generations`` levels below (1 = children)."""
        return self._closure(person_id, self.children, generations)

    def _closure(
        self, person_id: str, step: Callable[[str], list[str]], generations: int | None
    ) -> list[str]:
        if generations is not None and generations < 0:
            raise ValueError("generations must be non-negative")

        found: list[str] = []
        visited: set[str] = {person_id}
        level = [person_id]
        depth = 0

        with self.db.snapshot():
            while level and (generations is None or depth < generations):
                next_level: list[str] = []
                for current in level:
                    for relative in step(current):
                        if relative not in visited:
                            visited.add(relative)
                            next_level.append(relative)
                found.extend(next_level)
                level = next_level
                depth += 1

        return found

    # --------------------------- Connectivity ---------------------------

    def direct_family(self, person_id: str) -> list[str]:
        """Anyone joined to the person by an approved edge, either direction."""
        edges = self.store.involving(person_id, status=APPROVED)
        return _unique((_other_end(e, person_id) for e in edges), exclude=person_id)

    def all_connected_family(self, person_id: str) -> list[str]:
        """Everyone reachable over approved edges, treated as undirected.

        Iterative depth-first walk; the visited set guarantees termination
        on cycles.
        """
        visited: set[str] = {person_id}
        order: list[str] = []
        stack = [person_id]

        with self.db.snapshot():
            while stack:
                current = stack.pop()
                for relative in reversed(self.direct_family(current)):
                    if relative not in visited:
                        visited.add(relative)
                        order.append(relative)
                        stack.append(relative)

        logger.debug("traversal.connected", person=person_id, reached=len(order))
        return order

    def related_to(
        self,
        person_id: str,
        other_id: str,
        relationship_type: RelationshipType | str | None = None,
    ) -> bool:
        types = [RelationshipType.parse(relationship_type)] if relationship_type else None
        return bool(
            self.store.query(subject_id=person_id, object_id=other_id, types=types, status=APPROVED)
        )

    def all_edges_involving(self, person_id: str) -> list[RelationshipEdge]:
        """Every edge touching the person, any status, both directions."""
        return self.store.involving(person_id)

    # ------------------------------ Views -------------------------------

    def family_overview(self, person_id: str) -> FamilyOverview:
        """Immediate family plus everyone else reachable."""
        with self.db.snapshot():
            overview = FamilyOverview(
                person_id=person_id,
                parents=self.parents(person_id),
                siblings=self.siblings(person_id),
                children=self.children(person_id),
                spouse=self.current_spouse(person_id),
            )
            immediate = set(overview.immediate)
            overview.extended = [
                p for p in self.all_connected_family(person_id) if p not in immediate
            ]
        return overview

    def pending_requests(self, person_id: str) -> list[RelationshipEdge]:
        """Requests waiting for this person's answer."""
        return self.store.query(
            object_id=person_id,
            status=RelationshipStatus.PENDING,
            exclude_initiator=person_id,
        )

    def sent_requests(self, person_id: str) -> list[RelationshipEdge]:
        """Requests this person sent that are still unanswered."""
        return self.store.query(
            subject_id=person_id,
            initiated_by_id=person_id,
            status=RelationshipStatus.PENDING,
        )


def _other_end(edge: RelationshipEdge, person_id: str) -> str:
    return edge.object_id if edge.subject_id == person_id else edge.subject_id
