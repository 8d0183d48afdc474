"""Tests for the two-party approval workflow."""

import pytest

from kinship_graph.approval import ALLOWED_TRANSITIONS, check_answer_rights
from kinship_graph.exceptions import (
    AuthorizationError,
    AuthorizationReason,
    EdgeNotFoundError,
    InvalidTransitionError,
)
from kinship_graph.models import RelationshipEdge, RelationshipStatus, RelationshipType


def _statuses(graph, edge):
    return graph.get_edge(edge.edge_id).status, graph.reciprocal.find_mirror(edge).status


class TestAnswerRights:
    def test_recipient_may_answer(self):
        edge = RelationshipEdge(subject_id="a", object_id="b", relationship_type=RelationshipType.PARENT)
        check_answer_rights(edge, "b")

    def test_subject_is_not_recipient(self):
        edge = RelationshipEdge(subject_id="a", object_id="b", relationship_type=RelationshipType.PARENT)
        with pytest.raises(AuthorizationError) as exc:
            check_answer_rights(edge, "a")
        assert exc.value.reason == AuthorizationReason.NOT_RECIPIENT

    def test_initiating_recipient_cannot_answer(self):
        edge = RelationshipEdge(
            subject_id="a", object_id="b", relationship_type=RelationshipType.PARENT, initiated_by_id="b"
        )
        with pytest.raises(AuthorizationError) as exc:
            check_answer_rights(edge, "b")
        assert exc.value.reason == AuthorizationReason.IS_INITIATOR

    def test_terminal_states(self):
        assert ALLOWED_TRANSITIONS[RelationshipStatus.APPROVED] == frozenset()
        assert ALLOWED_TRANSITIONS[RelationshipStatus.REJECTED] == frozenset()


class TestApprovalWorkflow:
    """Tests for approve/reject through the graph facade."""

    def test_approve_flips_both_sides(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent")

        approved = graph.approve(edge.edge_id, bob)
        assert approved.status == RelationshipStatus.APPROVED
        assert _statuses(graph, edge) == (RelationshipStatus.APPROVED, RelationshipStatus.APPROVED)
        assert graph.family.parents(alice) == [bob]
        assert graph.family.children(bob) == [alice]

    def test_reject_flips_both_sides(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "sibling")

        graph.reject(edge.edge_id, bob)
        assert _statuses(graph, edge) == (RelationshipStatus.REJECTED, RelationshipStatus.REJECTED)
        assert graph.family.siblings(alice) == []

    def test_initiator_cannot_approve(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent", initiator_id=bob)

        with pytest.raises(AuthorizationError) as exc:
            graph.approve(edge.edge_id, bob)
        assert exc.value.reason == AuthorizationReason.IS_INITIATOR
        assert _statuses(graph, edge) == (RelationshipStatus.PENDING, RelationshipStatus.PENDING)

    def test_subject_cannot_approve(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent")

        with pytest.raises(AuthorizationError) as exc:
            graph.approve(edge.edge_id, alice)
        assert exc.value.reason == AuthorizationReason.NOT_RECIPIENT
        assert _statuses(graph, edge) == (RelationshipStatus.PENDING, RelationshipStatus.PENDING)

    def test_outsider_cannot_reject(self, graph, people):
        alice, bob, carol = people(graph, "Alice", "Bob", "Carol")
        edge = graph.create_edge(alice, bob, "parent")

        with pytest.raises(AuthorizationError) as exc:
            graph.reject(edge.edge_id, carol)
        assert exc.value.reason == AuthorizationReason.NOT_RECIPIENT
        assert _statuses(graph, edge) == (RelationshipStatus.PENDING, RelationshipStatus.PENDING)

    def test_mirror_cannot_be_answered_by_initiator(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent")
        mirror = graph.reciprocal.find_mirror(edge)

        with pytest.raises(AuthorizationError) as exc:
            graph.approve(mirror.edge_id, alice)
        assert exc.value.reason == AuthorizationReason.IS_INITIATOR

    def test_approve_twice_is_noop(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "spouse")
        graph.approve(edge.edge_id, bob)

        again = graph.approve(edge.edge_id, bob)
        assert again.status == RelationshipStatus.APPROVED

    def test_rejected_is_terminal(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "spouse")
        graph.reject(edge.edge_id, bob)

        with pytest.raises(InvalidTransitionError) as exc:
            graph.approve(edge.edge_id, bob)
        assert exc.value.current == "rejected"
        assert _statuses(graph, edge) == (RelationshipStatus.REJECTED, RelationshipStatus.REJECTED)

    def test_approved_cannot_be_rejected(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "spouse")
        graph.approve(edge.edge_id, bob)

        with pytest.raises(InvalidTransitionError):
            graph.reject(edge.edge_id, bob)

    def test_unknown_edge(self, graph):
        with pytest.raises(EdgeNotFoundError):
            graph.approve("missing", "anyone")

    def test_failure_midway_leaves_both_sides_pending(self, graph, people, monkeypatch):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent")

        real_write = graph.store.write_fields
        writes = []

        def failing_second_write(edge_id, **fields):
            writes.append(edge_id)
            if len(writes) == 2:
                raise RuntimeError("disk full")
            return real_write(edge_id, **fields)

        monkeypatch.setattr(graph.store, "write_fields", failing_second_write)
        with pytest.raises(RuntimeError):
            graph.approve(edge.edge_id, bob)

        monkeypatch.undo()
        assert _statuses(graph, edge) == (RelationshipStatus.PENDING, RelationshipStatus.PENDING)


class TestRequestLists:
    """Tests for incoming and sent request views."""

    def test_pending_and_sent(self, graph, people):
        alice, bob, carol = people(graph, "Alice", "Bob", "Carol")
        to_bob = graph.create_edge(alice, bob, "parent")
        graph.create_edge(carol, alice, "sibling")

        assert [e.edge_id for e in graph.pending_requests(bob)] == [to_bob.edge_id]
        assert [e.edge_id for e in graph.sent_requests(alice)] == [to_bob.edge_id]
        assert [e.subject_id for e in graph.pending_requests(alice)] == [carol]

    def test_answered_requests_drop_out(self, graph, people):
        alice, bob = people(graph, "Alice", "Bob")
        edge = graph.create_edge(alice, bob, "parent")
        graph.approve(edge.edge_id, bob)

        assert graph.pending_requests(bob) == []
        assert graph.sent_requests(alice) == []
