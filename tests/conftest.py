"""Shared fixtures for kinship graph tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from kinship_graph.models.edge import RelationshipEdge
from kinship_graph.service import KinshipGraph
from kinship_graph.storage.database import Database


def _relate(graph: KinshipGraph, subject: str, obj: str, relationship_type: str, **kwargs) -> RelationshipEdge:
    """Create a relationship and have the relative approve it."""
    edge = graph.create_edge(subject, obj, relationship_type, **kwargs)
    return graph.approve(edge.edge_id, obj)


@pytest.fixture
def graph(tmp_path: Path):
    """Graph with inference enabled."""
    g = KinshipGraph(Database(tmp_path / "kinship.db"))
    yield g
    g.close()


@pytest.fixture
def plain_graph(tmp_path: Path):
    """Graph with inference switched off, for exact edge layouts."""
    g = KinshipGraph(Database(tmp_path / "plain.db"), inference_enabled=False)
    yield g
    g.close()


@pytest.fixture
def relate():
    return _relate


@pytest.fixture
def people():
    """Factory adding named people to a graph's directory, returning their ids."""

    def _make(graph: KinshipGraph, *names: str) -> list[str]:
        return [graph.people.add_person(first_name=name).person_id for name in names]

    return _make
