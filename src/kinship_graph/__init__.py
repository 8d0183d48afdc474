"""Kinship Graph - bidirectional family relationship graph.

Keeps every relationship mirrored, runs two-party approval on both sides
at once, infers step-parent and sibling edges from parent declarations,
and answers cycle-safe family traversal queries.
"""

__version__ = "0.1.0"

# Lazy imports keep `import kinship_graph` cheap for the CLI
def __getattr__(name: str):
    if name == "KinshipGraph":
        from kinship_graph.service import KinshipGraph
        return KinshipGraph
    if name == "models":
        from kinship_graph import models
        return models
    if name == "storage":
        from kinship_graph import storage
        return storage
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
