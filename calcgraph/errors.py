# calcgraph/errors.py
"""
Exceptions raised by the graph engine.

Structural errors (arity, unknown ids, cycles) reject the requested mutation or
evaluation and leave the graph untouched. Numeric edge cases are never errors:
the exponential is clamped in the registry and a node without a path to the
sink simply gets gradient 0.
"""
from typing import Iterable, Optional


class GraphError(ValueError):
    """Base class for everything the engine raises on purpose."""


class ArityMismatch(GraphError):
    """Input count does not match the arity of the operation."""

    def __init__(self, kind, expected: int, got: int, node_id: Optional[int] = None,
                 message: Optional[str] = None):
        self.kind = kind
        self.expected = expected
        self.got = got
        self.node_id = node_id
        where = f" (node {node_id})" if node_id is not None else ""
        super().__init__(message or f"'{kind}' takes {expected} input(s), got {got}{where}")


class ArityExceeded(GraphError):
    """The consumer's input list is already full."""

    def __init__(self, src: int, dst: int, arity: int):
        self.src = src
        self.dst = dst
        self.arity = arity
        super().__init__(
            f"cannot connect {src} -> {dst}: node {dst} already has {arity} input(s)"
        )


class UnknownNode(GraphError):
    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"unknown node id {node_id!r}")


class CyclicGraph(GraphError):
    """The graph (or the edge being added) is not acyclic."""

    def __init__(self, nodes: Iterable[int], message: Optional[str] = None):
        self.nodes = sorted(nodes)
        super().__init__(message or f"graph contains a cycle through nodes {self.nodes}")


class MissingBinding(GraphError):
    """A source node has no value bound for this evaluation."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"no value bound for source node {node_id}")


class GradientCheckError(GraphError):
    """Backpropagated gradients disagree with finite differences."""

    def __init__(self, mismatches: dict, tol: float):
        # mismatches: {node_id: (analytic, numeric)}
        self.mismatches = mismatches
        self.tol = tol
        detail = ", ".join(
            f"{nid}: {a:.6g} vs {n:.6g}" for nid, (a, n) in sorted(mismatches.items())
        )
        super().__init__(f"gradient check failed (tol={tol:g}): {detail}")
