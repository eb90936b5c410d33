# calcgraph/core/__init__.py

"""
Core public API for the graph engine.

Exports:
    Node               : one vertex (operation + ordered input ids).
    Graph              : the graph store; issues ids and applies mutations.
    topological_order  : Kahn ordering, raises CyclicGraph on cycles.
    evaluate           : forward pass over an order.
    propagate          : reverse pass, summing fan-out contributions.
    edge_gradients     : per-edge contributions of the reverse pass.
    run / RunResult    : order -> evaluate -> propagate in one call.
    grad, finite_difference, check_gradients, sweep : numerical helpers.
"""

from .node import Node
from .graph import Graph
from .topo import topological_order, is_valid_order
from .engine import RunResult, evaluate, propagate, edge_gradients, run
from .seeds import grad, finite_difference, check_gradients, sweep

__all__ = [
    "Node", "Graph",
    "topological_order", "is_valid_order",
    "RunResult", "evaluate", "propagate", "edge_gradients", "run",
    "grad", "finite_difference", "check_gradients", "sweep",
]
