# calcgraph/core/engine.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..errors import ArityMismatch, MissingBinding, UnknownNode
from ..ops import forward, local_gradient
from .topo import topological_order

NodeRef = Union[int, str]
EdgeKey = Tuple[int, int, int]  # (input id, consumer id, input position)


@dataclass(frozen=True)
class RunResult:
    """
    Everything a renderer needs after one recompute.

    Attributes
    ----------
    order          : node ids in topological order
    values         : node id -> forward value
    gradients      : node id -> ∂sink/∂node
    edge_gradients : (src, dst, pos) -> gradient flowing from dst back into src
                     through input slot `pos`
    sink           : node the gradients are taken of (None for an empty graph)
    """
    order: List[int] = field(default_factory=list)
    values: Dict[int, float] = field(default_factory=dict)
    gradients: Dict[int, float] = field(default_factory=dict)
    edge_gradients: Dict[EdgeKey, float] = field(default_factory=dict)
    sink: Optional[int] = None

    @property
    def output(self) -> Optional[float]:
        return None if self.sink is None else self.values[self.sink]


def _resolve(graph, ref: NodeRef) -> int:
    # ints are ids, strings are display names
    if isinstance(ref, str):
        return graph.find(ref)
    graph.node(ref)
    return ref


def resolve_bindings(graph, bindings: Mapping[NodeRef, float]) -> Dict[int, float]:
    return {_resolve(graph, k): float(v) for k, v in bindings.items()}


# ---------------- Forward ---------------- #
def evaluate(graph, order: List[int], bindings: Mapping[NodeRef, float]) -> Dict[int, float]:
    """
    Forward pass: one value per node, computed in `order`.

    Sources read their value from `bindings` (MissingBinding if absent);
    every other node applies its registry formula to the already computed
    values of its inputs.
    """
    bound = resolve_bindings(graph, bindings)
    values: Dict[int, float] = {}
    for nid in order:
        node = graph.node(nid)
        if node.is_source:
            if nid not in bound:
                raise MissingBinding(nid)
            values[nid] = bound[nid]
            continue
        if not node.is_complete:
            raise ArityMismatch(node.op.kind, node.arity, len(node.inputs), node_id=nid)
        values[nid] = forward(node.op, [values[i] for i in node.inputs])
    return values


# ---------------- Backward ---------------- #
def _backward(graph, order, values, sink):
    grads: Dict[int, float] = {nid: 0.0 for nid in order}
    edges: Dict[EdgeKey, float] = {}
    grads[sink] = 1.0

    # Reverse sweep
    for nid in reversed(order):
        node = graph.node(nid)
        g = grads[nid]
        xs = [values[i] for i in node.inputs]
        for pos, src in enumerate(node.inputs):
            # no path to the sink: nothing flows, skip the partial entirely
            contrib = g * local_gradient(node.op, xs, pos) if g != 0.0 else 0.0
            edges[(src, nid, pos)] = contrib
            # Accumulate, never overwrite: fan-out nodes sum over consumers
            grads[src] += contrib
    return grads, edges


def _pick_sink(graph, order, sink: Optional[NodeRef]) -> int:
    if sink is None:
        return order[-1]
    sink = _resolve(graph, sink)
    if sink not in order:
        raise UnknownNode(sink)
    return sink


def propagate(graph, order: List[int], values: Mapping[int, float],
              sink: Optional[NodeRef] = None) -> Dict[int, float]:
    """
    Reverse-mode pass: ∂sink/∂node for every node.

    Args:
        order : topological order used for the forward pass.
        values: forward values from `evaluate`.
        sink  : node to differentiate; defaults to the last node of `order`.

    Notes:
        - For each node y and input slot i: grad[p_i] += grad[y] * ∂y/∂p_i.
        - A node with no path to the sink ends with gradient 0.
    """
    if not order:
        return {}
    grads, _ = _backward(graph, order, values, _pick_sink(graph, order, sink))
    return grads


def edge_gradients(graph, order: List[int], values: Mapping[int, float],
                   sink: Optional[NodeRef] = None) -> Dict[EdgeKey, float]:
    """Per-edge chain-rule contributions of the backward pass."""
    if not order:
        return {}
    _, edges = _backward(graph, order, values, _pick_sink(graph, order, sink))
    return edges


# ---------------- Pipeline ---------------- #
def run(graph, bindings: Mapping[NodeRef, float], sink: Optional[NodeRef] = None) -> RunResult:
    """
    order -> evaluate -> propagate over a snapshot of `graph`.

    Nothing is cached between calls: every call recomputes from scratch, so
    identical graphs and bindings give identical results.
    """
    snap = graph.snapshot()
    order = topological_order(snap)
    if not order:
        return RunResult()
    values = evaluate(snap, order, bindings)
    sink_id = _pick_sink(snap, order, sink)
    grads, edges = _backward(snap, order, values, sink_id)
    result = RunResult(order=order, values=values, gradients=grads,
                       edge_gradients=edges, sink=sink_id)

    if graph.config.verbose:
        from .graph_utils import print_computation_graph
        print_computation_graph(snap, result)
    return result
