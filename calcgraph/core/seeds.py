# calcgraph/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (d sink/d sink = 1) at the sink and let gradients grow
# backwards through the graph. The helpers below package that for a single
# source, compare it with finite differences, and sweep it over a grid.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Dict, Iterable, Mapping, Optional, Tuple
import numpy as np

from ..errors import GradientCheckError, GraphError, MissingBinding
from .engine import NodeRef, _pick_sink, _resolve, evaluate, resolve_bindings, run
from .topo import topological_order


def _source_id(graph, wrt: NodeRef) -> int:
    nid = _resolve(graph, wrt)
    if not graph.node(nid).is_source:
        raise GraphError(f"node {nid} is not an input/parameter node")
    return nid


def grad(graph, bindings: Mapping[NodeRef, float], wrt: NodeRef,
         sink: Optional[NodeRef] = None) -> float:
    """∂sink/∂wrt at `bindings`, from one reverse pass."""
    result = run(graph, bindings, sink=sink)
    return result.gradients[_source_id(graph, wrt)]


def finite_difference(graph, bindings: Mapping[NodeRef, float], wrt: NodeRef,
                      sink: Optional[NodeRef] = None, step: Optional[float] = None) -> float:
    """
    Central difference (f(x+h) - f(x-h)) / 2h of the sink value with respect
    to the binding of source `wrt`. Only the forward pass is used.
    """
    h = graph.config.fd_step if step is None else step
    snap = graph.snapshot()
    order = topological_order(snap)
    bound = resolve_bindings(snap, bindings)
    nid = _source_id(snap, wrt)
    if nid not in bound:
        raise MissingBinding(nid)
    sink_id = _pick_sink(snap, order, sink)

    def f(x):
        bumped = dict(bound)
        bumped[nid] = x
        return evaluate(snap, order, bumped)[sink_id]

    x0 = bound[nid]
    return (f(x0 + h) - f(x0 - h)) / (2.0 * h)


def check_gradients(graph, bindings: Mapping[NodeRef, float],
                    sink: Optional[NodeRef] = None,
                    tol: Optional[float] = None) -> Dict[int, Tuple[float, float]]:
    """
    Compare backpropagated gradients with finite differences at every source.

    Returns:
        {source id: (analytic, numeric)}

    Raises:
        GradientCheckError listing the sources whose |analytic - numeric| > tol.
    """
    tol = graph.config.fd_tolerance if tol is None else tol
    result = run(graph, bindings, sink=sink)
    report = {}
    for nid in result.order:
        if not graph.node(nid).is_source:
            continue
        numeric = finite_difference(graph, bindings, nid, sink=result.sink)
        report[nid] = (result.gradients[nid], numeric)

    bad = {nid: pair for nid, pair in report.items() if abs(pair[0] - pair[1]) > tol}
    if bad:
        raise GradientCheckError(bad, tol)
    return report


def sweep(graph, bindings: Mapping[NodeRef, float], wrt: NodeRef, xs: Iterable[float],
          sink: Optional[NodeRef] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sink value and ∂sink/∂wrt along a grid of values for `wrt`, the other
    bindings held fixed. Used to draw h(x) next to h'(x).

    Returns:
        (values, gradients), float64 arrays shaped like `xs`
    """
    xs = np.asarray(list(xs), dtype=np.float64)
    nid = _source_id(graph, wrt)
    bound = resolve_bindings(graph, bindings)
    values = np.zeros_like(xs)
    grads = np.zeros_like(xs)
    for k, x in enumerate(xs):
        bound[nid] = float(x)
        result = run(graph, bound, sink=sink)
        values[k] = result.output
        grads[k] = result.gradients[nid]
    return values, grads
