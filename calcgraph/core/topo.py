# calcgraph/core/topo.py
from __future__ import annotations
import heapq
from typing import Dict, List

from ..errors import CyclicGraph


def topological_order(graph) -> List[int]:
    """
    Kahn's algorithm over the graph's input edges.

    In-degree counts distinct input nodes, so a node that uses the same input
    twice (multiply(x, x)) is released once that input is done. Among ready
    nodes the earliest created (smallest id) is emitted first, which makes the
    order a deterministic function of the graph.

    Raises CyclicGraph when some nodes never become ready.
    """
    indeg: Dict[int, int] = {}
    consumers: Dict[int, List[int]] = {nid: [] for nid in graph.ids()}
    for node in graph:
        distinct = set(node.inputs)
        indeg[node.id] = len(distinct)
        for src in distinct:
            consumers[src].append(node.id)

    ready = [nid for nid, d in indeg.items() if d == 0]
    heapq.heapify(ready)
    order: List[int] = []
    while ready:
        nid = heapq.heappop(ready)
        order.append(nid)
        for nxt in consumers[nid]:
            indeg[nxt] -= 1
            if indeg[nxt] == 0:
                heapq.heappush(ready, nxt)

    if len(order) < len(indeg):
        stuck = [nid for nid, d in indeg.items() if d > 0]
        raise CyclicGraph(stuck)
    return order


def is_valid_order(graph, order: List[int]) -> bool:
    """Every node appears exactly once and after all of its inputs."""
    pos = {nid: i for i, nid in enumerate(order)}
    if len(pos) != len(order) or set(pos) != set(graph.ids()):
        return False
    return all(pos[src] < pos[n.id] for n in graph for src in n.inputs)
