# calcgraph/core/graph.py
from __future__ import annotations
import warnings
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, EngineConfig
from ..errors import ArityExceeded, ArityMismatch, CyclicGraph, UnknownNode
from ..ops import OpKind, Operation
from .node import Node


class Graph:
    """
    Graph store: owns the nodes and issues their ids.

    Ids come from a per-instance arena counter, so two graphs never share or
    leak ids. Every mutation either commits completely or raises and leaves
    the graph as it was.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._nodes: Dict[int, Node] = {}  # insertion-ordered
        self._next_id = 0

    def reset(self):
        self._nodes.clear()
        self._next_id = 0

    # ------------------------------------------------------------------ queries
    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __repr__(self):
        return f"Graph(nodes={len(self._nodes)}, edges={len(self.edges())})"

    def node(self, node_id: int) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNode(node_id) from None

    def ids(self) -> List[int]:
        return list(self._nodes)

    def sources(self) -> List[int]:
        return [n.id for n in self._nodes.values() if n.is_source]

    def find(self, name: str) -> int:
        """Id of the first node carrying display name `name`."""
        for n in self._nodes.values():
            if n.name == name:
                return n.id
        raise UnknownNode(name)

    def edges(self) -> List[Tuple[int, int]]:
        """(input, consumer) pairs, one per input slot, in insertion order."""
        return [(src, n.id) for n in self._nodes.values() for src in n.inputs]

    def consumers(self, node_id: int) -> List[int]:
        self.node(node_id)
        return [n.id for n in self._nodes.values() if node_id in n.inputs]

    # ---------------------------------------------------------------- mutations
    def insert_node(self, op: Union[Operation, OpKind, str],
                    inputs: Iterable[int] = (), *, name: Optional[str] = None) -> int:
        """
        Create a node and return its id.

        `inputs` must be either complete (len == arity) or empty, the latter
        for a compute node that an editor wires up later with connect().
        """
        op = Operation.of(op)
        if op.kind is OpKind.EXPONENTIAL and "clamp" not in op.kwargs:
            op = op.with_param("clamp", self.config.exp_clamp)
        inputs = list(inputs)

        node = Node(id=self._next_id, op=op, inputs=inputs, name=name)
        if inputs and len(inputs) != node.arity:
            raise ArityMismatch(op.kind, node.arity, len(inputs))
        for src in inputs:
            self.node(src)

        self._nodes[node.id] = node
        self._next_id += 1
        return node.id

    def connect(self, src: int, dst: int):
        """Append `src` to `dst`'s inputs."""
        self.node(src)
        consumer = self.node(dst)
        if len(consumer.inputs) >= consumer.arity:
            raise ArityExceeded(src, dst, consumer.arity)
        if self.config.reject_cycles and self._depends_on(src, dst):
            raise CyclicGraph(
                [src, dst],
                f"edge {src} -> {dst} would close a cycle ({dst} already feeds {src})",
            )
        consumer.inputs.append(src)

    def delete_node(self, node_id: int):
        """Remove a node together with every edge touching it."""
        self.node(node_id)
        del self._nodes[node_id]
        for n in self._nodes.values():
            if node_id in n.inputs:
                n.inputs[:] = [i for i in n.inputs if i != node_id]

    def delete_edge(self, src: int, dst: int):
        self.node(src)
        consumer = self.node(dst)
        if src not in consumer.inputs:
            warnings.warn(f"no edge {src} -> {dst} to delete")
            return
        consumer.inputs[:] = [i for i in consumer.inputs if i != src]

    def _depends_on(self, start: int, target: int) -> bool:
        """True if `target` is `start` or lies upstream of it."""
        stack, seen = [start], set()
        while stack:
            cur = stack.pop()
            if cur == target:
                return True
            if cur in seen:
                continue
            seen.add(cur)
            stack.extend(self._nodes[cur].inputs)
        return False

    # ----------------------------------------------------------------- pipeline
    def snapshot(self) -> "Graph":
        """Independent copy; later edits to either graph do not affect the other."""
        copy = Graph(self.config)
        copy._nodes = {
            nid: Node(id=n.id, op=n.op, inputs=list(n.inputs), name=n.name)
            for nid, n in self._nodes.items()
        }
        copy._next_id = self._next_id
        return copy

    def run(self, bindings: Mapping[int, float], sink: Optional[int] = None):
        from .engine import run  # local import to avoid cycles
        return run(self, bindings, sink=sink)
