# calcgraph/core/node.py
from dataclasses import dataclass, field
from typing import List, Optional

from ..ops import Operation, arity


@dataclass
class Node:
    """
    One vertex of the computation graph.

    Attributes
    ----------
    id : int
        Arena index issued by the owning Graph; never reused.
    op : Operation
        Operation kind plus baked-in parameters (e.g. linear slope/intercept).
    inputs : List[int]
        Ordered ids of the nodes feeding this one. Position matters for
        order-sensitive ops (subtract). Non-owning references.
    name : Optional[str]
        Optional display name ("x", "w", "L", ...).
    """
    id: int
    op: Operation
    inputs: List[int] = field(default_factory=list)
    name: Optional[str] = None

    @property
    def arity(self) -> int:
        return arity(self.op)

    @property
    def is_source(self) -> bool:
        return self.op.is_source

    @property
    def is_complete(self) -> bool:
        return len(self.inputs) == self.arity

    @property
    def label(self) -> str:
        return self.name if self.name is not None else f"{self.op.kind.value}#{self.id}"
