# calcgraph/ops/__init__.py

# Convenience re-exports so users can do: from calcgraph.ops import forward, OpKind, ...
from .kinds import OpKind, Operation, OpRule, SOURCE_KINDS
from .transcendental import EXP_CLAMP
from .registry import (
    forward,
    local_gradient,
    arity,
    is_source,
    rule_for,
    label,
    derivative_label,
)

__all__ = [
    "OpKind", "Operation", "OpRule", "SOURCE_KINDS", "EXP_CLAMP",
    "forward", "local_gradient", "arity", "is_source", "rule_for",
    "label", "derivative_label",
]
