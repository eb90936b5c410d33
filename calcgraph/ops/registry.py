# calcgraph/ops/registry.py
"""
Operation registry: the one place that knows how to evaluate and
differentiate each operation kind.

Both entry points are pure. Calling them with the wrong number of inputs
cannot happen for a well-formed graph, so it fails fast with ArityMismatch
instead of guessing (no implicit zero padding).
"""
from __future__ import annotations
from typing import Sequence, Union

from ..errors import ArityMismatch
from .kinds import OpKind, OpRule, Operation, SOURCE_KINDS
from . import arithmetic, transcendental

_RULES = {**arithmetic.RULES, **transcendental.RULES}

_missing = set(OpKind) - set(_RULES)
if _missing:
    raise RuntimeError(f"no rule registered for {sorted(k.value for k in _missing)}")

OpLike = Union[Operation, OpKind, str]


def rule_for(op: OpLike) -> OpRule:
    return _RULES[Operation.of(op).kind]


def arity(op: OpLike) -> int:
    return rule_for(op).arity


def is_source(op: OpLike) -> bool:
    return Operation.of(op).kind in SOURCE_KINDS


def _checked(op: OpLike, inputs: Sequence[float]):
    op = Operation.of(op)
    rule = _RULES[op.kind]
    if rule.forward is None:
        raise ArityMismatch(op.kind, 0, len(inputs),
                            message=f"'{op.kind}' is a source: its value is bound, not computed")
    if len(inputs) != rule.arity:
        raise ArityMismatch(op.kind, rule.arity, len(inputs))
    return op, rule, [float(u) for u in inputs]


def forward(op: OpLike, inputs: Sequence[float]) -> float:
    """Value of `op` applied to `inputs`."""
    op, rule, xs = _checked(op, inputs)
    return float(rule.forward(*xs, **op.kwargs))


def local_gradient(op: OpLike, inputs: Sequence[float], index: int) -> float:
    """∂op/∂inputs[index], evaluated at `inputs` (not the chain-rule product)."""
    op, rule, xs = _checked(op, inputs)
    if not 0 <= index < rule.arity:
        raise ArityMismatch(op.kind, rule.arity, index + 1,
                            message=f"'{op.kind}' has no input position {index}")
    return float(rule.partials[index](*xs, **op.kwargs))


def label(op: OpLike) -> str:
    op = Operation.of(op)
    return _RULES[op.kind].label.format(**op.kwargs)


def derivative_label(op: OpLike) -> str:
    op = Operation.of(op)
    return _RULES[op.kind].deriv_label.format(**op.kwargs)
