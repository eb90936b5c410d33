# calcgraph/ops/kinds.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Tuple, Union


class OpKind(str, Enum):
    """Closed vocabulary of scalar operations a node can carry."""
    INPUT = "input"
    PARAMETER = "parameter"
    OUTPUT = "output"
    SQUARE = "square"
    SINE = "sine"
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    POWER4 = "power4"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"

    def __str__(self):
        return self.value


SOURCE_KINDS = frozenset({OpKind.INPUT, OpKind.PARAMETER})

# linear with no coefficients given is 3u+1
LINEAR_DEFAULTS = {"slope": 3.0, "intercept": 1.0}


@dataclass(frozen=True)
class OpRule:
    """
    Forward formula and local partials of one operation kind.

    Attributes
    ----------
    arity : int
        Number of inputs (0 for sources).
    forward : callable(*inputs, **params) -> float
        None for sources, whose value is bound externally.
    partials : tuple of callables(*inputs, **params) -> float
        partials[i] = ∂out/∂input_i evaluated at the current inputs.
    label, deriv_label : str
        Display formulas, formatted with the operation's params.
    """
    arity: int
    forward: Union[Callable[..., Any], None]
    partials: Tuple[Callable[..., Any], ...]
    label: str
    deriv_label: str


@dataclass(frozen=True)
class Operation:
    """
    An operation instance: kind plus baked-in parameters.

    Parameters are stored as a sorted tuple of (name, value) pairs so the
    instance stays hashable, e.g. ``Operation.linear(3, 1)`` for ``3u+1``.
    """
    kind: OpKind
    params: Tuple[Tuple[str, float], ...] = ()

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        kind = OpKind(self.kind)
        params = dict(self.params)
        if kind is OpKind.LINEAR:
            params = {**LINEAR_DEFAULTS, **params}
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "params", tuple(sorted((k, float(v)) for k, v in params.items())))

    @classmethod
    def of(cls, op: Union["Operation", OpKind, str]) -> "Operation":
        if isinstance(op, Operation):
            return op
        return cls(OpKind(op))

    @classmethod
    def linear(cls, slope: float = 3.0, intercept: float = 1.0) -> "Operation":
        return cls(OpKind.LINEAR, (("intercept", intercept), ("slope", slope)))

    @classmethod
    def exponential(cls, clamp: float) -> "Operation":
        return cls(OpKind.EXPONENTIAL, (("clamp", float(clamp)),))

    @property
    def kwargs(self) -> Dict[str, float]:
        return dict(self.params)

    def with_param(self, name: str, value: float) -> "Operation":
        merged = self.kwargs
        merged[name] = float(value)
        return Operation(self.kind, tuple(sorted(merged.items())))

    @property
    def is_source(self) -> bool:
        return self.kind in SOURCE_KINDS

    def __str__(self):
        if not self.params:
            return self.kind.value
        args = ", ".join(f"{k}={v:g}" for k, v in self.params)
        return f"{self.kind.value}({args})"
