# calcgraph/ops/transcendental.py
import numpy as np

from .kinds import OpKind
from .arithmetic import _unary

# Exponent cap applied before exp(); keeps values drawable and avoids overflow.
EXP_CLAMP = 5.0


def _clamped_exp(u, clamp=EXP_CLAMP):
    # d/du e^min(u, C) is taken as e^min(u, C) on both sides of the clamp
    return np.exp(np.minimum(u, clamp))


RULES = {
    OpKind.SINE:        _unary(np.sin, np.cos, "sin u", "cos u"),
    OpKind.EXPONENTIAL: _unary(_clamped_exp, _clamped_exp, "eᵘ", "eᵘ"),
}
