# calcgraph/ops/arithmetic.py
from .kinds import OpKind, OpRule


def _unary(f, dfdu, label, deriv_label):
    return OpRule(arity=1, forward=f, partials=(dfdu,), label=label, deriv_label=deriv_label)


def _binary(f, dfdu, dfdv, label, deriv_label):
    """Binary primitive: out = f(u, v) with local partials (∂out/∂u, ∂out/∂v)."""
    return OpRule(arity=2, forward=f, partials=(dfdu, dfdv), label=label, deriv_label=deriv_label)


def _source(label):
    # value is bound externally; gradient flow terminates here
    return OpRule(arity=0, forward=None, partials=(), label=label, deriv_label="—")


RULES = {
    OpKind.INPUT:     _source("x"),
    OpKind.PARAMETER: _source("w"),
    OpKind.OUTPUT:    _unary(lambda u: u,       lambda u: 1.0,          "u",   "1"),
    OpKind.SQUARE:    _unary(lambda u: u * u,   lambda u: 2.0 * u,      "u²",  "2u"),
    OpKind.POWER4:    _unary(lambda u: u * u * u * u, lambda u: 4.0 * u * u * u, "u⁴", "4u³"),
    OpKind.LINEAR:    _unary(lambda u, slope=3.0, intercept=1.0: slope * u + intercept,
                             lambda u, slope=3.0, intercept=1.0: slope,
                             "{slope:g}u{intercept:+g}", "{slope:g}"),
    OpKind.ADD:       _binary(lambda u, v: u + v, lambda u, v: 1.0, lambda u, v: 1.0,  "u+v", "1, 1"),
    OpKind.SUBTRACT:  _binary(lambda u, v: u - v, lambda u, v: 1.0, lambda u, v: -1.0, "u−v", "1, −1"),
    OpKind.MULTIPLY:  _binary(lambda u, v: u * v, lambda u, v: v,   lambda u, v: u,    "u·v", "v, u"),
}
