"""
Ready-built teaching graphs.

Each preset is a small named graph together with a one-line description and
the x-range its function curve is drawn over:

    single     h(x) = (3x + 2)⁴
    double     h(x) = sin(e^(x²))
    mini-net   L = (w·x − y)²
    multipath  z = x² + sin(x)
    deep       a chain of nine operations

Source nodes carry display names ("x", "w", "y") so they can be bound by name:

    >>> p = build_preset("multipath")
    >>> p.graph.run({"x": 1.0}).gradients[p.sources["x"]]   # 2x + cos(x)
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from .config import EngineConfig
from .core.graph import Graph
from .ops import OpKind, Operation


@dataclass
class Preset:
    """A named graph plus what the presentation layer needs to plot it."""
    name: str
    graph: Graph
    description: str
    x_range: Tuple[float, float]
    sources: Dict[str, int] = field(default_factory=dict)
    defaults: Dict[str, float] = field(default_factory=dict)  # initial bindings by name


def _chain(g: Graph, start: int, ops) -> int:
    nid = start
    for op in ops:
        nid = g.insert_node(op, [nid])
    return nid


def _single(g: Graph) -> Preset:
    x = g.insert_node(OpKind.INPUT, name="x")
    top = _chain(g, x, [Operation.linear(3, 2), OpKind.POWER4])
    g.insert_node(OpKind.OUTPUT, [top], name="h")
    return Preset("single", g, "h(x) = (3x + 2)⁴", (-2.0, 2.0), {"x": x}, {"x": 1.0})


def _double(g: Graph) -> Preset:
    x = g.insert_node(OpKind.INPUT, name="x")
    top = _chain(g, x, [OpKind.SQUARE, OpKind.EXPONENTIAL, OpKind.SINE])
    g.insert_node(OpKind.OUTPUT, [top], name="h")
    return Preset("double", g, "h(x) = sin(e^(x²))", (-1.5, 1.5), {"x": x}, {"x": 1.0})


def _mini_net(g: Graph) -> Preset:
    w = g.insert_node(OpKind.PARAMETER, name="w")
    x = g.insert_node(OpKind.INPUT, name="x")
    wx = g.insert_node(OpKind.MULTIPLY, [w, x])
    y = g.insert_node(OpKind.INPUT, name="y")
    diff = g.insert_node(OpKind.SUBTRACT, [wx, y])
    sq = g.insert_node(OpKind.SQUARE, [diff])
    g.insert_node(OpKind.OUTPUT, [sq], name="L")
    return Preset("mini-net", g, "L = (w·x − y)²", (-2.0, 2.0),
                  {"w": w, "x": x, "y": y}, {"w": 0.5, "x": 1.0, "y": 1.0})


def _multipath(g: Graph) -> Preset:
    x = g.insert_node(OpKind.INPUT, name="x")
    sq = g.insert_node(OpKind.SQUARE, [x])
    sn = g.insert_node(OpKind.SINE, [x])
    total = g.insert_node(OpKind.ADD, [sq, sn])
    g.insert_node(OpKind.OUTPUT, [total], name="z")
    return Preset("multipath", g, "z = x² + sin(x)", (-2.0, 2.0), {"x": x}, {"x": 1.0})


def _deep(g: Graph) -> Preset:
    x = g.insert_node(OpKind.INPUT, name="x")
    top = _chain(g, x, [
        OpKind.SQUARE, Operation.linear(3, 1), OpKind.SINE, OpKind.EXPONENTIAL,
        OpKind.SQUARE, OpKind.SINE, Operation.linear(2, 0), OpKind.SQUARE,
    ])
    g.insert_node(OpKind.OUTPUT, [top], name="h")
    return Preset("deep", g, "Deep chain: 9 ops", (-1.0, 1.0), {"x": x}, {"x": 1.0})


_BUILDERS: Dict[str, Callable[[Graph], Preset]] = {
    "single": _single,
    "double": _double,
    "mini-net": _mini_net,
    "multipath": _multipath,
    "deep": _deep,
}

PRESETS = tuple(_BUILDERS)


def build_preset(name: str, config: Optional[EngineConfig] = None) -> Preset:
    """Build a fresh copy of preset `name`; raises KeyError for unknown names."""
    try:
        builder = _BUILDERS[name]
    except KeyError:
        raise KeyError(f"unknown preset {name!r}; choose from {', '.join(PRESETS)}") from None
    return builder(Graph(config))
