"""Forward evaluation, backpropagation and the numerical helpers."""
import numpy as np
import pytest

from calcgraph import (ArityMismatch, EngineConfig, GradientCheckError, Graph, GraphError,
                       MissingBinding, OpKind, Operation, UnknownNode, build_preset,
                       check_gradients, edge_gradients, evaluate, finite_difference, grad,
                       propagate, run, sweep, topological_order)


def multipath_graph():
    g = Graph()
    x = g.insert_node(OpKind.INPUT, name="x")
    sq = g.insert_node(OpKind.SQUARE, [x])
    sn = g.insert_node(OpKind.SINE, [x])
    total = g.insert_node(OpKind.ADD, [sq, sn])
    out = g.insert_node(OpKind.OUTPUT, [total], name="z")
    return g, x, sq, sn, total, out


@pytest.mark.parametrize("x0", [-2.0, -0.4, 0.0, 1.0, 1.7])
def test_multipath_gradients_are_summed(x0):
    g, x, sq, sn, total, out = multipath_graph()
    result = g.run({x: x0})
    assert result.output == pytest.approx(x0 ** 2 + np.sin(x0))
    assert abs(result.gradients[x] - (2 * x0 + np.cos(x0))) < 1e-9
    assert result.gradients[sq] == result.gradients[sn] == 1.0
    # per-edge contributions add up to the node gradient
    assert result.edge_gradients[(x, sq, 0)] == pytest.approx(2 * x0)
    assert result.edge_gradients[(x, sn, 0)] == pytest.approx(np.cos(x0))
    from_x = sum(v for (src, _, _), v in result.edge_gradients.items() if src == x)
    assert from_x == pytest.approx(result.gradients[x])


def test_concrete_chain_scenario():
    g = Graph()
    x = g.insert_node(OpKind.INPUT)
    sq = g.insert_node(OpKind.SQUARE, [x])
    lin = g.insert_node(Operation.linear(3, 1), [sq])
    sn = g.insert_node(OpKind.SINE, [lin])
    out = g.insert_node(OpKind.OUTPUT, [sn])
    result = g.run({x: 0.0})
    assert result.order == [x, sq, lin, sn, out]
    assert result.values[sq] == 0.0
    assert result.values[lin] == 1.0
    assert result.values[sn] == pytest.approx(0.8415, abs=1e-4)
    assert result.values[out] == result.values[sn]
    assert result.gradients[out] == 1.0
    assert result.gradients[sq] == pytest.approx(3 * np.cos(1.0))
    assert result.gradients[x] == 0.0


def test_concrete_loss_scenario():
    p = build_preset("mini-net")
    w, x, y = (p.sources[k] for k in ("w", "x", "y"))
    g = p.graph
    result = g.run({"w": 0.5, "x": 1.0, "y": 1.0})
    mul = g.consumers(w)[0]
    sub = g.consumers(y)[0]
    sq = g.consumers(sub)[0]
    assert result.values[mul] == 0.5
    assert result.values[sub] == -0.5
    assert result.values[sq] == 0.25
    assert result.output == 0.25
    assert result.gradients[w] == pytest.approx(-1.0)
    assert result.gradients[x] == pytest.approx(-0.5)
    assert result.gradients[y] == pytest.approx(1.0)


def test_subtract_is_order_sensitive():
    g = Graph()
    a = g.insert_node(OpKind.INPUT)
    b = g.insert_node(OpKind.INPUT)
    s = g.insert_node(OpKind.SUBTRACT, [b, a])
    result = g.run({a: 5.0, b: 2.0})
    assert result.values[s] == -3.0
    assert result.gradients[a] == -1.0
    assert result.gradients[b] == 1.0


def test_repeated_input_counts_twice():
    g = Graph()
    x = g.insert_node(OpKind.INPUT)
    g.insert_node(OpKind.MULTIPLY, [x, x])
    assert g.run({x: 3.0}).gradients[x] == 6.0


def test_unreachable_nodes_get_zero():
    g = Graph()
    x = g.insert_node(OpKind.INPUT, name="x")
    y = g.insert_node(OpKind.INPUT, name="y")
    sx = g.insert_node(OpKind.SQUARE, [x])
    sy = g.insert_node(OpKind.SINE, [y])
    result = g.run({"x": 2.0, "y": 1.0}, sink=sx)
    assert result.sink == sx
    assert result.gradients[x] == 4.0
    assert result.gradients[y] == 0.0
    assert result.gradients[sy] == 0.0
    # default sink is the last node in the order
    assert g.run({"x": 2.0, "y": 1.0}).sink == sy


def test_explicit_pipeline_matches_run():
    g, x, *_ = multipath_graph()
    order = topological_order(g)
    values = evaluate(g, order, {x: 0.3})
    grads = propagate(g, order, values)
    result = run(g, {x: 0.3})
    assert values == result.values
    assert grads == result.gradients
    assert edge_gradients(g, order, values) == result.edge_gradients
    assert propagate(g, [], {}) == {}


def test_run_is_idempotent():
    p = build_preset("deep")
    first = p.graph.run({"x": 0.37})
    second = p.graph.run({"x": 0.37})
    assert first.order == second.order
    assert first.values == second.values
    assert first.gradients == second.gradients


def test_missing_binding():
    g, x, *_ = multipath_graph()
    with pytest.raises(MissingBinding) as exc:
        g.run({})
    assert exc.value.node_id == x


def test_incomplete_node_is_rejected():
    g = Graph()
    x = g.insert_node(OpKind.INPUT)
    add = g.insert_node(OpKind.ADD)
    g.connect(x, add)
    with pytest.raises(ArityMismatch) as exc:
        g.run({x: 1.0})
    assert exc.value.node_id == add


def test_unknown_sink():
    g, x, *_ = multipath_graph()
    with pytest.raises(UnknownNode):
        g.run({x: 1.0}, sink=123)
    with pytest.raises(UnknownNode):
        g.run({"nope": 1.0})


def test_empty_graph():
    result = Graph().run({})
    assert result.order == [] and result.values == {} and result.gradients == {}
    assert result.output is None


def test_exponential_overflow_is_clamped():
    g = Graph()
    x = g.insert_node(OpKind.INPUT)
    e = g.insert_node(OpKind.EXPONENTIAL, [x])
    result = g.run({x: 1000.0})
    assert result.values[e] == pytest.approx(np.exp(5.0))
    assert np.isfinite(result.gradients[x])


def branching_graph():
    """f = sin(x·y) + (x − y)² + e^(sin x) · x²"""
    g = Graph()
    x = g.insert_node(OpKind.INPUT, name="x")
    y = g.insert_node(OpKind.PARAMETER, name="y")
    xy = g.insert_node(OpKind.MULTIPLY, [x, y])
    a = g.insert_node(OpKind.SINE, [xy])
    d = g.insert_node(OpKind.SUBTRACT, [x, y])
    b = g.insert_node(OpKind.SQUARE, [d])
    s = g.insert_node(OpKind.SINE, [x])
    e = g.insert_node(OpKind.EXPONENTIAL, [s])
    x2 = g.insert_node(OpKind.SQUARE, [x])
    c = g.insert_node(OpKind.MULTIPLY, [e, x2])
    ab = g.insert_node(OpKind.ADD, [a, b])
    f = g.insert_node(OpKind.ADD, [ab, c])
    g.insert_node(OpKind.OUTPUT, [f], name="f")
    return g


@pytest.mark.parametrize("bindings", [{"x": 0.4, "y": -1.2}, {"x": -1.1, "y": 0.7}, {"x": 0.0, "y": 2.0}])
def test_branching_graph_matches_finite_differences(bindings):
    g = branching_graph()
    report = check_gradients(g, bindings)
    assert set(report) == {g.find("x"), g.find("y")}
    for analytic, numeric in report.values():
        assert abs(analytic - numeric) < 1e-3

    x0, y0 = bindings["x"], bindings["y"]
    dfdx = (np.cos(x0 * y0) * y0 + 2 * (x0 - y0)
            + np.exp(np.sin(x0)) * np.cos(x0) * x0 ** 2 + np.exp(np.sin(x0)) * 2 * x0)
    assert abs(grad(g, bindings, "x") - dfdx) < 1e-9


@pytest.mark.parametrize("name", ["single", "double", "mini-net", "multipath", "deep"])
def test_presets_match_finite_differences(name):
    p = build_preset(name)
    check_gradients(p.graph, p.defaults)


def test_gradient_check_reports_mismatch():
    g = Graph(EngineConfig(exp_clamp=0.0))
    x = g.insert_node(OpKind.INPUT, name="x")
    g.insert_node(OpKind.EXPONENTIAL, [x])
    # above the clamp the numeric derivative is 0 while the rule reports e^C
    with pytest.raises(GradientCheckError) as exc:
        check_gradients(g, {"x": 2.0})
    assert x in exc.value.mismatches


def test_finite_difference_requires_source():
    g, x, sq, *_ = multipath_graph()
    assert finite_difference(g, {x: 1.0}, x) == pytest.approx(2 + np.cos(1.0), abs=1e-6)
    with pytest.raises(GraphError):
        finite_difference(g, {x: 1.0}, sq)


def test_sweep():
    g, x, *_ = multipath_graph()
    xs = np.linspace(-2.0, 2.0, 9)
    values, grads = sweep(g, {x: 0.0}, "x", xs)
    assert values.shape == grads.shape == xs.shape
    assert np.allclose(values, xs ** 2 + np.sin(xs))
    assert np.allclose(grads, 2 * xs + np.cos(xs))


def test_verbose_run_prints_graph(capsys):
    g = Graph(EngineConfig(verbose=True))
    x = g.insert_node(OpKind.INPUT, name="x")
    g.insert_node(OpKind.SQUARE, [x])
    g.run({"x": 3.0})
    out = capsys.readouterr().out
    assert "COMPUTATION GRAPH STRUCTURE" in out
    assert "u²" in out
