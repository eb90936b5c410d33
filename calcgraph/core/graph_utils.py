"""
Graph inspection utilities.
Print and analyze the structure of a computation graph.
"""

import numpy as np
from typing import Dict, Optional
from collections import Counter

from ..ops import label, derivative_label


def get_graph_stats(graph) -> Dict:
    """
    Collect graph statistics (no printing).

    Returns:
        dict with node/edge counts, fan-in/fan-out max and mean, and the
        number of nodes per operation kind
    """
    if len(graph) == 0:
        return {
            'nodes': 0,
            'edges': 0,
            'sources': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(graph)
    n_edges = len(graph.edges())

    # fan-in: input slots actually wired
    fan_ins = [len(node.inputs) for node in graph]

    # fan-out: number of distinct consumers
    fan_outs = Counter()
    for node in graph:
        for src in set(node.inputs):
            fan_outs[src] += 1
    fan_outs = [fan_outs[nid] for nid in graph.ids()]

    op_counter = Counter(node.op.kind.value for node in graph)

    return {
        'nodes': n_nodes,
        'edges': n_edges,
        'sources': len(graph.sources()),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(graph, detailed: bool = False) -> Dict:
    """
    Print a summary of the graph.

    Args:
        graph: Graph instance
        detailed: also print one line per node

    Returns:
        the statistics dict from get_graph_stats
    """
    if len(graph) == 0:
        print("Empty computation graph")
        return {}

    stats = get_graph_stats(graph)

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Source nodes:       {stats['sources']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed:
        print()
        for node in graph:
            parent_info = ", ".join(f"Node{i}" for i in node.inputs)
            print(f"Node {node.id:3d}: {str(node.op):24s} <- [{parent_info}]")

    print("="*70 + "\n")

    return stats


def print_computation_graph(graph, result=None, max_nodes: int = 20) -> None:
    """
    Print the graph one node per line, in topological order when a RunResult
    is given (with forward value and gradient), else in insertion order.

    Args:
        graph: Graph instance
        result: optional RunResult from run()
        max_nodes: print at most this many nodes
    """
    print("\n" + "="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    if len(graph) == 0:
        print("Empty graph")
        return

    order = result.order if result is not None and result.order else graph.ids()
    n_show = min(len(order), max_nodes)

    for nid in order[:n_show]:
        node = graph.node(nid)
        head = f"Node {nid:4d}: {node.label:12s} {label(node.op):10s}"
        if result is not None:
            head += f" val={result.values[nid]:10.6f} grad={result.gradients[nid]:10.6f}"

        if node.inputs:
            parent_info = ", ".join(f"Node{i}" for i in node.inputs)
            print(f"{head} <- [{parent_info}]  d/du: {derivative_label(node.op)}")
        else:
            print(f"{head} [leaf/input]")

    if len(order) > max_nodes:
        print(f"... ({len(order) - max_nodes} more nodes)")

    print("="*70 + "\n")


def analyze_graph_complexity(graph) -> str:
    """
    Short text report on graph size and shape.

    Returns:
        multi-line report string
    """
    stats = get_graph_stats(graph)

    if stats['nodes'] == 0:
        return "Empty computation graph"

    report = []
    report.append("Graph Complexity Analysis:")
    report.append(f"  Total operations: {stats['nodes']:,}")
    report.append(f"  Total connections: {stats['edges']:,}")
    report.append(f"  Average branching: {stats['avg_fan_out']:.2f}")

    # a node feeding several consumers needs its gradient contributions summed
    if stats['max_fan_out'] > 1:
        report.append("  Shape: multi-path (fan-out present)")
    else:
        report.append("  Shape: single-path chain/tree")

    top_ops = sorted(stats['operations'].items(), key=lambda x: x[1], reverse=True)[:3]
    report.append("  Top operations:")
    for op, count in top_ops:
        pct = 100.0 * count / stats['nodes']
        report.append(f"    - {op}: {pct:.1f}%")

    return "\n".join(report)
