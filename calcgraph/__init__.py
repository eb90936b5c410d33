# calcgraph/__init__.py
# Reverse-mode differentiation over an editable graph of scalar operations

from .config import EngineConfig, DEFAULT_CONFIG
from .errors import (
    GraphError,
    ArityMismatch,
    ArityExceeded,
    UnknownNode,
    CyclicGraph,
    MissingBinding,
    GradientCheckError,
)
from .ops import OpKind, Operation, forward, local_gradient
from .core import (
    Node,
    Graph,
    RunResult,
    topological_order,
    evaluate,
    propagate,
    edge_gradients,
    run,
    grad,
    finite_difference,
    check_gradients,
    sweep,
)
from .core.graph_utils import (
    get_graph_stats,
    print_graph_summary,
    print_computation_graph,
    analyze_graph_complexity,
)
from .presets import Preset, PRESETS, build_preset

__all__ = [
    # Config / errors
    'EngineConfig', 'DEFAULT_CONFIG',
    'GraphError', 'ArityMismatch', 'ArityExceeded', 'UnknownNode',
    'CyclicGraph', 'MissingBinding', 'GradientCheckError',
    # Registry
    'OpKind', 'Operation', 'forward', 'local_gradient',
    # Engine
    'Node', 'Graph', 'RunResult',
    'topological_order', 'evaluate', 'propagate', 'edge_gradients', 'run',
    'grad', 'finite_difference', 'check_gradients', 'sweep',
    # Inspection
    'get_graph_stats', 'print_graph_summary', 'print_computation_graph',
    'analyze_graph_complexity',
    # Presets
    'Preset', 'PRESETS', 'build_preset',
]
