# aad/__init__.py
# Reverse-mode automatic differentiation over matrices

from .core.errors import ShapeError
from .core.node import Node
from .core.var import Variable
from .core.tape import Tape, use_tape
from .core.engine import reverse, backward_topological, zero_gradients, iter_graph
from .core.seeds import grad, grads, grads_list, value
from .core.gradcheck import check_gradient, GradCheckResult
from .core.graph_utils import get_graph_stats, print_graph_summary, print_computation_graph

# Ensure the operator modules are importable from the package
from . import ops

__all__ = [
    # Core
    'ShapeError',
    'Node',
    'Variable',
    'Tape',
    'use_tape',
    # Engine
    'reverse',
    'backward_topological',
    'zero_gradients',
    'iter_graph',
    # Seeds
    'grad',
    'grads',
    'grads_list',
    'value',
    # Checks and inspection
    'check_gradient',
    'GradCheckResult',
    'get_graph_stats',
    'print_graph_summary',
    'print_computation_graph',
    'ops',
]
