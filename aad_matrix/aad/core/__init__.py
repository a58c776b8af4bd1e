# aad/core/__init__.py

"""
Core public API for the AAD package.

This module exposes the minimal set of symbols that users of the AAD framework
should import from `aad.core`. Keeping this surface small makes it easier to
extend internals (e.g. further node kinds) without breaking user code.

Exports:
    Variable       : User-facing handle to a matrix-valued graph node.
    Node           : The graph node itself (value, gradient, children).
    ShapeError     : Raised on shape misuse (non-1x1 backward, bad matmul, ...).
    Tape, use_tape : Optional recording of created nodes for inspection.
    reverse        : Run a reverse pass from a 1x1 output.
    zero_gradients : Zero every gradient buffer reachable from some roots.
    grad, grads    : Convenience: gradient(s) of a 1x1-output function.
    value          : Convenience: extract the matrix value from a Variable.
"""

from .errors import ShapeError
from .node import Node
from .var import Variable
from .tape import Tape, use_tape
from .engine import reverse, backward_topological, zero_gradients, iter_graph
from .seeds import grad, grads, grads_list, value

__all__ = [
    "ShapeError",
    "Node",
    "Variable",
    "Tape", "use_tape",
    "reverse", "backward_topological", "zero_gradients", "iter_graph",
    "grad", "grads", "grads_list", "value",
]
