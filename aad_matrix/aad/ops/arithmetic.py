# aad/ops/arithmetic.py
import numbers

import numpy as np

from ..core.errors import ShapeError
from ..core.node import Node
from ..core.var import Variable
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility


def _as_var(x):
    """Ensure x is a Variable; otherwise wrap it as a constant leaf."""
    return x if isinstance(x, Variable) else Variable(x, requires_gradient=False)


def _as_scalar(s, tag):
    if isinstance(s, bool) or not isinstance(s, numbers.Real):
        raise TypeError(f"{tag} expects a real scalar, got {type(s).__name__}")
    return float(s)


def _emit(tag, value, children, scalar=None):
    """Build the Node for one primitive, record it and wrap it in a Variable."""
    node = Node(op_tag=tag, value=value,
                children=tuple(c.node for c in children), scalar=scalar)
    tape_mod.record(node)
    return Variable._from_node(node)


def _elementwise(x, y, f, tag):
    """
    Generic elementwise binary primitive. Operands must have equal shapes:
    broadcasting would break gradient.shape == value.shape on the smaller one.
    """
    x = _as_var(x)
    y = _as_var(y)
    if x.shape != y.shape:
        raise ShapeError(f"{tag}: operand shapes {x.shape} and {y.shape} differ")
    return _emit(tag, f(x.value, y.value), (x, y))


def add(x, y): return _elementwise(x, y, lambda a, b: a + b, "add")
def sub(x, y): return _elementwise(x, y, lambda a, b: a - b, "sub")


def matmul(x, y):
    """Matrix product x·y; incompatible inner dimensions raise ShapeError."""
    x = _as_var(x)
    y = _as_var(y)
    try:
        out = x.value @ y.value
    except ValueError as exc:
        raise ShapeError(f"matmul: cannot multiply {x.shape} by {y.shape}") from exc
    return _emit("matmul", out, (x, y))


def transpose(x):
    x = _as_var(x)
    return _emit("transpose", x.value.T, (x,))


def maximum(x, threshold=0.0):
    """
    Elementwise max(x, threshold); with the default threshold this is ReLU.
    Backward passes gradient only where x > threshold (strictly).
    """
    x = _as_var(x)
    t = _as_scalar(threshold, "maximum")
    return _emit("maximum", np.maximum(x.value, t), (x,), scalar=t)


def relu(x):
    return maximum(x, 0.0)


def scalar_mul(x, s):
    x = _as_var(x)
    s = _as_scalar(s, "scalar_mul")
    return _emit("scalar_mul", x.value * s, (x,), scalar=s)


def scalar_div(x, s):
    x = _as_var(x)
    s = _as_scalar(s, "scalar_div")
    return _emit("scalar_div", x.value / s, (x,), scalar=s)


def neg(x):
    """Unary negation, expressed as a scalar multiply by -1."""
    return scalar_mul(x, -1.0)
