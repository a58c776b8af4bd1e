# aad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the 1x1 output and let gradients grow
# backwards through the graph.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List

import numpy as np

from .errors import ShapeError
from .var import Variable
from .engine import reverse


def value(x: Any) -> Any:
    """Return the matrix value of a Variable; pass through plain values unchanged."""
    return x.value if isinstance(x, Variable) else x


def _leaf(v: Any, *, name: str) -> Variable:
    """Fresh gradient-tracked leaf holding the value of `v`."""
    return Variable(np.array(value(v), dtype=np.float64), requires_gradient=True, name=name)


def _check_output(y: Any, who: str) -> Variable:
    if not isinstance(y, Variable):
        raise TypeError(f"{who} expects f to return a Variable, got {type(y).__name__}")
    if y.shape != (1, 1):
        raise ShapeError(f"{who} expects a 1x1 output, got shape {y.shape}")
    return y


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Variable], Variable], x0: Any) -> np.ndarray:
    """
    Gradient of a 1x1-output function y=f(x) at x0 (single input).
    Runs one reverse pass on a freshly built graph.
    """
    x = _leaf(x0, name="x")
    y = _check_output(f(x), "grad(f, x0)")
    reverse(y, seed=1.0)
    return np.array(x.node.gradient)


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Variable]], Variable],
          inputs: Dict[str, Any]) -> Dict[str, np.ndarray]:
    """
    Gradient of a 1x1-output function y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE reverse pass to obtain all dy/dvar simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: Variable} and returning a 1x1 Variable
    inputs  : dict {name: matrix-like}

    Returns
    -------
    dict {name: ndarray}  # gradients in the same key order as `inputs`
    """
    xs: Dict[str, Variable] = {k: _leaf(v, name=k) for k, v in inputs.items()}
    y = _check_output(f(xs), "grads(f, inputs)")
    reverse(y, seed=1.0)
    return {k: np.array(xs[k].node.gradient) for k in inputs.keys()}


def grads_list(f: Callable[[List[Variable]], Variable],
               x0_list: Iterable[Any]) -> List[np.ndarray]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of gradients in the same order.

    Example
    -------
    f = lambda xs: (xs[0] @ xs[1]).sum()
    grads_list(f, [[[1.0, 2.0]], [[3.0], [4.0]]]) -> [[[3., 4.]], [[1.], [2.]]]
    """
    xs = [_leaf(v, name=f"x{i}") for i, v in enumerate(x0_list)]
    y = _check_output(f(xs), "grads_list(f, x0_list)")
    reverse(y, seed=1.0)
    return [np.array(x.node.gradient) for x in xs]
