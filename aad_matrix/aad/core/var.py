# aad/core/var.py
from __future__ import annotations
import numbers
from typing import Any, Optional

import numpy as np

from .errors import ShapeError
from .node import Node
from . import tape as tape_mod


def _to_matrix(val: Any) -> np.ndarray:
    # Type check: only allow numeric scalars, sequences, or numpy arrays
    if isinstance(val, bool) or not isinstance(val, (numbers.Real, list, tuple, np.ndarray)):
        raise TypeError(
            f"Variable only accepts numeric types (int, float, list, tuple, ndarray), "
            f"but got {type(val)}"
        )
    arr = np.asarray(val, dtype=np.float64)
    if arr.ndim > 2:
        raise ShapeError(f"Variable holds a matrix, got an array with shape {arr.shape}")
    # Scalars become 1x1, vectors become 1xN rows
    return np.array(np.atleast_2d(arr), dtype=np.float64)


def _read_only(arr: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if arr is None:
        return None
    view = arr.view()
    view.flags.writeable = False
    return view


class Variable:
    """
    User-facing handle to one Node of the computation graph.

    Copying a Variable (or assigning it to another name) aliases the same
    node; it never duplicates the computation. Arithmetic builds a new Node
    whose children are the operand nodes and returns a new Variable for it.

    Attributes
    ----------
    node : Node
        The referenced graph node.
    """

    __array_ufunc__ = None  # ndarray <op> Variable defers to our reflected operators

    def __init__(self, val: Any, *, requires_gradient: bool = False, name: Optional[str] = None):
        node = Node(op_tag="leaf", value=_to_matrix(val), name=name)
        if requires_gradient:
            node.set_requires_gradient()
        self.node = tape_mod.record(node)

    @classmethod
    def _from_node(cls, node: Node) -> "Variable":
        self = cls.__new__(cls)
        self.node = node
        return self

    # ---------------- inspection ----------------
    @property
    def value(self) -> np.ndarray:
        return self.node.value

    @property
    def shape(self):
        return self.node.value.shape

    @property
    def gradient(self) -> Optional[np.ndarray]:
        """Read-only view of the accumulated gradient, or None if never allocated."""
        return _read_only(self.node.gradient)

    @property
    def requires_gradient(self) -> bool:
        return self.node.requires_gradient

    @property
    def name(self) -> Optional[str]:
        return self.node.name

    def __repr__(self):
        # Short label: "req" if gradient-tracked, else "const"
        rg = "req" if self.node.requires_gradient else "const"
        return f"Variable({self.node.value.tolist()!r}, {self.node.op_tag}, {rg}, name={self.name!r})"

    # ---------------- gradient state ----------------
    def set_requires_gradient(self):
        """Track gradients on the underlying node and zero its buffer."""
        self.node.set_requires_gradient()
        return self

    def clear_gradient(self):
        """Zero the gradient buffer in place; the graph history is kept."""
        self.node.clear_gradient()
        return self

    def backward(self, *, memoize: bool = False):
        """
        Back-propagate from this 1x1 Variable with seed 1.

        The default traversal recurses once per operation along each path, so
        very long chains (thousands of ops, e.g. a running-sum loss) exceed
        Python's recursion limit. Pass memoize=True for those: it visits each
        node once, iteratively, and gives the same gradients.

        Raises ShapeError when the value is not 1x1.
        """
        from .engine import reverse
        reverse(self, seed=1.0, memoize=memoize)

    # ---------------- comparison (values only) ----------------
    def _other_matrix(self, other) -> Optional[np.ndarray]:
        # Plain values are promoted the way the constructor promotes them
        if isinstance(other, Variable):
            return other.value
        try:
            return np.atleast_2d(np.asarray(other, dtype=np.float64))
        except (TypeError, ValueError):
            return None

    def __eq__(self, other):
        other_val = self._other_matrix(other)
        if other_val is None:
            return NotImplemented
        return bool(np.array_equal(self.node.value, other_val))

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None

    def isclose(self, other, rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        other_val = self._other_matrix(other)
        if other_val is None or other_val.shape != self.shape:
            return False
        return bool(np.allclose(self.node.value, other_val, rtol=rtol, atol=atol))

    # ---------------- graph-building operations ----------------
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __matmul__(self, other):
        from ..ops.arithmetic import matmul
        return matmul(self, other)

    def __rmatmul__(self, other):
        from ..ops.arithmetic import matmul
        return matmul(other, self)

    def matmul(self, other):
        return self @ other

    # Only scalar multiply/divide: there is no elementwise Variable product
    def __mul__(self, other):
        if isinstance(other, bool) or not isinstance(other, numbers.Real):
            return NotImplemented
        from ..ops.arithmetic import scalar_mul
        return scalar_mul(self, other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, bool) or not isinstance(other, numbers.Real):
            return NotImplemented
        from ..ops.arithmetic import scalar_div
        return scalar_div(self, other)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    @property
    def T(self):
        return self.transpose()

    def transpose(self):
        from ..ops.arithmetic import transpose
        return transpose(self)

    def maximum(self, threshold: float = 0.0):
        from ..ops.arithmetic import maximum
        return maximum(self, threshold)

    def relu(self):
        return self.maximum(0.0)

    def norm(self):
        from ..ops.reductions import norm
        return norm(self)

    def sum(self):
        from ..ops.reductions import sum
        return sum(self)

    def mean(self):
        from ..ops.reductions import mean
        return mean(self)
