# aad/ops/reductions.py
import numpy as np

from .arithmetic import _as_var, _emit


def norm(x):
    """
    Frobenius norm as a 1x1 matrix.

    Backward divides by the norm itself; a zero input yields inf/NaN
    gradients rather than an error.
    """
    x = _as_var(x)
    return _emit("norm", np.array([[np.linalg.norm(x.value)]]), (x,))


def sum(x):
    x = _as_var(x)
    return _emit("sum", np.array([[np.sum(x.value)]]), (x,))


def mean(x):
    x = _as_var(x)
    return _emit("mean", np.array([[np.mean(x.value)]]), (x,))
