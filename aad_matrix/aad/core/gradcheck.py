# aad/core/gradcheck.py
"""
Finite-difference cross-check of reverse-mode gradients.

The numeric side uses scipy.optimize.approx_fprime over the flattened input,
so it shares no code with the engine it is checking.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from scipy.optimize import approx_fprime

from .var import Variable
from .seeds import grad, value


@dataclass
class GradCheckResult:
    analytic: np.ndarray
    numeric: np.ndarray
    max_abs_error: float
    passed: bool


def check_gradient(f: Callable[[Variable], Variable], x0: Any,
                   epsilon: float = 1e-6, rtol: float = 1e-4,
                   atol: float = 1e-6) -> GradCheckResult:
    """
    Compare grad(f, x0) against forward differences.

    Args:
        f: function of one Variable returning a 1x1 Variable.
        x0: point to check at (matrix-like).
        epsilon: finite-difference step.
        rtol, atol: tolerances passed to np.allclose.
    """
    analytic = grad(f, x0)
    shape = analytic.shape
    x_flat = np.array(value(x0), dtype=np.float64).reshape(-1)

    def f_flat(x):
        return float(f(Variable(x.reshape(shape))).value[0, 0])

    numeric = approx_fprime(x_flat, f_flat, epsilon).reshape(shape)
    max_abs_error = float(np.max(np.abs(analytic - numeric))) if analytic.size else 0.0
    passed = bool(np.allclose(analytic, numeric, rtol=rtol, atol=atol))
    return GradCheckResult(analytic=analytic, numeric=numeric,
                           max_abs_error=max_abs_error, passed=passed)
