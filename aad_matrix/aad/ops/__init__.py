# aad/ops/__init__.py

# Convenience re-exports so users can do: from aad_matrix.aad.ops import matmul, norm, ...
from .arithmetic import (
    add, sub, matmul, transpose, maximum, relu, scalar_mul, scalar_div, neg,
)
from .reductions import norm, sum, mean

__all__ = [
    "add", "sub", "matmul", "transpose", "maximum", "relu",
    "scalar_mul", "scalar_div", "neg",
    "norm", "sum", "mean",
]
