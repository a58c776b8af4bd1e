# aad_matrix/__init__.py
# Reverse-mode matrix AAD and a small feed-forward network built on it

from .aad import (
    ShapeError,
    Variable,
    reverse,
    zero_gradients,
    grad,
    grads,
    check_gradient,
)
from .nn import Dense, Network, norm_loss

__version__ = "0.1.0"

__all__ = [
    'ShapeError',
    'Variable',
    'reverse',
    'zero_gradients',
    'grad',
    'grads',
    'check_gradient',
    'Dense',
    'Network',
    'norm_loss',
]
