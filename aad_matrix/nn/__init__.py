# nn/__init__.py
# Small feed-forward networks on top of the AAD engine

from .nn_config import NNConfig
from .layers import Layer, Dense
from .network import Network
from .losses import norm_loss

__all__ = [
    'NNConfig',
    'Layer',
    'Dense',
    'Network',
    'norm_loss',
]
