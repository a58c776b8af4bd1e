"""
Feed-forward network: an ordered sequence of layers, one sample at a time.
"""

import logging
from typing import Iterable, List, Sequence

from ..aad.core.var import Variable
from .layers import Layer
from .nn_config import NNConfig

logger = logging.getLogger(__name__)


class Network:
    """
    Ordered sequence of Layers.

    Example:
        net = Network([Dense(2, 8), Dense(8, 1, activation=None)])
        loss = norm_loss(net.forward(x), y)
        loss.backward()
        net.update_weights(0.01)
    """

    def __init__(self, layers: Sequence[Layer]):
        self.layers: List[Layer] = list(layers)

    def forward(self, x: Variable) -> Variable:
        for layer in self.layers:
            x = layer.forward(x)
        return x

    __call__ = forward

    def predict(self, inputs: Iterable[Variable]) -> List[Variable]:
        """Map forward over the inputs, one sample at a time (no batching)."""
        return [self.forward(x) for x in inputs]

    def parameters(self) -> List[Variable]:
        return [p for layer in self.layers for p in layer.parameters()]

    def update_weights(self, learning_rate: float = NNConfig.DEFAULT_LEARNING_RATE):
        logger.debug("updating %d layers with learning rate %g", len(self.layers), learning_rate)
        for layer in self.layers:
            layer.update_weights(learning_rate)

    def __repr__(self):
        inner = ", ".join(repr(layer) for layer in self.layers)
        return f"Network([{inner}])"
