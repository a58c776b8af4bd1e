"""
Layers built on top of the AAD engine.

A layer is a pure function from a Variable to a new graph fragment, plus a
set of owned parameter Variables that can be replaced by a gradient step.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..aad.core.var import Variable
from .nn_config import NNConfig


_ACTIVATIONS = ("relu", None)


class Layer(ABC):
    """
    Abstract base class for all layers.

    Subclasses own their parameters as gradient-tracked leaf Variables.
    """

    @abstractmethod
    def forward(self, x: Variable) -> Variable:
        """
        Build the graph fragment for one sample.

        Args:
            x: Input Variable

        Returns:
            Output Variable; operands are left untouched
        """
        pass

    @abstractmethod
    def parameters(self) -> List[Variable]:
        pass

    @abstractmethod
    def update_weights(self, learning_rate: float):
        """
        Replace every parameter p by a fresh tracked leaf holding
        p - learning_rate * grad(p), with a zero gradient.
        """
        pass

    def __call__(self, x: Variable) -> Variable:
        return self.forward(x)

    @staticmethod
    def _stepped(param: Variable, learning_rate: float) -> Variable:
        # Value replacement: the old leaf stays valid for graphs that still use it
        grad = param.node.gradient
        new_value = param.value if grad is None else param.value - learning_rate * grad
        return Variable(new_value, requires_gradient=True, name=param.name)


class Dense(Layer):
    """
    Fully connected layer acting on column vectors: act(W x + b).

    Attributes:
        weights (Variable): (output_size x input_size), Glorot-uniform
        bias (Variable): (output_size x 1), zeros
        activation (str | None): "relu" or None for a linear layer
    """

    def __init__(self, input_size: int, output_size: int,
                 activation: Optional[str] = "relu",
                 rng: Optional[np.random.Generator] = None):
        """
        Args:
            input_size: Length of the input column vector
            output_size: Length of the output column vector
            activation: "relu" or None
            rng: Random generator used for the weight initialisation
        """
        if activation not in _ACTIVATIONS:
            raise ValueError(f"unknown activation {activation!r}; expected one of {_ACTIVATIONS}")
        self.input_size = input_size
        self.output_size = output_size
        self.activation = activation
        self.weights = Variable(NNConfig.glorot_uniform(input_size, output_size, rng),
                                requires_gradient=True, name="W")
        self.bias = Variable(np.zeros((output_size, 1)), requires_gradient=True, name="b")

    def forward(self, x: Variable) -> Variable:
        out = self.weights @ x + self.bias
        if self.activation == "relu":
            out = out.relu()
        return out

    def parameters(self) -> List[Variable]:
        return [self.weights, self.bias]

    def update_weights(self, learning_rate: float):
        self.weights = self._stepped(self.weights, learning_rate)
        self.bias = self._stepped(self.bias, learning_rate)

    def __repr__(self):
        return f"Dense({self.input_size} -> {self.output_size}, activation={self.activation})"
