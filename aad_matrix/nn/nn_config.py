"""
Network Configuration Utilities

Shared defaults and helper functions for network layers.
Provides Glorot (Xavier) initialisation of dense weight matrices.
"""

import numpy as np
from typing import Optional


class NNConfig:
    """Shared configuration for layers and networks"""

    DEFAULT_LEARNING_RATE = 0.01

    @staticmethod
    def glorot_limit(fan_in: int, fan_out: int) -> float:
        """
        Half-width of the Glorot uniform distribution

        Theory:
            Keeping Var(W) = 2 / (fan_in + fan_out) balances the variance of
            activations in the forward pass and of gradients in the backward
            pass. For U(-a, a), Var = a² / 3, hence:
            a = sqrt(6 / (fan_in + fan_out))

        Args:
            fan_in: Number of inputs to the layer
            fan_out: Number of outputs of the layer

        Returns:
            limit: a such that weights are drawn from U(-a, a)

        Example:
            fan_in=2, fan_out=4: limit = 1.0
        """
        if fan_in <= 0 or fan_out <= 0:
            raise ValueError(f"fan_in and fan_out must be positive, got {fan_in}, {fan_out}")
        return float(np.sqrt(6.0 / (fan_in + fan_out)))

    @staticmethod
    def glorot_uniform(fan_in: int, fan_out: int,
                       rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """
        Sample a (fan_out x fan_in) weight matrix from U(-limit, limit)

        Args:
            fan_in: Number of inputs (matrix columns)
            fan_out: Number of outputs (matrix rows)
            rng: Random generator (default: np.random.default_rng())

        Returns:
            weights: ndarray of shape (fan_out, fan_in)
        """
        rng = rng if rng is not None else np.random.default_rng()
        limit = NNConfig.glorot_limit(fan_in, fan_out)
        return rng.uniform(-limit, limit, size=(fan_out, fan_in))
