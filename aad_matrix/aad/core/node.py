# aad/core/node.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .errors import ShapeError


@dataclass(eq=False)
class Node:
    """
    One matrix-valued node of the computation graph.

    Attributes
    ----------
    op_tag : str
        Operation kind ("leaf", "add", "matmul", ...). The engine dispatches
        the backward rule on this tag.
    value : np.ndarray
        2-D float64 result of the operation, computed once at construction.
    children : Tuple[Node, ...]
        Operand nodes. These are owning references: a node keeps its operands
        alive after the Variables that built them are gone.
    scalar : Optional[float]
        Scalar operand of scalar_mul / scalar_div, threshold of maximum.
    requires_gradient : bool
        Whether this node accumulates its own gradient buffer.
    gradient : Optional[np.ndarray]
        Accumulator, same shape as value; allocated lazily.
    name : Optional[str]
        Optional debug name.
    """
    op_tag: str
    value: np.ndarray
    children: Tuple["Node", ...] = ()
    scalar: Optional[float] = None
    requires_gradient: bool = False
    gradient: Optional[np.ndarray] = None
    name: Optional[str] = None
    _tape_idx: Optional[int] = field(default=None, repr=False)

    def __post_init__(self):
        self.value = np.asarray(self.value, dtype=np.float64)
        self.value.flags.writeable = False

    @property
    def shape(self) -> Tuple[int, int]:
        return self.value.shape

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def set_requires_gradient(self):
        self.requires_gradient = True
        self.clear_gradient()

    def clear_gradient(self):
        """Zero the gradient buffer in place, allocating it on first use."""
        if self.gradient is None:
            self.gradient = np.zeros_like(self.value)
        else:
            self.gradient.fill(0.0)

    def backward(self, incoming: np.ndarray):
        """
        Accumulate `incoming` (d loss / d value along one path) and push the
        derived contributions to every child straight away.
        """
        from .engine import local_gradients

        incoming = np.asarray(incoming, dtype=np.float64)
        if incoming.shape != self.value.shape:
            raise ShapeError(
                f"gradient of shape {incoming.shape} pushed into '{self.op_tag}' "
                f"node of shape {self.value.shape}"
            )

        if self.requires_gradient:
            if self.gradient is None:
                self.gradient = np.zeros_like(self.value)
            self.gradient += incoming

        for child, child_grad in zip(self.children, local_gradients(self, incoming)):
            child.backward(child_grad)
