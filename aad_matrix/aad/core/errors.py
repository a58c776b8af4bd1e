# aad/core/errors.py


class ShapeError(ValueError):
    """
    Raised when matrix shapes do not fit an operation.

    Covers a backward pass started from a non-1x1 root, incompatible operands
    for matrix multiplication or elementwise combination, and gradients pushed
    into a node with the wrong shape.
    """
