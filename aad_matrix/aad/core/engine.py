# aad/core/engine.py
from __future__ import annotations
import logging
from typing import Dict, List, Tuple

import numpy as np

from .errors import ShapeError
from .node import Node

logger = logging.getLogger(__name__)


def _as_node(x) -> Node:
    # Variables expose their node; plain Nodes pass through
    return x if isinstance(x, Node) else x.node


# -------- Local backward rules, one arm per op_tag -------- #
def local_gradients(node: Node, g: np.ndarray) -> Tuple[np.ndarray, ...]:
    """
    Return the gradient contribution for each child of `node`, given the
    incoming gradient `g` (same shape as node.value).

    Every rule is linear in `g`, which is what makes the unmemoized
    push-as-you-go traversal in Node.backward correct.

    Supported ops
    -------------
    leaf, add, sub, matmul, transpose, scalar_mul, scalar_div, maximum,
    norm, sum, mean
    """
    tag = node.op_tag

    if tag == "leaf":
        return ()

    # ---------- Elementwise linear ops ----------
    if tag == "add":
        return g, g
    if tag == "sub":
        return g, -g

    # ---------- Matrix product ----------
    if tag == "matmul":
        # y = A B  ->  dA = G Bᵗ,  dB = Aᵗ G
        a, b = node.children
        return g @ b.value.T, a.value.T @ g

    if tag == "transpose":
        return (g.T,)

    # ---------- Scalar ops ----------
    if tag == "scalar_mul":
        return (g * node.scalar,)
    if tag == "scalar_div":
        return (g / node.scalar,)

    # ---------- Elementwise max against a threshold (ReLU for 0) ----------
    if tag == "maximum":
        # Strict mask: the sub-gradient at exactly the threshold is zero.
        (a,) = node.children
        return (g * (a.value > node.scalar),)

    # ---------- Reductions to 1x1 ----------
    if tag == "norm":
        # y = ||A||_F  ->  dA = (G / y) A. No guard for y == 0: inf/NaN propagate.
        (a,) = node.children
        return ((g / node.value) * a.value,)
    if tag == "sum":
        (a,) = node.children
        return (np.full(a.shape, g[0, 0]),)
    if tag == "mean":
        (a,) = node.children
        return (np.full(a.shape, g[0, 0]) / a.value.size,)

    raise ValueError(f"no backward rule for op '{tag}'")


# ---------------- Graph walking ---------------- #
def iter_graph(root) -> List[Node]:
    """
    Unique nodes reachable from `root` in topological order (children first,
    root last). Iterative, so deep graphs do not hit the recursion limit.
    """
    root = _as_node(root)
    order: List[Node] = []
    seen = set()
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if id(node) in seen:
            continue
        seen.add(id(node))
        stack.append((node, True))
        for child in node.children:
            if id(child) not in seen:
                stack.append((child, False))
    return order


def zero_gradients(*roots):
    """
    Zero every allocated gradient buffer reachable from the given roots.
    Nodes that never allocated a buffer are left without one.
    """
    seen = set()
    for root in roots:
        for node in iter_graph(root):
            if id(node) in seen:
                continue
            seen.add(id(node))
            if node.gradient is not None:
                node.gradient.fill(0.0)


# ---------------- Reverse pass ---------------- #
def reverse(output, seed=1.0, *, memoize: bool = False):
    """
    Run a reverse pass from a 1x1 output.

    Args:
        output: Variable or Node whose value is 1x1.
        seed: scalar seed for d output / d output (1.0 for a plain gradient).
        memoize: False (default) uses the naive recursive traversal, which
                 re-walks shared sub-graphs once per path. True visits each
                 node once in topological order; results are identical.

    Raises:
        ShapeError: if the output is not 1x1.
    """
    root = _as_node(output)
    if root.value.shape != (1, 1):
        raise ShapeError(
            f"backward() needs a 1x1 output, got shape {root.value.shape}"
        )
    seed_matrix = np.full((1, 1), float(seed))

    logger.debug("reverse pass from '%s' node (memoize=%s)", root.op_tag, memoize)
    if memoize:
        backward_topological(root, seed_matrix)
    else:
        root.backward(seed_matrix)


def backward_topological(root, seed: np.ndarray):
    """
    Memoized reverse pass: every node reachable from `root` runs its local
    rule once, after all of its incoming contributions are summed. Iterative,
    so it has no recursion-depth bound. `seed` is the 1x1 gradient of the root;
    no 1x1 check is made here (reverse() does that).
    """
    root = _as_node(root)
    order = iter_graph(root)
    pending: Dict[int, np.ndarray] = {id(root): np.asarray(seed, dtype=np.float64)}
    for node in reversed(order):
        g = pending.pop(id(node), None)
        if g is None:
            continue
        if node.requires_gradient:
            if node.gradient is None:
                node.gradient = np.zeros_like(node.value)
            node.gradient += g
        for child, child_grad in zip(node.children, local_gradients(node, g)):
            key = id(child)
            # Not in place: contributions may alias each other (add passes g twice)
            pending[key] = child_grad if key not in pending else pending[key] + child_grad
    logger.debug("topological reverse pass visited %d nodes", len(order))
