# aad/core/tape.py
from __future__ import annotations
from typing import List, Optional
from contextlib import contextmanager
from .node import Node


class Tape:
    """
    Records Nodes in creation order while it is the active tape.

    The graph does not need a tape to work: nodes own their children directly.
    A tape only exists for inspection (see graph_utils), and it keeps every
    recorded node alive until `reset()` or until the tape itself is dropped.
    """
    def __init__(self):
        self.nodes: List[Node] = []

    def reset(self):
        for node in self.nodes:
            node._tape_idx = None
        self.nodes.clear()

    def push_node(self, node: Node) -> int:
        """Append `node` to the tape and return its index."""
        node._tape_idx = len(self.nodes)
        self.nodes.append(node)
        return node._tape_idx

    def __len__(self):
        return len(self.nodes)


# No tape is active by default, so nothing is recorded.
global_tape: Optional[Tape] = None


def record(node: Node) -> Node:
    """Push `node` onto the active tape, if there is one."""
    if global_tape is not None:
        global_tape.push_node(node)
    return node


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily record onto a (fresh) tape:
        with use_tape() as tape:
            ... build computation ...
            print_graph_summary(tape)
    """
    from . import tape as _tape_mod  # local import to avoid cycles
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
