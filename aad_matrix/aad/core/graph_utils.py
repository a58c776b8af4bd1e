"""
Computation-graph utilities
Print and analyse the structure of an AAD graph, either as recorded on a
Tape or as reachable from a root Variable/Node.
"""

import numpy as np
from typing import Dict, List
from collections import Counter

from .node import Node
from .tape import Tape
from .engine import iter_graph


def _graph_nodes(source) -> List[Node]:
    if isinstance(source, Tape):
        return list(source.nodes)
    return iter_graph(source)


def get_graph_stats(source) -> Dict:
    """
    Collect graph statistics (no printing)

    Args:
        source: a Tape, or a root Variable/Node

    Returns:
        Dictionary of statistics
    """
    nodes = _graph_nodes(source)
    if not nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(nodes)
    index = {id(node): i for i, node in enumerate(nodes)}
    n_edges = sum(len(node.children) for node in nodes)

    # fan-in: operands of each node
    fan_ins = [len(node.children) for node in nodes]

    # fan-out: consumers of each node within this node set
    fan_outs = [0] * n_nodes
    for node in nodes:
        for child in node.children:
            i = index.get(id(child))
            if i is not None:
                fan_outs[i] += 1

    op_counter = Counter(node.op_tag for node in nodes)

    return {
        'nodes': n_nodes,
        'edges': n_edges,
        'leaves': op_counter.get('leaf', 0),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(source, detailed: bool = False) -> Dict:
    """
    Print a summary of the computation graph

    Args:
        source: a Tape, or a root Variable/Node
        detailed: also print the node list (graphs of up to 100 nodes)

    Returns:
        The statistics dictionary from get_graph_stats
    """
    stats = get_graph_stats(source)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print_computation_graph(source, max_nodes=100)
    else:
        print("="*70 + "\n")

    return stats


def print_computation_graph(source, max_nodes: int = 20) -> None:
    """
    Print the graph structure, one node per line

    Args:
        source: a Tape, or a root Variable/Node
        max_nodes: maximum number of nodes to print
    """
    print("\n" + "="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    nodes = _graph_nodes(source)
    if not nodes:
        print("Empty graph")
        return

    index = {id(node): i for i, node in enumerate(nodes)}
    n_show = min(len(nodes), max_nodes)

    for i, node in enumerate(nodes[:n_show]):
        shape = "x".join(str(d) for d in node.shape)
        if node.children:
            parent_info = ", ".join(
                f"Node{index[id(c)]}" if id(c) in index else "external"
                for c in node.children
            )
            print(f"Node {i:4d}: {node.op_tag:12s} ({shape:>9s}) <- [{parent_info}]")
        else:
            label = node.name or "leaf/input"
            print(f"Node {i:4d}: {node.op_tag:12s} ({shape:>9s}) [{label}]")

    if len(nodes) > max_nodes:
        print(f"... ({len(nodes) - max_nodes} more nodes)")

    print("="*70 + "\n")
