"""
Graph inspection helpers.

Summaries of what a Tape has recorded: node kinds, edge counts and fan-out.
Useful for checking that an optimisation loop records the same graph every
iteration (AdamW moments are keyed by tape position).
"""

from collections import Counter
from typing import Dict

import numpy as np

from .tape import Tape


def _node_kind(node, position: int) -> str:
    if node.is_leaf(position):
        return "leaf"
    # unary ops and aliased binaries (x * x) name one parent twice
    if node.left == node.right:
        return "single"
    return "binary"


def get_graph_stats(tape: Tape) -> Dict:
    """
    Collect graph statistics without printing.

    Returns:
        dict with node/edge counts, fan-out figures and a kind breakdown
    """
    n_nodes = len(tape.nodes)
    if n_nodes == 0:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'kinds': {},
            'generation': tape.generation,
        }

    kinds = Counter()
    fan_outs = np.zeros(n_nodes, dtype=int)
    for i, node in enumerate(tape.nodes):
        kind = _node_kind(node, i)
        kinds[kind] += 1
        if kind == "leaf":
            continue
        fan_outs[node.left] += 1
        if kind == "binary":
            fan_outs[node.right] += 1

    return {
        'nodes': n_nodes,
        'edges': int(fan_outs.sum()),
        'leaves': kinds["leaf"],
        'max_fan_out': int(fan_outs.max()),
        'avg_fan_out': float(fan_outs.mean()),
        'kinds': dict(kinds),
        'generation': tape.generation,
    }


def print_graph_summary(tape: Tape, detailed: bool = False, max_nodes: int = 100) -> Dict:
    """
    Print a computation graph summary.

    Args:
        tape: the Tape to inspect
        detailed: also list individual nodes (first `max_nodes`)

    Returns:
        the statistics dict from get_graph_stats()
    """
    stats = get_graph_stats(tape)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "=" * 70)
    print("COMPUTATION GRAPH SUMMARY")
    print("=" * 70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print(f"Generation:         {stats['generation']}")
    print()
    print("Node kinds:")
    for kind, count in sorted(stats['kinds'].items(), key=lambda kv: kv[1], reverse=True):
        pct = 100.0 * count / stats['nodes']
        print(f"  {kind:8s}: {count:6,} ({pct:5.1f}%)")

    if detailed:
        print()
        print("=" * 70)
        print(f"NODE LIST (first {max_nodes} nodes)")
        print("=" * 70)
        for i, node in enumerate(tape.nodes[:max_nodes]):
            kind = _node_kind(node, i)
            if kind == "leaf":
                print(f"Node {i:4d}: leaf")
            elif kind == "single":
                print(f"Node {i:4d}: single <- [Node{node.left}] d={node.dleft:.6g}")
            else:
                print(f"Node {i:4d}: binary <- [Node{node.left}, Node{node.right}] "
                      f"d=({node.dleft:.6g}, {node.dright:.6g})")
        if len(tape.nodes) > max_nodes:
            print(f"... ({len(tape.nodes) - max_nodes} more nodes)")

    print("=" * 70 + "\n")
    return stats
