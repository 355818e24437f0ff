# tape_aad/core/tape.py
from __future__ import annotations
import logging
from typing import List

import numpy as np

from .node import Node

logger = logging.getLogger(__name__)


class Tape:
    """
    Wengert list: records Nodes in forward order.

    Positions are dense and assigned in creation order, and every parent
    position is <= the position of the node that references it. Any number
    of ADVars may hold the same Tape; all of them append to one node list.

    `generation` is bumped on every reset(). ADVars remember the generation
    they were registered in, which lets stale positions be rejected.
    """
    def __init__(self, dtype=np.float64):
        self.dtype = np.dtype(dtype)
        self.nodes: List[Node] = []
        self.generation = 0

    def __len__(self):
        return len(self.nodes)

    def __repr__(self):
        return f"Tape(nodes={len(self.nodes)}, dtype={self.dtype.name}, generation={self.generation})"

    @property
    def zero(self):
        return self.dtype.type(0)

    @property
    def one(self):
        return self.dtype.type(1)

    def reset(self):
        """
        Drop every recorded node. Positions restart at 0; every ADVar registered
        before this call must be reset() before it is used again.
        """
        released = len(self.nodes)
        self.nodes.clear()
        self.generation += 1
        logger.debug("tape reset: released %d nodes (generation %d)", released, self.generation)

    def register_leaf(self, seed=None) -> int:
        """Append a self-referential leaf seeded with `seed` (zero by default)."""
        position = len(self.nodes)
        if seed is None:
            seed = self.zero
        self.nodes.append(Node.leaf(position, self.dtype.type(seed)))
        return position

    def record(self, left: int, dleft, right: int = None, dright=None) -> int:
        """
        Append a general node and return its position.

        With `right` omitted this is a unary record: right = left and
        dright = 0, so the two-parent update in the sweep adds a single
        contribution.
        """
        if right is None:
            node = Node.unary(left, self.dtype.type(dleft), self.zero)
        else:
            node = Node.binary(left, self.dtype.type(dleft), right, self.dtype.type(dright))
        self.nodes.append(node)
        return len(self.nodes) - 1
