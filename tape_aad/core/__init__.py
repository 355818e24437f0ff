# tape_aad/core/__init__.py

"""
Core public API for the AAD package.

Exports:
    Tape          : Append-only Wengert list shared by every value built on it.
    Node          : One recorded operation (parent positions + local partials).
    ADVar         : Constant or tracked scalar; records ops as they execute.
    Derivatives   : Output of one reverse sweep, looked up by ADVar.
    reverse       : The reverse sweep over a tape, seeded at one position.
"""

from .node import Node
from .tape import Tape
from .var import ADVar
from .engine import Derivatives, reverse
from .graph_utils import get_graph_stats, print_graph_summary

__all__ = [
    "Node", "Tape", "ADVar",
    "Derivatives", "reverse",
    "get_graph_stats", "print_graph_summary",
]
