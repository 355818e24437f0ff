# tape_aad/__init__.py
# Tape-based reverse-mode automatic differentiation with gradient optimizers

from .core.node import Node
from .core.tape import Tape
from .core.var import ADVar
from .core.engine import Derivatives, reverse
from .core.graph_utils import get_graph_stats, print_graph_summary

from . import ops
from .ops import exp, ln, sqrt, sign, powi

from .optim import Optimizer, SimpleGradientDescent, AdamW, AdamWConfig

__version__ = "0.1.0"

__all__ = [
    # Core
    'Node',
    'Tape',
    'ADVar',
    'Derivatives',
    'reverse',
    'get_graph_stats',
    'print_graph_summary',
    # Ops
    'ops',
    'exp',
    'ln',
    'sqrt',
    'sign',
    'powi',
    # Optimizers
    'Optimizer',
    'SimpleGradientDescent',
    'AdamW',
    'AdamWConfig',
]
