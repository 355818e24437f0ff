"""
Optimizers package.

Update rules that consume the Derivatives of one reverse sweep:
1. SimpleGradientDescent: fixed-rate step against the gradient
2. AdamW: Adam with decoupled weight decay
"""

from .base import Optimizer
from .gradient_descent import SimpleGradientDescent
from .adamw import AdamW, AdamWConfig

__all__ = [
    'Optimizer',
    'SimpleGradientDescent',
    'AdamW',
    'AdamWConfig',
]
