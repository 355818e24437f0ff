"""
Plain gradient descent: moves each parameter against its gradient at a fixed
learning rate.

    p <- p - learning_rate * ∂f/∂p
"""

import logging
from typing import List, Sequence

from .base import Optimizer
from ..core.engine import Derivatives
from ..core.var import ADVar

logger = logging.getLogger(__name__)


class SimpleGradientDescent(Optimizer):

    def __init__(self, learning_rate: float):
        super().__init__(learning_rate)
        self.name = "SimpleGradientDescent"

    def step(self, derivatives: Derivatives, params: Sequence[ADVar]) -> List[ADVar]:
        updated = []
        for p in params:
            if not p.is_tracked:
                updated.append(p)
                continue
            g = derivatives[p]
            updated.append(p.detached(p.val - self.learning_rate * g))
        logger.debug("%s: updated %d parameters", self.name, len(updated))
        return updated
