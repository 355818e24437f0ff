"""
AdamW: Adam with decoupled weight decay.

Per step, for learning rate lr, decay λ and gradient vector g (every tape
position, not only the parameters):

    p   <- p - (lr * λ) * p                      (skipped when λ == 0)
    m1  <- β1 * m1 + (1 - β1) * g
    m2  <- β2 * m2 + (1 - β2) * g²
    m̂1  =  m1 / (1 - β1^t)
    m̂2  =  m2 / (1 - β2^t)
    p   <- p - lr * m̂1[pos] / (sqrt(m̂2[pos]) + ε)
    t   <- t + 1

Moments are keyed by tape position, not by parameter. They stay aligned with
the parameters only while every iteration registers the parameters in the
same order and records the same number of nodes (tape.reset() then
p.reset() for each parameter, then an expression of fixed shape).
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .base import Optimizer
from ..core.engine import Derivatives
from ..core.var import ADVar

logger = logging.getLogger(__name__)


@dataclass
class AdamWConfig:
    """Hyperparameters for AdamW."""
    learning_rate: float
    beta1: float = 0.9
    beta2: float = 0.999
    epsilon: float = 1e-8
    weight_decay: float = 0.01


class AdamW(Optimizer):
    """
    Usage:
        >>> tape = Tape()
        >>> x, y = ADVar.variable(3.41, tape), ADVar.variable(2.0, tape)
        >>> opt = AdamW.default(0.001)
        >>> for _ in range(1000):
        ...     tape.reset(); x.reset(); y.reset()
        ...     z = (1.0 - x) ** 2 + 100.0 * (y - x ** 2) ** 2
        ...     x, y = opt.step(z.backward(), [x, y])
    """

    def __init__(self, config: AdamWConfig):
        super().__init__(config.learning_rate)
        self.name = "AdamW"
        self.config = config
        self.beta1 = config.beta1
        self.beta2 = config.beta2
        self.epsilon = config.epsilon
        self.weight_decay = config.weight_decay
        self.t = 1
        self.first_moment = np.zeros(0)
        self.second_moment = np.zeros(0)

    @classmethod
    def default(cls, learning_rate: float) -> "AdamW":
        return cls(AdamWConfig(learning_rate=learning_rate))

    def reset_state(self):
        """Forget the moment estimates and restart bias correction."""
        self.t = 1
        self.first_moment = np.zeros(0)
        self.second_moment = np.zeros(0)

    def _ensure_moments(self, n: int, dtype):
        if len(self.first_moment) == 0:
            self.first_moment = np.zeros(n, dtype=dtype)
            self.second_moment = np.zeros(n, dtype=dtype)
            logger.debug("AdamW: allocated moments for %d tape positions", n)
        elif len(self.first_moment) < n:
            extra = n - len(self.first_moment)
            self.first_moment = np.concatenate([self.first_moment, np.zeros(extra, dtype=dtype)])
            self.second_moment = np.concatenate([self.second_moment, np.zeros(extra, dtype=dtype)])
            logger.warning(
                "AdamW: tape grew from %d to %d positions; moments no longer line up "
                "with a fixed parameter layout", n - extra, n
            )

    def step(self, derivatives: Derivatives, params: Sequence[ADVar]) -> List[ADVar]:
        lr = self.learning_rate

        # positions are read before any update; the decay never changes them
        tracked = [p.is_tracked for p in params]
        positions = [p.position if is_tracked else None for p, is_tracked in zip(params, tracked)]
        for p, is_tracked in zip(params, tracked):
            if is_tracked:
                derivatives[p]  # rejects stale values and out-of-range positions

        values = [p.val for p in params]
        if self.weight_decay != 0:
            values = [
                v - (lr * self.weight_decay) * v if is_tracked else v
                for v, is_tracked in zip(values, tracked)
            ]

        g = derivatives.as_array()
        n = len(g)
        self._ensure_moments(n, g.dtype)

        self.first_moment[:n] = self.beta1 * self.first_moment[:n] + (1 - self.beta1) * g
        self.second_moment[:n] = self.beta2 * self.second_moment[:n] + (1 - self.beta2) * g * g

        m1_hat = self.first_moment[:n] / (1 - self.beta1 ** self.t)
        m2_hat = self.second_moment[:n] / (1 - self.beta2 ** self.t)

        updated = []
        for p, v, pos in zip(params, values, positions):
            if pos is None:
                updated.append(p)
                continue
            updated.append(p.detached(v - lr * m1_hat[pos] / (np.sqrt(m2_hat[pos]) + self.epsilon)))

        logger.debug("AdamW: step t=%d over %d tape positions, %d parameters", self.t, n, len(updated))
        self.t += 1
        return updated
