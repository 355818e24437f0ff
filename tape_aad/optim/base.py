"""
Base abstract class for parameter update rules.

An optimizer consumes the Derivatives of one reverse sweep and returns the
updated parameters:

    params = optimizer.step(z.backward(), params)

Returned values keep their tape but are detached (no recorded node). The
driving loop re-registers them with reset() after tape.reset(), before the
next graph is built:

    tape.reset()
    for p in params:
        p.reset()

Constant parameters are returned unchanged.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..core.engine import Derivatives
from ..core.var import ADVar


class Optimizer(ABC):
    """
    Abstract base class for all optimizers.

    Attributes:
        learning_rate (float): Step size
        name (str): Name of the update rule
    """

    def __init__(self, learning_rate: float):
        self.learning_rate = learning_rate
        self.name = "Base"

    @abstractmethod
    def step(self, derivatives: Derivatives, params: Sequence[ADVar]) -> List[ADVar]:
        """
        Compute one update.

        Args:
            derivatives: output of backward() on the objective
            params: parameters, registered in the same tape generation

        Returns:
            new list of parameters, in the order given
        """
        pass

    def __repr__(self):
        return f"{self.name}(learning_rate={self.learning_rate})"
