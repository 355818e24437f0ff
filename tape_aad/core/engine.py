# tape_aad/core/engine.py
from __future__ import annotations
import numpy as np
from typing import Optional

from .tape import Tape


def reverse(tape: Tape, position: int) -> np.ndarray:
    """
    Run a single reverse pass seeded at `position`.

    For each node i, from the last recorded down to 0:
        grad[left]  += grad[i] * dleft
        grad[right] += grad[i] * dright

    Parents always sit at lower (or, for leaves, equal) positions, so grad[i]
    has received every contribution from its consumers by the time node i is
    visited. No topological sort and no visited set are needed.
    """
    nodes = tape.nodes
    grad = np.zeros(len(nodes), dtype=tape.dtype)
    grad[position] = tape.one

    for i in range(len(nodes) - 1, -1, -1):
        node = nodes[i]
        g = grad[i]
        grad[node.left] += g * node.dleft
        grad[node.right] += g * node.dright
    return grad


class Derivatives:
    """
    Result of one backward sweep: ∂output/∂(every recorded position).

    Look entries up with the ADVar that owns the position:
        d = y.backward()
        d[x]

    The vector belongs to the tape generation it was computed in; looking it up
    with a value registered after a tape reset is rejected.
    """
    __slots__ = ("_values", "_generation")

    def __init__(self, values: np.ndarray, generation: Optional[int] = None):
        values = np.asarray(values)
        values.setflags(write=False)
        self._values = values
        self._generation = generation

    @classmethod
    def empty(cls) -> "Derivatives":
        return cls(np.zeros(0, dtype=np.float64))

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"Derivatives({self._values!r})"

    def __getitem__(self, var):
        from .var import ADVar
        if not isinstance(var, ADVar):
            raise TypeError(
                f"Derivatives are looked up by ADVar, not {type(var).__name__}"
            )
        if not var.is_tracked:
            raise TypeError("a constant has no tape position; its derivative is not applicable")
        position = var.position
        if self._generation is not None and var.generation != self._generation:
            raise ValueError(
                "value was registered in a different tape generation than these derivatives"
            )
        if position >= len(self._values):
            raise IndexError(
                f"position {position} is outside a derivative vector of length {len(self._values)}"
            )
        return self._values[position]

    def as_array(self) -> np.ndarray:
        """Read-only view of the full derivative vector (one slot per tape position)."""
        return self._values
