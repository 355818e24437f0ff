# tape_aad/core/node.py
from dataclasses import dataclass
from typing import Any


@dataclass
class Node:
    """
    One entry of the tape, produced by a primitive operation.

    Attributes
    ----------
    left   : int
        Tape position of the left parent.
    right  : int
        Tape position of the right parent. Unary records point it at `left`.
    dleft  : Any
        Local partial ∂out/∂left (numeric scalar).
    dright : Any
        Local partial ∂out/∂right. Zero for unary records.

    A leaf is self-referential (left == right == own position) so the
    reverse sweep treats it like any other node.
    """
    left: int
    right: int
    dleft: Any
    dright: Any

    @classmethod
    def leaf(cls, position: int, seed) -> "Node":
        return cls(left=position, right=position, dleft=seed, dright=seed)

    @classmethod
    def unary(cls, left: int, dleft, zero) -> "Node":
        return cls(left=left, right=left, dleft=dleft, dright=zero)

    @classmethod
    def binary(cls, left: int, dleft, right: int, dright) -> "Node":
        return cls(left=left, right=right, dleft=dleft, dright=dright)

    def is_leaf(self, position: int) -> bool:
        return self.left == position and self.right == position
