# tape_aad/core/var.py
from __future__ import annotations
import numpy as np
from typing import Any, Callable, Optional

from .tape import Tape
from .engine import Derivatives, reverse


def as_primal(val: Any, dtype=None):
    """
    Convert a plain number to a NumPy scalar.

    Python ints/floats become float64 unless `dtype` is given; NumPy floating
    scalars keep their own dtype.
    """
    if isinstance(val, ADVar):
        raise TypeError("expected a number, got an ADVar")
    if isinstance(val, (bool, np.bool_)):
        raise TypeError(f"ADVar only accepts real numeric scalars, but got {type(val)}")
    if not isinstance(val, (int, float, np.integer, np.floating)):
        raise TypeError(
            f"ADVar only accepts real numeric scalars, but got {type(val)}"
        )
    if dtype is not None:
        return np.dtype(dtype).type(val)
    if isinstance(val, np.floating):
        return val
    return np.float64(val)


class ADVar:
    """
    Active variable for reverse-mode AD.

    Either a constant (`tape is None`: never recorded, never differentiated)
    or tracked on a Tape at `position`. A tracked value returned by an
    optimizer is *detached*: it keeps its tape but holds no position until
    reset() registers it again.

    Attributes
    ----------
    val : numpy scalar
        Primal value.
    tape : Optional[Tape]
        Tape this value records onto; None for constants.
    generation : Optional[int]
        Tape generation the position belongs to.
    """

    __slots__ = ("val", "_tape", "_position", "generation")
    __hash__ = None  # equality compares primals

    def __init__(self, val: Any, tape: Optional[Tape] = None):
        self._tape = tape
        self._position = None
        self.generation = None
        if tape is None:
            self.val = as_primal(val)
        else:
            self.val = as_primal(val, tape.dtype)
            self._register()

    # ------------------------------------------------------------------ #
    # construction
    # ------------------------------------------------------------------ #
    @classmethod
    def constant(cls, val) -> "ADVar":
        return cls(val)

    @classmethod
    def variable(cls, val, tape: Tape) -> "ADVar":
        """Register `val` as a differentiable leaf on `tape`."""
        return cls(val, tape)

    @classmethod
    def zero(cls) -> "ADVar":
        return cls(0.0)

    @classmethod
    def one(cls) -> "ADVar":
        return cls(1.0)

    @classmethod
    def _tracked(cls, val, tape: Tape, position: int) -> "ADVar":
        out = cls.__new__(cls)
        out.val = val
        out._tape = tape
        out._position = position
        out.generation = tape.generation
        return out

    def detached(self, val) -> "ADVar":
        """
        New value `val` on the same tape with no recorded node.
        Constants stay constant.
        """
        out = ADVar.__new__(ADVar)
        out.val = as_primal(val, self._tape.dtype if self._tape is not None else None)
        out._tape = self._tape
        out._position = None
        out.generation = None
        return out

    def _register(self):
        self._position = self._tape.register_leaf()
        self.generation = self._tape.generation

    # ------------------------------------------------------------------ #
    # inspection
    # ------------------------------------------------------------------ #
    @property
    def tape(self) -> Optional[Tape]:
        return self._tape

    @property
    def is_tracked(self) -> bool:
        return self._tape is not None

    @property
    def is_detached(self) -> bool:
        return self._tape is not None and self._position is None

    @property
    def position(self) -> int:
        """Tape position; raises if the value is constant, detached or stale."""
        if self._tape is None:
            raise TypeError("a constant ADVar has no tape position")
        if self._position is None:
            raise ValueError("ADVar is detached from its tape; call reset() to register it")
        if self.generation != self._tape.generation:
            raise ValueError(
                f"ADVar was registered before the last tape reset "
                f"(generation {self.generation}, tape at {self._tape.generation}); call reset()"
            )
        return self._position

    def primal(self):
        return self.val

    def reset(self):
        """
        Re-register as a fresh leaf on the tape. No-op for constants.
        Call after tape.reset() for every value that is used again.
        """
        if self._tape is not None:
            self._register()

    def __repr__(self):
        if self._tape is None:
            return f"ADVar({self.val!r}, const)"
        if self._position is None:
            return f"ADVar({self.val!r}, detached)"
        return f"ADVar({self.val!r}, pos={self._position})"

    def __float__(self):
        return float(self.val)

    # ------------------------------------------------------------------ #
    # recording
    # ------------------------------------------------------------------ #
    def apply_unary(self, evaluate: Callable, local_derivative: Callable) -> "ADVar":
        """
        out.val = evaluate(val); records ∂out/∂self = local_derivative(val)
        when self is tracked.
        """
        val = evaluate(self.val)
        if self._tape is None:
            return ADVar(val)
        position = self._tape.record(self.position, local_derivative(self.val))
        return ADVar._tracked(val, self._tape, position)

    def apply_binary(self, other: "ADVar", evaluate: Callable,
                     local_derivative_left: Callable,
                     local_derivative_right: Callable) -> "ADVar":
        """
        out.val = evaluate(self.val, other.val).

        A constant operand has nothing upstream to receive gradient, so with a
        single tracked operand only that side is recorded (as a unary node).
        Both operands tracked must share one Tape instance.
        """
        a, b = self.val, other.val
        val = evaluate(a, b)
        left, right = self._tape, other._tape

        if left is None and right is None:
            return ADVar(val)
        if right is None:
            position = left.record(self.position, local_derivative_left(a, b))
            return ADVar._tracked(val, left, position)
        if left is None:
            position = right.record(other.position, local_derivative_right(a, b))
            return ADVar._tracked(val, right, position)
        if left is not right:
            raise ValueError("cannot combine ADVars recorded on different tapes")
        position = left.record(
            self.position, local_derivative_left(a, b),
            other.position, local_derivative_right(a, b),
        )
        return ADVar._tracked(val, left, position)

    def backward(self) -> Derivatives:
        """
        Reverse sweep seeded at this value: ∂self/∂(every recorded position).
        A constant yields an empty Derivatives.
        """
        if self._tape is None:
            return Derivatives.empty()
        return Derivatives(reverse(self._tape, self.position), self.generation)

    # ------------------------------------------------------------------ #
    # comparisons act on primal values only
    # ------------------------------------------------------------------ #
    @staticmethod
    def _primal_of(other):
        if isinstance(other, ADVar):
            return other.val
        if isinstance(other, (int, float, np.integer, np.floating)):
            return other
        return NotImplemented

    def __eq__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val == o)

    def __ne__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val != o)

    def __lt__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val < o)

    def __le__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val <= o)

    def __gt__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val > o)

    def __ge__(self, other):
        o = self._primal_of(other)
        return o if o is NotImplemented else bool(self.val >= o)

    # ------------------------------------------------------------------ #
    # operator overloading
    # ------------------------------------------------------------------ #
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pow__(self, n):
        from ..ops.arithmetic import powi
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            return NotImplemented
        return powi(self, n)

    # elementary functions
    def ln(self):
        from ..ops.transcendental import ln
        return ln(self)

    def exp(self):
        from ..ops.transcendental import exp
        return exp(self)

    def sqrt(self):
        from ..ops.transcendental import sqrt
        return sqrt(self)

    def __abs__(self):
        from ..ops.transcendental import abs
        return abs(self)

    def sign(self):
        from ..ops.transcendental import sign
        return sign(self)

    def powi(self, n: int):
        from ..ops.arithmetic import powi
        return powi(self, n)
