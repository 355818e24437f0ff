# tape_aad/ops/arithmetic.py
import numpy as np
from ..core.var import ADVar, as_primal


def _as_ad(x, like=None):
    """
    Ensure x is an ADVar; otherwise wrap it as a constant.
    A plain number next to a tracked operand takes that operand's tape dtype.
    """
    if isinstance(x, ADVar):
        return x
    dtype = like.tape.dtype if like is not None and like.tape is not None else None
    return ADVar(as_primal(x, dtype))


def _binary(x, y, f, dfdx, dfdy):
    """
    Generic binary primitive:
      - out.val = f(x.val, y.val)
      - records local partials (∂out/∂x, ∂out/∂y) for the tracked operands
    """
    if not isinstance(x, ADVar) and not isinstance(y, ADVar):
        raise TypeError("at least one operand must be an ADVar")
    x = _as_ad(x, like=y)
    y = _as_ad(y, like=x)
    return x.apply_binary(y, f, dfdx, dfdy)


def _operands_ok(x, y):
    ok = (ADVar, int, float, np.integer, np.floating)
    if isinstance(x, bool) or isinstance(y, bool):
        return False
    return isinstance(x, ok) and isinstance(y, ok)


def add(x, y):
    if not _operands_ok(x, y):
        return NotImplemented
    return _binary(x, y, lambda a, b: a + b, lambda a, b: 1.0, lambda a, b: 1.0)


def sub(x, y):
    if not _operands_ok(x, y):
        return NotImplemented
    return _binary(x, y, lambda a, b: a - b, lambda a, b: 1.0, lambda a, b: -1.0)


def mul(x, y):
    if not _operands_ok(x, y):
        return NotImplemented
    return _binary(x, y, lambda a, b: a * b, lambda a, b: b, lambda a, b: a)


def div(x, y):
    """
    Quotient rule:
      ∂(x/y)/∂x = 1/y
      ∂(x/y)/∂y = -x / y²
    Division by zero follows NumPy float semantics (inf/nan).
    """
    if not _operands_ok(x, y):
        return NotImplemented
    return _binary(x, y, lambda a, b: a / b, lambda a, b: 1.0 / b, lambda a, b: -a / (b * b))


def neg(x):
    x = _as_ad(x)
    return x.apply_unary(lambda a: -a, lambda a: -1.0)


def powi(x, n):
    """
    Integer power:
      out.val = x ** n
      ∂out/∂x = n * x^(n-1)
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"powi expects an integer exponent, got {type(n).__name__}")
    x = _as_ad(x)
    n = int(n)
    return x.apply_unary(lambda a: a ** n, lambda a: n * a ** (n - 1))
