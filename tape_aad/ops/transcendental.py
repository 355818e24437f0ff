# tape_aad/ops/transcendental.py
import numpy as np
from .arithmetic import _as_ad


def exp(x):
    x = _as_ad(x)
    return x.apply_unary(np.exp, np.exp)


def ln(x):
    x = _as_ad(x)
    return x.apply_unary(np.log, np.reciprocal)


# `log` is the NumPy spelling
log = ln


def sqrt(x):
    x = _as_ad(x)
    return x.apply_unary(np.sqrt, lambda a: 0.5 / np.sqrt(a))


def abs(x):
    """|x|; derivative sign(x), taken as 0 at the kink."""
    x = _as_ad(x)
    return x.apply_unary(np.abs, np.sign)


def sign(x):
    """sign(x); derivative 0 almost everywhere."""
    x = _as_ad(x)
    return x.apply_unary(np.sign, lambda a: 0.0)


__all__ = ["exp", "ln", "log", "sqrt", "abs", "sign"]
