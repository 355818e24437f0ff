# tape_aad/ops/__init__.py

# Convenience re-exports so users can do: from tape_aad.ops import mul, exp, ...
from .arithmetic import add, sub, mul, div, neg, powi
from .transcendental import exp, ln, log, sqrt, abs, sign

__all__ = [
    "add", "sub", "mul", "div", "neg", "powi",
    "exp", "ln", "log", "sqrt", "abs", "sign",
]
