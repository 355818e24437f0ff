"""
Gradient checking helpers.

Compares reverse-mode gradients against finite differences and provides the
Rosenbrock function with its analytic gradient as a reference problem.

Central differences (two bumps per coordinate):
    ∂f/∂xᵢ ≈ [f(x + εeᵢ) - f(x - εeᵢ)] / (2ε)
"""

from typing import Callable, List, Sequence

import numpy as np
from scipy.optimize import approx_fprime

from .core.tape import Tape
from .core.var import ADVar


def finite_difference_gradient(f: Callable[[np.ndarray], float], x0, eps: float = 1e-6,
                               scheme: str = "central") -> np.ndarray:
    """
    Finite-difference gradient of a scalar function of a 1-D array.

    Args:
        f: callable on a float array returning a scalar
        x0: evaluation point
        eps: bump size
        scheme: "central" (symmetric bumps) or "forward" (scipy approx_fprime)
    """
    x0 = np.asarray(x0, dtype=np.float64)
    if scheme == "forward":
        return approx_fprime(x0, f, eps)
    if scheme != "central":
        raise ValueError(f"unknown finite-difference scheme {scheme!r}")

    grad = np.zeros_like(x0)
    for i in range(len(x0)):
        bump = np.zeros_like(x0)
        bump[i] = eps
        grad[i] = (f(x0 + bump) - f(x0 - bump)) / (2.0 * eps)
    return grad


def ad_gradient(f: Callable[[List[ADVar]], ADVar], x0: Sequence[float], dtype=np.float64) -> np.ndarray:
    """
    Reverse-mode gradient of f at x0 on a fresh tape.
    Runs one reverse pass to obtain every ∂f/∂xᵢ.
    """
    tape = Tape(dtype=dtype)
    xs = [ADVar.variable(v, tape) for v in x0]
    y = f(xs)
    d = y.backward()
    if len(d) == 0:
        return np.zeros(len(xs), dtype=dtype)
    return np.array([d[x] for x in xs], dtype=dtype)


def check_gradient(f: Callable, x0: Sequence[float], rtol: float = 1e-5, atol: float = 1e-8,
                   eps: float = 1e-6) -> bool:
    """
    True when the AD gradient of f matches central differences at x0.

    `f` must accept a list of ADVars; plain floats are passed through the same
    code path as constants for the finite-difference evaluations.
    """
    ad = ad_gradient(f, x0)

    def f_primal(x):
        return float(f([ADVar.constant(v) for v in x]))

    fd = finite_difference_gradient(f_primal, x0, eps=eps)
    return bool(np.allclose(ad, fd, rtol=rtol, atol=atol))


def rosenbrock(xs):
    """f(x, y) = (1 - x)² + 100 (y - x²)²"""
    x, y = xs
    return (1.0 - x) ** 2 + 100.0 * (y - x ** 2) ** 2


def rosenbrock_gradient(x) -> np.ndarray:
    """Analytic gradient [-2(1-x) - 400x(y-x²), 200(y-x²)]."""
    x, y = x
    return np.array([
        -2.0 * (1.0 - x) - 400.0 * x * (y - x ** 2),
        200.0 * (y - x ** 2),
    ])
