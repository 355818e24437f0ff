import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.optimize import rosen, rosen_der

from tape_aad import ADVar
from tape_aad.testing import (
    ad_gradient,
    check_gradient,
    finite_difference_gradient,
    rosenbrock,
    rosenbrock_gradient,
)

x0 = np.array([3.41, 2.0])


def test_rosenbrock_matches_scipy():
    value = rosenbrock([ADVar.constant(v) for v in x0])
    assert_allclose(float(value), rosen(x0))
    assert_allclose(rosenbrock_gradient(x0), rosen_der(x0), rtol=1e-12)


def test_ad_gradient_rosenbrock():
    assert_allclose(ad_gradient(rosenbrock, x0), rosen_der(x0), rtol=1e-10)


def test_ad_gradient_of_constant_output():
    grad = ad_gradient(lambda xs: ADVar.constant(1.0), [1.0, 2.0])
    assert_allclose(grad, [0.0, 0.0])


def test_finite_difference_schemes():
    assert_allclose(finite_difference_gradient(rosen, x0), rosen_der(x0), rtol=1e-6)
    assert_allclose(finite_difference_gradient(rosen, x0, scheme="forward"), rosen_der(x0), rtol=1e-4)
    with pytest.raises(ValueError):
        finite_difference_gradient(rosen, x0, scheme="backward")


def test_check_gradient():
    assert check_gradient(rosenbrock, [3.41, 2.0])

    def f(xs):
        x, y = xs
        return x.ln() * y.sqrt() + (x / y).exp() - abs(y - 3.0) * x ** 3

    assert check_gradient(f, [1.5, 2.0])
