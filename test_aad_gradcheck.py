"""
Reverse-mode gradients cross-checked against finite differences, plus the
functional seed helpers (grad / grads / grads_list).
"""

import numpy as np
import pytest
from scipy.optimize import approx_fprime

from aad_matrix.aad import Variable, ShapeError, grad, grads, grads_list, value, check_gradient


def test_matmul_adjoints_closed_form():
    rng = np.random.default_rng(0)
    A = rng.normal(size=(3, 4))
    B = rng.normal(size=(4, 2))

    g = grads(lambda v: (v["A"] @ v["B"]).sum(), {"A": A, "B": B})

    ones = np.ones((3, 2))
    np.testing.assert_allclose(g["A"], ones @ B.T)
    np.testing.assert_allclose(g["B"], A.T @ ones)


def test_matmul_adjoints_finite_difference():
    rng = np.random.default_rng(1)
    A = rng.normal(size=(3, 4))
    B = rng.normal(size=(4, 2))
    g = grads(lambda v: (v["A"] @ v["B"]).sum(), {"A": A, "B": B})

    def f_of_A(a_flat):
        return float(np.sum(a_flat.reshape(A.shape) @ B))

    def f_of_B(b_flat):
        return float(np.sum(A @ b_flat.reshape(B.shape)))

    num_A = approx_fprime(A.ravel(), f_of_A, 1e-6).reshape(A.shape)
    num_B = approx_fprime(B.ravel(), f_of_B, 1e-6).reshape(B.shape)
    np.testing.assert_allclose(g["A"], num_A, rtol=1e-4, atol=1e-6)
    np.testing.assert_allclose(g["B"], num_B, rtol=1e-4, atol=1e-6)


@pytest.mark.parametrize("name, f", [
    ("sum", lambda x: x.sum()),
    ("mean", lambda x: x.mean()),
    ("norm", lambda x: x.norm()),
    ("transpose", lambda x: (x.T @ x).sum()),
    ("scalar", lambda x: ((x * 3.0) / 7.0).norm()),
    ("relu", lambda x: x.relu().mean()),
    ("gram_norm", lambda x: (x @ x.T).norm() + (x - x * 0.5).sum()),
])
def test_check_gradient(name, f):
    rng = np.random.default_rng(42)
    x0 = rng.normal(size=(3, 2))
    result = check_gradient(f, x0, atol=1e-4)
    assert result.passed, f"{name}: max abs error {result.max_abs_error}"
    assert result.analytic.shape == (3, 2)


def test_check_gradient_on_row_vector():
    result = check_gradient(lambda x: (x @ x.T).sum(), [1.0, -2.0, 3.0])
    assert result.passed
    np.testing.assert_allclose(result.analytic, [[2.0, -4.0, 6.0]])


def test_dense_layer_expression():
    rng = np.random.default_rng(7)
    W = rng.normal(size=(2, 3))
    x = Variable(rng.normal(size=(3, 1)))
    target = Variable([[0.5], [-0.5]])

    result = check_gradient(lambda w: ((w @ x).relu() - target).norm(), W, atol=1e-4)
    assert result.passed


def test_grad_single_input():
    g = grad(lambda x: (x * 2.0).sum(), [[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_array_equal(g, np.full((2, 2), 2.0))


def test_grad_does_not_touch_given_variable():
    x = Variable([[1.0, 2.0]], requires_gradient=True)
    grad(lambda v: v.sum(), x)
    np.testing.assert_array_equal(x.gradient, [[0.0, 0.0]])


def test_grad_rejects_non_scalar_output():
    with pytest.raises(ShapeError):
        grad(lambda x: x * 2.0, [[1.0, 2.0]])


def test_grad_rejects_non_variable_output():
    with pytest.raises(TypeError):
        grad(lambda x: 1.0, [[1.0]])


def test_grads_list():
    gx, gy = grads_list(lambda xs: (xs[0] @ xs[1]).sum(), [[[1.0, 2.0]], [[3.0], [4.0]]])
    np.testing.assert_array_equal(gx, [[3.0, 4.0]])
    np.testing.assert_array_equal(gy, [[1.0], [2.0]])


def test_value_helper():
    np.testing.assert_array_equal(value(Variable([[1.0]])), [[1.0]])
    assert value(3.0) == 3.0
