"""
Reverse-pass behaviour of the matrix AAD engine.

Covers the worked example, sum-over-paths accumulation, the 1x1-only
backward guard, gradient clearing, ReLU masking, per-op backward rules,
node ownership and the opt-in memoized traversal.
"""

import gc
import weakref

import numpy as np
import pytest

from aad_matrix.aad import Variable, ShapeError, reverse, backward_topological, zero_gradients, iter_graph


def _pair():
    a = Variable([[1.0, 2.0], [3.0, 4.0]], requires_gradient=True, name="a")
    b = Variable([[5.0, 6.0], [7.0, 8.0]], requires_gradient=True, name="b")
    return a, b


def test_worked_example_sum_then_mean():
    a, b = _pair()
    c = a - b
    d = a + b
    e = c @ d
    f = e.sum()
    f.backward()

    np.testing.assert_array_equal(a.gradient, [[6.0, 14.0], [6.0, 14.0]])
    np.testing.assert_array_equal(b.gradient, [[-22.0, -30.0], [-22.0, -30.0]])

    g = e.mean()
    assert g == [[-72.0]]

    # Only `a` is cleared; `b` keeps accumulating
    a.clear_gradient()
    g.backward()
    np.testing.assert_allclose(a.gradient, [[1.5, 3.5], [1.5, 3.5]])
    np.testing.assert_allclose(b.gradient, [[-27.5, -37.5], [-27.5, -37.5]])


def test_diamond_accumulates_sum_over_paths():
    a = Variable([[1.0, -2.0, 0.5]], requires_gradient=True)
    b = Variable([[4.0, 0.0, -1.0]], requires_gradient=True)
    c = a + b
    # a reaches f through c and directly through a scalar multiply
    f = (c + a * 3.0).sum()
    f.backward()

    np.testing.assert_array_equal(a.gradient, np.full((1, 3), 4.0))
    np.testing.assert_array_equal(b.gradient, np.ones((1, 3)))


def test_same_operand_twice():
    a = Variable([[2.0, 3.0]], requires_gradient=True)
    f = (a + a).sum()
    f.backward()
    np.testing.assert_array_equal(a.gradient, [[2.0, 2.0]])


@pytest.mark.parametrize("shape", [(2, 2), (1, 2), (3, 1), (1, 0)])
def test_backward_requires_1x1(shape):
    x = Variable(np.ones(shape), requires_gradient=True)
    with pytest.raises(ShapeError):
        x.backward()
    with pytest.raises(ShapeError):
        x.backward(memoize=True)


def test_backward_guard_leaves_gradients_untouched():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    with pytest.raises(ShapeError):
        (a * 2.0).backward()
    np.testing.assert_array_equal(a.gradient, [[0.0, 0.0]])


def test_clear_then_backward_matches_first_pass():
    a, b = _pair()
    f = ((a @ b).T - b).norm()
    f.backward()
    first = a.gradient.copy()

    a.clear_gradient()
    f.backward()
    np.testing.assert_allclose(a.gradient, first)

    a.clear_gradient()
    a.clear_gradient()
    np.testing.assert_array_equal(a.gradient, np.zeros((2, 2)))


def test_clear_reuses_buffer():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    buf = a.node.gradient
    a.sum().backward()
    a.clear_gradient()
    assert a.node.gradient is buf


def test_backward_without_clear_accumulates():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    f = (a * 5.0).sum()
    f.backward()
    f.backward()
    np.testing.assert_array_equal(a.gradient, [[10.0, 10.0]])


def test_relu_mask_is_strict():
    a = Variable([[-1.0, 0.0, 2.0], [3.0, -0.5, 0.0]], requires_gradient=True)
    y = a.relu()
    np.testing.assert_array_equal(y.value, [[0.0, 0.0, 2.0], [3.0, 0.0, 0.0]])
    y.sum().backward()
    np.testing.assert_array_equal(a.gradient, [[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]])


def test_maximum_threshold():
    a = Variable([[0.5, 1.0, 1.5]], requires_gradient=True)
    y = a.maximum(1.0)
    np.testing.assert_array_equal(y.value, [[1.0, 1.0, 1.5]])
    y.sum().backward()
    np.testing.assert_array_equal(a.gradient, [[0.0, 0.0, 1.0]])


def test_transpose_and_scalar_ops():
    a = Variable([[1.0, 2.0, 3.0]], requires_gradient=True)
    w = Variable([[1.0], [10.0], [100.0]])
    f = ((a / 4.0) * 2.0).T.T @ w
    assert f.shape == (1, 1)
    f.backward()
    np.testing.assert_allclose(a.gradient, [[0.5, 5.0, 50.0]])


def test_negation_and_reflected_scalar():
    a = Variable([[1.0, -1.0]], requires_gradient=True)
    f = (-(3.0 * a)).sum()
    assert f == [[0.0]]
    f.backward()
    np.testing.assert_array_equal(a.gradient, [[-3.0, -3.0]])


def test_norm_gradient():
    a = Variable([[3.0, 4.0]], requires_gradient=True)
    f = a.norm()
    assert f == [[5.0]]
    f.backward()
    np.testing.assert_allclose(a.gradient, [[0.6, 0.8]])


def test_norm_of_zero_propagates_nan():
    a = Variable(np.zeros((2, 2)), requires_gradient=True)
    f = a.norm()
    assert f == [[0.0]]
    with np.errstate(all="ignore"):
        f.backward()
    assert np.all(np.isnan(a.gradient))


def test_mean_gradient_divides_by_count():
    a = Variable(np.arange(6.0).reshape(2, 3), requires_gradient=True)
    a.mean().backward()
    np.testing.assert_allclose(a.gradient, np.full((2, 3), 1.0 / 6.0))


def test_untracked_nodes_forward_but_do_not_store():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    k = Variable([[3.0, 4.0]])
    c = a + k
    c.sum().backward()

    assert c.gradient is None
    assert k.gradient is None
    np.testing.assert_array_equal(a.gradient, [[1.0, 1.0]])


def test_tracked_intermediate_accumulates():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    c = (a * 2.0).set_requires_gradient()
    (c * 3.0).sum().backward()
    np.testing.assert_array_equal(c.gradient, [[3.0, 3.0]])
    np.testing.assert_array_equal(a.gradient, [[6.0, 6.0]])


def test_matmul_shape_mismatch():
    a = Variable(np.ones((2, 3)))
    b = Variable(np.ones((2, 3)))
    with pytest.raises(ShapeError) as info:
        a @ b
    assert isinstance(info.value, ValueError)
    assert isinstance(info.value.__cause__, ValueError)


def test_elementwise_shape_mismatch():
    a = Variable(np.ones((2, 3)))
    with pytest.raises(ShapeError):
        a + Variable(np.ones((3, 2)))
    with pytest.raises(ShapeError):
        a - Variable(np.ones((1, 3)))


def test_node_backward_rejects_wrong_shape():
    a = Variable(np.ones((2, 2)), requires_gradient=True)
    with pytest.raises(ShapeError):
        a.node.backward(np.ones((1, 2)))


def test_nodes_outlive_their_variables():
    a = Variable([[1.0, 2.0]], requires_gradient=True)

    def build():
        c = a @ a.T
        d = c * 2.0
        return d.sum()

    f = build()
    f.backward()
    np.testing.assert_array_equal(a.gradient, [[4.0, 8.0]])


def test_node_freed_with_last_owner():
    a = Variable([[1.0, 2.0]])
    c = a + a
    ref = weakref.ref(c.node)
    f = c.sum()
    del c
    gc.collect()
    assert ref() is not None

    del f
    gc.collect()
    assert ref() is None


def test_memoized_backward_matches_recursive():
    a, b = _pair()
    c = a - b
    d = a + b
    f = (c @ d).sum() + (c.T @ a).mean() * 2.0
    f.backward()
    recursive = (a.gradient.copy(), b.gradient.copy())

    zero_gradients(f)
    f.backward(memoize=True)
    np.testing.assert_allclose(a.gradient, recursive[0])
    np.testing.assert_allclose(b.gradient, recursive[1])


def test_deep_diamond_chain():
    x0 = Variable([[1.0, 1.0]], requires_gradient=True)
    x = x0
    for _ in range(10):
        x = x + x
    f = x.sum()

    f.backward()
    np.testing.assert_array_equal(x0.gradient, [[1024.0, 1024.0]])

    x0.clear_gradient()
    reverse(f, memoize=True)
    np.testing.assert_array_equal(x0.gradient, [[1024.0, 1024.0]])


def test_reverse_seed_scales_gradient():
    a = Variable([[1.0, 2.0]], requires_gradient=True)
    reverse(a.sum(), seed=0.5)
    np.testing.assert_array_equal(a.gradient, [[0.5, 0.5]])


def test_iter_graph_is_topological_and_unique():
    a, b = _pair()
    c = a + b
    f = (c @ c).sum()
    order = iter_graph(f)

    assert order[-1] is f.node
    assert len(order) == len({id(n) for n in order}) == 5
    position = {id(n): i for i, n in enumerate(order)}
    for node in order:
        for child in node.children:
            assert position[id(child)] < position[id(node)]


def test_zero_gradients_leaves_untracked_unallocated():
    a, b = _pair()
    c = a @ b
    f = c.sum()
    f.backward()
    zero_gradients(f)

    np.testing.assert_array_equal(a.gradient, np.zeros((2, 2)))
    np.testing.assert_array_equal(b.gradient, np.zeros((2, 2)))
    assert c.gradient is None


def test_long_running_sum_with_memoized_backward():
    a = Variable([[1.0]], requires_gradient=True)
    loss = a
    for _ in range(1999):
        loss = loss + a
    loss.backward(memoize=True)
    np.testing.assert_array_equal(a.gradient, [[2000.0]])


def test_backward_topological_entry_point():
    a, b = _pair()
    f = ((a - b) @ (a + b)).sum()
    backward_topological(f, np.ones((1, 1)))
    np.testing.assert_array_equal(a.gradient, [[6.0, 14.0], [6.0, 14.0]])

    backward_topological(f.node, [[0.5]])
    np.testing.assert_array_equal(b.gradient, [[-33.0, -45.0], [-33.0, -45.0]])
