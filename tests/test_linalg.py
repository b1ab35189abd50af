import numpy as np
import pytest

from hector_mpc.linalg import pseudo_inverse


def test_square_invertible_matches_inverse():
    a = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]])
    np.testing.assert_allclose(pseudo_inverse(a, 1e-9), np.linalg.inv(a), atol=1e-12)


def test_rectangular_matches_numpy_pinv():
    a = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.5]])
    result = pseudo_inverse(a, 1e-9)
    assert result.shape == (3, 2)
    np.testing.assert_allclose(result, np.linalg.pinv(a), atol=1e-10)


def test_penrose_conditions():
    a = np.array([[1.0, 2.0], [2.0, 4.0], [0.0, 1.0]])
    p = pseudo_inverse(a, 1e-9)
    np.testing.assert_allclose(a @ p @ a, a, atol=1e-10)
    np.testing.assert_allclose(p @ a @ p, p, atol=1e-10)


def test_small_singular_values_dropped():
    a = np.diag([2.0, 1e-9])
    np.testing.assert_allclose(pseudo_inverse(a, 1e-6), np.diag([0.5, 0.0]))


def test_scalar_above_threshold():
    np.testing.assert_allclose(pseudo_inverse([[4.0]], 1e-6), [[0.25]])


def test_scalar_at_or_below_threshold_is_zero():
    np.testing.assert_array_equal(pseudo_inverse([[-3.0]], 1e-6), [[0.0]])
    np.testing.assert_array_equal(pseudo_inverse([[1e-8]], 1e-6), [[0.0]])


def test_non_matrix_rejected():
    with pytest.raises(ValueError):
        pseudo_inverse([1.0, 2.0], 1e-6)