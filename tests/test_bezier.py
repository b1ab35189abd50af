import numpy as np
import pytest

from hector_mpc.bezier import BezierCurve

POINTS = [[0.0, 0.0], [1.0, 2.0], [3.0, 2.5], [4.0, 0.0]]


def test_endpoints():
    curve = BezierCurve(POINTS, 2.0)
    np.testing.assert_allclose(curve.point(0.0), POINTS[0])
    np.testing.assert_allclose(curve.point(2.0), POINTS[-1])


def test_outside_range_clamps_to_ends():
    curve = BezierCurve(POINTS, 2.0)
    np.testing.assert_allclose(curve.point(-0.5), POINTS[0])
    np.testing.assert_allclose(curve.point(5.0), POINTS[-1])


def test_velocity_zero_outside_range():
    curve = BezierCurve(POINTS, 2.0)
    np.testing.assert_array_equal(curve.velocity(-0.1), np.zeros(2))
    np.testing.assert_array_equal(curve.velocity(2.1), np.zeros(2))


def test_straight_line_velocity_is_constant():
    p0, p1 = np.array([1.0, -1.0, 2.0]), np.array([3.0, 1.0, -2.0])
    curve = BezierCurve([p0, p1], 4.0)
    for u in (0.0, 1.0, 3.5):
        np.testing.assert_allclose(curve.velocity(u), (p1 - p0) / 4.0)


def test_velocity_matches_finite_difference():
    curve = BezierCurve(POINTS, 2.0)
    h = 1e-6
    for u in (0.3, 1.0, 1.7):
        numeric = (curve.point(u + h) - curve.point(u - h)) / (2 * h)
        np.testing.assert_allclose(curve.velocity(u), numeric, atol=1e-5)


def test_end_velocities_follow_control_polygon():
    curve = BezierCurve(POINTS, 2.0)
    p = np.asarray(POINTS)
    np.testing.assert_allclose(curve.velocity(0.0), 3 * (p[1] - p[0]) / 2.0)
    np.testing.assert_allclose(curve.velocity(2.0), 3 * (p[3] - p[2]) / 2.0)


def test_symmetric_curve_midpoint_on_axis():
    curve = BezierCurve([[-1.0, 0.0], [0.0, 2.0], [1.0, 0.0]], 1.0)
    assert curve.point(0.5)[0] == pytest.approx(0.0)


def test_single_point_rejected():
    with pytest.raises(ValueError):
        BezierCurve([[1.0, 2.0]], 1.0)


def test_non_positive_time_rejected():
    with pytest.raises(ValueError):
        BezierCurve(POINTS, 0.0)