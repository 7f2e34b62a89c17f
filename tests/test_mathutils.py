import math

import numpy as np
import pytest

from licalib import mathutils as mu


def test_rad_deg_round_trip():
    assert mu.rad_to_deg(math.pi) == pytest.approx(180.0)
    for deg in (-720.0, -45.0, 0.0, 33.3, 400.0):
        assert mu.rad_to_deg(mu.deg_to_rad(deg)) == pytest.approx(deg)


@pytest.mark.parametrize("rad", [-10.0, -math.pi, -1.0, 0.0, 2.5, 7.0, 31.4])
def test_normalize_rad_range_and_period(rad):
    out = mu.normalize_rad(rad)
    assert -math.pi <= out < math.pi
    turns = (rad - out) / (2 * math.pi)
    assert turns == pytest.approx(round(turns))


@pytest.mark.parametrize("deg", [-1000.0, -180.0, -10.0, 0.0, 190.0, 725.0])
def test_normalize_deg_range_and_period(deg):
    out = mu.normalize_deg(deg)
    assert -180.0 <= out < 180.0
    turns = (deg - out) / 360.0
    assert turns == pytest.approx(round(turns))


def test_rad_comparisons_wrap():
    assert mu.rad_lt(0.1, 0.2)
    assert not mu.rad_gt(0.1, 0.2)
    assert mu.rad_gt(-3.0, 3.0)
    assert not mu.rad_lt(-3.0, 3.0)


def test_scale_point_keeps_extra_fields():
    p = [1.0, -2.0, 3.0, 42.0]
    out = mu.scale_point(p, 2.0)
    assert out[3] == 42.0
    assert mu.calc_point_distance(out) == pytest.approx(2.0 * mu.calc_point_distance(p))
    assert p == [1.0, -2.0, 3.0, 42.0]


def test_squared_diff_consistency():
    a = np.array([1.0, 2.0, 3.0])
    b = np.array([-0.5, 4.0, 1.5])
    assert mu.calc_squared_diff(a, a) == 0.0
    assert mu.calc_squared_diff(a, b, 0.5) == pytest.approx(mu.calc_squared_point_distance(a - 0.5 * b))
    assert mu.calc_point_distance(a) ** 2 == pytest.approx(mu.calc_squared_point_distance(a))


def test_delta_q_halves_theta():
    theta = np.array([0.2, -0.4, 0.6])
    q = mu.delta_q(theta)
    assert np.allclose(q[:3] * 2, theta)
    assert q[3] == 1.0


def test_skew_symmetric_is_cross_product():
    v = np.array([1.0, -2.0, 0.5])
    w = np.array([0.3, 4.0, -1.0])
    s = mu.skew_symmetric(v)
    assert np.allclose(s @ w, np.cross(v, w))
    assert np.allclose(s, -s.T)


def test_quat_matrices_agree_and_commute():
    q = np.array([0.1, 0.2, 0.3, 0.9])
    q /= np.linalg.norm(q)
    p = np.array([-0.4, 0.5, 0.1, 0.7])
    p /= np.linalg.norm(p)
    assert np.allclose(mu.left_quat_matrix(q) @ p, mu.right_quat_matrix(p) @ q)
    lq, rp = mu.left_quat_matrix(q), mu.right_quat_matrix(p)
    assert np.allclose(lq @ rp, rp @ lq)
    assert np.allclose(lq.T @ lq, np.eye(4))


def test_ypr_round_trip():
    ypr = np.array([30.0, -20.0, 70.0])
    r = mu.ypr2r(ypr)
    assert np.allclose(r.T @ r, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)
    assert np.allclose(mu.r2ypr(r), ypr)


@pytest.mark.parametrize("angle", [0.4, 1.2, 3.0])
def test_quaternion_from_matrix_axis_angle(angle):
    axis = np.array([1.0, 2.0, 2.0]) / 3.0
    q = mu.quaternion_from_matrix(mu.rotation_matrix(angle, axis))
    expected = np.concatenate([math.sin(angle / 2) * axis, [math.cos(angle / 2)]])
    assert np.allclose(q, expected) or np.allclose(q, -expected)


def test_g2r_identity_for_downward_gravity():
    assert np.allclose(mu.g2r([0.0, 0.0, -9.81]), [0.0, 0.0, 0.0, 1.0])


def test_g2r_unit_norm():
    q = mu.g2r([0.3, -1.0, -9.7])
    assert np.linalg.norm(q) == pytest.approx(1.0)


def test_rotation_matrix_is_rotation():
    r = mu.rotation_matrix(0.7, [0.0, 3.0, 4.0])
    assert np.allclose(r.T @ r, np.eye(3))
    assert np.allclose(r @ np.array([0.0, 0.6, 0.8]), [0.0, 0.6, 0.8])


def test_rotation_from_two_vectors_maps_direction():
    a = np.array([1.0, 2.0, -1.0])
    b = np.array([-3.0, 0.5, 2.0])
    r = mu.rotation_from_two_vectors(a, b)
    assert np.allclose(r @ (a / np.linalg.norm(a)), b / np.linalg.norm(b))


def test_rotation_from_parallel_vectors_raises():
    with pytest.raises(ValueError):
        mu.rotation_from_two_vectors([1.0, 0.0, 0.0], [2.0, 0.0, 0.0])


def test_calculate_angle():
    assert mu.calculate_angle([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == pytest.approx(90.0)
    assert mu.calculate_angle([1.0, 1.0, 0.0], [2.0, 2.0, 0.0]) == pytest.approx(0.0, abs=1e-6)


def test_sort_descending():
    vec = np.array([0.5, 3.0, -1.0])
    sorted_vec, ind = mu.sort_descending(vec)
    assert np.array_equal(sorted_vec, vec[ind])
    assert all(sorted_vec[i] >= sorted_vec[i + 1] for i in range(len(sorted_vec) - 1))
    assert sorted(ind.tolist()) == [0, 1, 2]