import numpy as np
import pytest

from licalib.plane_stats import (
    PointCorrespondence,
    SurfelPoint,
    collect_correspondences,
    lidar_cov,
)

PLANES = [
    [0.0, 0.0, 1.0, -2.0],
    [1.0, 0.0, 0.0, 0.5],
    [0.0, 1.0, 0.0, 3.0],
]


def _surfel(t, plane_id):
    return SurfelPoint(t, [t, 2 * t, 3 * t], [1.0, 0.2, 5.0], plane_id)


def _corr(normal):
    return PointCorrespondence(0.0, 0.1, [0, 0, 0], [0, 0, 0], [*normal, 0.0])


def test_collect_filters_half_open_interval():
    points = [_surfel(t, 0) for t in (0.5, 1.0, 1.5, 2.0, 2.5)]
    result, span = collect_correspondences(points, PLANES, 0.3, (1.0, 2.0))
    assert [pc.t_point for pc in result] == [1.0, 1.5]
    assert span == (1.0, 1.5)


def test_collect_copies_fields_and_plane():
    sp = _surfel(1.2, 2)
    result, _ = collect_correspondences([sp], PLANES, 0.7, (0.0, 5.0))
    pc = result[0]
    assert pc.t_map == 0.7
    assert pc.geo_type == "plane"
    np.testing.assert_array_equal(pc.geo_plane, PLANES[2])
    np.testing.assert_array_equal(pc.point, sp.point)
    np.testing.assert_array_equal(pc.point_raw, sp.point_raw)


def test_collect_empty_span_is_reversed():
    result, span = collect_correspondences([_surfel(9.0, 0)], PLANES, 0.0, (1.0, 2.0))
    assert result == []
    assert span == (2.0, 1.0)


def test_collect_bad_plane_id_raises():
    with pytest.raises(IndexError):
        collect_correspondences([_surfel(1.0, 3)], PLANES, 0.0, (0.0, 2.0))


def test_collect_out_of_range_point_skips_plane_lookup():
    result, _ = collect_correspondences([_surfel(7.0, 99)], PLANES, 0.0, (0.0, 2.0))
    assert len(result) == 0


def test_lidar_cov_empty_is_zero():
    np.testing.assert_array_equal(lidar_cov([]), np.zeros(3))


def test_lidar_cov_single_normal():
    np.testing.assert_allclose(lidar_cov([_corr([0, 0, 1])]), [1.0, 0.0, 0.0], atol=1e-12)


def test_lidar_cov_sorted_and_trace_preserved():
    rng = np.random.default_rng(3)
    normals = rng.normal(size=(20, 3))
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    values = lidar_cov([_corr(n) for n in normals])
    assert np.all(np.diff(values) <= 1e-12)
    assert values.sum() == pytest.approx(1.0)


def test_lidar_cov_orthogonal_normals_balanced():
    values = lidar_cov([_corr(n) for n in np.eye(3)])
    np.testing.assert_allclose(values, [values[0]] * 3)
    assert values.sum() == pytest.approx(1.0)


def test_point_correspondence_rejects_bad_plane():
    with pytest.raises(ValueError):
        PointCorrespondence(0.0, 0.0, [0, 0, 0], [0, 0, 0], [1, 0, 0])


def test_surfel_point_rejects_bad_point():
    with pytest.raises(ValueError):
        SurfelPoint(0.0, [1, 2], [0, 0, 0], 0)