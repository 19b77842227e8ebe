import numpy as np
import pytest

from projinterp import (
    GeometryFamily,
    SampleVolume,
    adjoint_make_non_interleaved_segment,
    make_non_interleaved_geometry,
    make_non_interleaved_segment,
    transpose_make_non_interleaved_geometry,
    transpose_make_non_interleaved_segment,
)


@pytest.fixture
def non_arc_geometry(make_geometry):
    return make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=4, num_tangential_poss=9)


def _odd_parity_mask(segment):
    views = np.arange(segment.shape[1])[:, None]
    tangs = np.arange(segment.min_indices[2], segment.max_indices[2] + 1)[None, :]
    return np.broadcast_to((views + tangs) % 2 == 1, segment.shape)


def test_geometry_doubling(non_arc_geometry):
    doubled = make_non_interleaved_geometry(non_arc_geometry)
    assert doubled.num_views == 8
    assert transpose_make_non_interleaved_geometry(doubled) == non_arc_geometry


def test_forward_layout(non_arc_geometry, rng):
    segment = SampleVolume(rng.random(non_arc_geometry.segment_shape), non_arc_geometry.min_indices)
    doubled = make_non_interleaved_segment(non_arc_geometry, segment)

    assert doubled.shape == (3, 8, 9)
    assert doubled.min_indices == segment.min_indices
    assert not doubled.array[..., 0].any()
    assert not doubled.array[..., -1].any()
    # view 2, tangential 0: even parity, copied from view 1
    assert doubled[1, 2, 0] == segment[1, 1, 0]
    # view 0, tangential 1: odd parity, average of four neighbours
    expected = (segment[0, 0, 1] + segment[0, 1, 1] + segment[0, 0, 0] + segment[0, 0, 2]) / 4
    assert doubled[0, 0, 1] == pytest.approx(expected)


def test_view_wrap_mirrors_tangential_position(non_arc_geometry, rng):
    segment = SampleVolume(rng.random(non_arc_geometry.segment_shape), non_arc_geometry.min_indices)
    doubled = make_non_interleaved_segment(non_arc_geometry, segment)
    # view 7, tangential 1: even parity, fed by view 4 = view 0 past 180 degrees
    assert doubled[2, 7, 1] == segment[2, 0, -1]


def test_round_trip_recovers_interior(non_arc_geometry, rng):
    segment = SampleVolume(rng.random(non_arc_geometry.segment_shape), non_arc_geometry.min_indices)
    doubled_geometry = make_non_interleaved_geometry(non_arc_geometry)
    doubled = make_non_interleaved_segment(non_arc_geometry, segment)
    back = transpose_make_non_interleaved_segment(doubled_geometry, doubled)

    assert back.shape == segment.shape
    np.testing.assert_array_equal(back.array[..., 1:-1], segment.array[..., 1:-1])
    assert not back.array[..., 0].any()
    assert not back.array[..., -1].any()


def test_direct_transpose_ignores_averaged_bins(non_arc_geometry, rng):
    doubled_geometry = make_non_interleaved_geometry(non_arc_geometry)
    doubled = SampleVolume(rng.random(doubled_geometry.segment_shape), doubled_geometry.min_indices)
    modified = doubled.copy()
    mask = _odd_parity_mask(doubled)
    modified.array[mask] += 5.0

    np.testing.assert_array_equal(
        transpose_make_non_interleaved_segment(doubled_geometry, doubled).array,
        transpose_make_non_interleaved_segment(doubled_geometry, modified).array)
    assert not np.allclose(
        adjoint_make_non_interleaved_segment(doubled_geometry, doubled).array,
        adjoint_make_non_interleaved_segment(doubled_geometry, modified).array)


def test_exact_adjoint(non_arc_geometry, rng):
    doubled_geometry = make_non_interleaved_geometry(non_arc_geometry)
    x = SampleVolume(rng.random(non_arc_geometry.segment_shape), non_arc_geometry.min_indices)
    y = SampleVolume(rng.random(doubled_geometry.segment_shape), doubled_geometry.min_indices)

    lhs = np.vdot(make_non_interleaved_segment(non_arc_geometry, x).array, y.array)
    rhs = np.vdot(x.array, adjoint_make_non_interleaved_segment(doubled_geometry, y).array)
    assert lhs == pytest.approx(rhs, rel=1e-12)


def test_arc_corrected_is_rejected(make_geometry):
    geom = make_geometry(family=GeometryFamily.ARC_CORRECTED)
    with pytest.raises(ValueError, match="non-arc-corrected"):
        make_non_interleaved_geometry(geom)
    with pytest.raises(ValueError, match="non-arc-corrected"):
        make_non_interleaved_segment(geom, geom.get_empty_segment())


def test_odd_view_count_cannot_be_halved(make_geometry):
    geom = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=5)
    with pytest.raises(ValueError, match="odd"):
        transpose_make_non_interleaved_geometry(geom)
    with pytest.raises(ValueError, match="factor 2"):
        transpose_make_non_interleaved_segment(geom, geom.get_empty_segment())
