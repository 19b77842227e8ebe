import math

import numpy as np
import pytest

from projinterp import (
    Axis,
    Bin,
    GeometryFamily,
    ProjDataInMemory,
    SampleVolume,
    check_compatible,
)


# ======================================================================================
# Descriptor ranges and physical coordinates
# ======================================================================================

def test_index_ranges(make_geometry):
    geom = make_geometry(num_views=6, num_tangential_poss=9, num_axial_poss=3)
    assert geom.min_indices == (0, 0, -4)
    assert geom.max_indices == (2, 5, 4)
    assert make_geometry(num_tangential_poss=8).max_tangential_pos_num == 3
    assert make_geometry(min_tangential_pos_num=0).max_tangential_pos_num == 8


def test_rejects_empty_geometry(make_geometry):
    with pytest.raises(ValueError):
        make_geometry(num_views=0)


def test_sampling_and_positions(make_geometry):
    geom = make_geometry(num_views=6, num_axial_poss=3, axial_spacing=4.0)
    ref = Bin(0, 0, 0, 0)
    assert geom.sampling_in_axis(Axis.VIEW, ref) == pytest.approx(math.pi / 6)
    assert geom.sampling_in_axis(Axis.AXIAL, ref) == 4.0
    assert geom.sampling_in_axis(Axis.TANGENTIAL, ref) == 2.0
    assert geom.position_on_axis(Axis.AXIAL, ref) == pytest.approx(-4.0)
    assert geom.position_on_axis(Axis.TANGENTIAL, Bin(0, 0, 0, 3)) == pytest.approx(6.0)


def test_non_arc_corrected_tangential_coordinate(make_geometry):
    geom = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, inner_ring_radius=100.0)
    b = Bin(0, 0, 0, 4)
    assert geom.get_s(b) == pytest.approx(100.0 * math.sin(8.0 / 100.0))
    assert geom.get_sampling_in_s(b) == pytest.approx(2.0 * math.cos(8.0 / 100.0))
    assert geom.get_sampling_in_s(Bin(0, 0, 0, 0)) == pytest.approx(2.0)


def test_with_num_views_keeps_span(make_geometry):
    geom = make_geometry(num_views=6)
    doubled = geom.with_num_views(12)
    assert doubled.num_views == 12
    assert doubled.view_span == geom.view_span
    assert doubled.sampling_in_axis(Axis.VIEW, Bin(0, 0, 0, 0)) == pytest.approx(math.pi / 12)


def test_empty_segment(make_geometry):
    geom = make_geometry()
    segment = geom.get_empty_segment(0)
    assert segment.min_indices == geom.min_indices
    assert segment.shape == geom.segment_shape
    assert segment.array.dtype == np.float32
    assert not segment.array.any()
    with pytest.raises(ValueError, match="segment 0"):
        geom.get_empty_segment(1)


# ======================================================================================
# Compatibility
# ======================================================================================

def test_compatible_geometries(make_geometry):
    check_compatible(make_geometry(num_views=6), make_geometry(num_views=12, tangential_spacing=1.0))
    check_compatible(make_geometry(), make_geometry(inner_ring_radius=400.5))


def test_family_mismatch(make_geometry):
    with pytest.raises(ValueError, match="same type"):
        check_compatible(make_geometry(),
                         make_geometry(family=GeometryFamily.NON_ARC_CORRECTED))


def test_ring_radius_mismatch(make_geometry):
    with pytest.raises(ValueError, match="same ring radius"):
        check_compatible(make_geometry(), make_geometry(inner_ring_radius=402.0))


# ======================================================================================
# In-memory container
# ======================================================================================

def test_proj_data_round_trip(make_geometry, rng):
    geom = make_geometry()
    data = rng.random(geom.segment_shape).astype(np.float32)
    proj_data = ProjDataInMemory(geom, data)

    segment = proj_data.get_segment(0)
    assert segment.min_indices == geom.min_indices
    segment.array[...] = 0.0
    np.testing.assert_array_equal(proj_data.array, data)

    assert proj_data.set_segment(segment)
    assert not proj_data.array.any()
    with pytest.raises(ValueError):
        proj_data.array[0, 0, 0] = 1.0


def test_proj_data_refuses_other_range(make_geometry):
    geom = make_geometry()
    proj_data = ProjDataInMemory(geom, np.ones(geom.segment_shape))
    shifted = SampleVolume(np.zeros(geom.segment_shape), (0, 1, -4))
    assert not proj_data.set_segment(shifted)
    assert np.all(proj_data.array == 1.0)


def test_proj_data_shape_mismatch(make_geometry):
    with pytest.raises(ValueError, match="does not match"):
        ProjDataInMemory(make_geometry(), np.zeros((1, 2, 3)))
