import numpy as np
import pytest

from projinterp import AffineMap, GeometryFamily, compute_pull_map, compute_push_map


def test_affine_map():
    amap = AffineMap(offset=(0.0, 0.5, -1.0), step=(1.0, 2.0, 0.5))
    assert amap.map((1, 2, 4)) == (1.0, 4.5, 1.0)
    assert amap.step_product == pytest.approx(1.0)


def test_identity_map(make_geometry):
    geom = make_geometry()
    amap = compute_pull_map(geom, geom)
    np.testing.assert_allclose(amap.offset, 0.0, atol=1e-12)
    np.testing.assert_allclose(amap.step, 1.0)


def test_view_refinement(make_geometry):
    coarse = make_geometry(num_views=4, view_span=4.0)
    fine = make_geometry(num_views=8, view_span=4.0)
    amap = compute_pull_map(coarse, fine)
    assert amap.step == pytest.approx((1.0, 0.5, 1.0))
    assert amap.offset == pytest.approx((0.0, 0.0, 0.0))
    # fine view 3 sits halfway between coarse views 1 and 2
    assert amap.map((0, 3, 0))[1] == pytest.approx(1.5)


def test_axial_offset_keeps_centres_aligned(make_geometry):
    # 3 vs 5 sinograms with the same spacing share their central plane
    amap = compute_pull_map(make_geometry(num_axial_poss=3), make_geometry(num_axial_poss=5))
    assert amap.offset[0] == pytest.approx(-1.0)
    assert amap.step[0] == pytest.approx(1.0)
    assert amap.map((2, 0, 0))[0] == pytest.approx(1.0)


def test_tangential_step(make_geometry):
    amap = compute_pull_map(make_geometry(tangential_spacing=2.0),
                            make_geometry(tangential_spacing=1.5))
    assert amap.step[2] == pytest.approx(0.75)
    assert amap.offset[2] == pytest.approx(0.0)


def test_interleaving_halves_input_sampling(make_geometry):
    interleaved = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=4)
    doubled = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=8)
    assert compute_pull_map(interleaved, doubled).step[1] == pytest.approx(0.5)
    assert compute_pull_map(interleaved, doubled, remove_interleaving=True).step[1] == pytest.approx(1.0)


def test_push_map_swaps_geometries(make_geometry):
    a = make_geometry(num_views=6, tangential_spacing=2.0)
    b = make_geometry(num_views=9, tangential_spacing=1.5, num_axial_poss=5)
    assert compute_push_map(a, b) == compute_pull_map(b, a)
    assert compute_push_map(a, b).step_product == pytest.approx(1.0 / compute_pull_map(a, b).step_product)


def test_view_offset_uses_intrinsic_tilt(make_geometry):
    tilted = make_geometry(num_views=4, view_span=4.0, default_intrinsic_tilt=0.1)
    plain = make_geometry(num_views=4, view_span=4.0)
    assert compute_pull_map(tilted, plain).offset[1] == pytest.approx(0.0)
    amap = compute_pull_map(tilted, plain, use_view_offset=True)
    assert amap.offset[1] == pytest.approx(-0.1)
    assert amap.step[1] == pytest.approx(1.0)
