import numpy as np
import pytest

from projinterp import (
    BSplineType,
    GeometryFamily,
    ProjDataInMemory,
    compute_push_map,
    interpolate_projdata,
    interpolate_projdata_pull,
    interpolate_projdata_push,
)


def _random_proj_data(geometry, rng):
    return ProjDataInMemory(geometry, rng.random(geometry.segment_shape))


def _dot(a, b):
    return float(np.vdot(a.array.astype(np.float64), b.array.astype(np.float64)))


# ======================================================================================
# Pull / push adjointness through the projection data entry points
# ======================================================================================

@pytest.mark.parametrize("spline_type", [BSplineType.LINEAR, BSplineType.CUBIC])
def test_pull_push_adjoint(make_geometry, rng, spline_type):
    geom_a = make_geometry(num_views=6, num_tangential_poss=9, tangential_spacing=2.0)
    geom_b = make_geometry(num_views=9, num_tangential_poss=13, tangential_spacing=1.5)

    x = _random_proj_data(geom_a, rng)
    y = _random_proj_data(geom_b, rng)

    pulled = ProjDataInMemory(geom_b)
    assert interpolate_projdata_pull(pulled, x, spline_type=spline_type)
    pushed = ProjDataInMemory(geom_a)
    assert interpolate_projdata_push(pushed, y, spline_type=spline_type)

    step_product = compute_push_map(geom_b, geom_a).step_product
    assert step_product == pytest.approx(0.5)
    assert _dot(pushed, x) == pytest.approx(step_product * _dot(y, pulled), rel=1e-4)


def test_pull_push_adjoint_with_interleaving(make_geometry, rng):
    geom_a = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=4)
    geom_b = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=8)

    x = _random_proj_data(geom_a, rng)
    y = _random_proj_data(geom_b, rng)

    pulled = ProjDataInMemory(geom_b)
    assert interpolate_projdata_pull(pulled, x, remove_interleaving=True)
    pushed = ProjDataInMemory(geom_a)
    assert interpolate_projdata_push(pushed, y, remove_interleaving=True)

    assert compute_push_map(geom_b, geom_a, remove_interleaving=True).step_product == pytest.approx(1.0)
    assert _dot(pushed, x) == pytest.approx(_dot(y, pulled), rel=1e-4)


def test_direct_copy_interleaving_transpose_differs(make_geometry, rng):
    geom_a = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=4)
    geom_b = make_geometry(family=GeometryFamily.NON_ARC_CORRECTED, num_views=8)
    y = _random_proj_data(geom_b, rng)

    exact = ProjDataInMemory(geom_a)
    direct = ProjDataInMemory(geom_a)
    assert interpolate_projdata_push(exact, y, remove_interleaving=True)
    assert interpolate_projdata_push(direct, y, remove_interleaving=True,
                                     exact_interleaving_adjoint=False)
    assert not np.allclose(exact.array, direct.array)


# ======================================================================================
# Interpolation on identical grids
# ======================================================================================

def test_identity_pull_is_exact(make_geometry, rng):
    geom = make_geometry()
    x = _random_proj_data(geom, rng)
    out = ProjDataInMemory(geom)
    assert interpolate_projdata_pull(out, x)
    np.testing.assert_array_equal(out.array, x.array)


def test_cubic_interpolation_reproduces_samples(make_geometry, rng):
    geom = make_geometry()
    x = _random_proj_data(geom, rng)
    out = ProjDataInMemory(geom)
    assert interpolate_projdata(out, x, BSplineType.CUBIC)
    np.testing.assert_allclose(out.array, x.array, atol=1e-5)


def test_view_refinement_of_constant_data(make_geometry):
    coarse = make_geometry(num_views=6)
    fine = make_geometry(num_views=12)
    x = ProjDataInMemory(coarse, np.full(coarse.segment_shape, 2.5))
    out = ProjDataInMemory(fine)
    assert interpolate_projdata(out, x, "quadratic")
    np.testing.assert_allclose(out.array, 2.5, rtol=1e-6)


# ======================================================================================
# Validation and failure reporting
# ======================================================================================

def test_view_offset_warns(make_geometry, rng):
    geom = make_geometry()
    out = ProjDataInMemory(geom)
    with pytest.warns(UserWarning, match="EXPERIMENTAL"):
        interpolate_projdata_pull(out, _random_proj_data(geom, rng), use_view_offset=True)


class _RefusingProjData(ProjDataInMemory):
    def set_segment(self, volume):
        return False


def test_refused_segment_returns_false(make_geometry, rng):
    geom = make_geometry()
    x = _random_proj_data(geom, rng)
    assert not interpolate_projdata_pull(_RefusingProjData(geom), x)
    assert not interpolate_projdata_push(_RefusingProjData(geom), x)
    assert not interpolate_projdata(_RefusingProjData(geom), x, BSplineType.LINEAR)


def test_incompatible_geometries(make_geometry, rng):
    x = _random_proj_data(make_geometry(), rng)
    with pytest.raises(ValueError, match="same type"):
        interpolate_projdata_pull(
            ProjDataInMemory(make_geometry(family=GeometryFamily.NON_ARC_CORRECTED)), x)
    with pytest.raises(ValueError, match="same ring radius"):
        interpolate_projdata_push(ProjDataInMemory(make_geometry(inner_ring_radius=402.0)), x)


def test_interleaving_needs_non_arc_corrected_data(make_geometry, rng):
    geom = make_geometry(family=GeometryFamily.ARC_CORRECTED)
    with pytest.raises(ValueError, match="non-arc-corrected"):
        interpolate_projdata_pull(ProjDataInMemory(geom), _random_proj_data(geom, rng),
                                  remove_interleaving=True)
