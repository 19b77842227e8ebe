import numpy as np
import pytest

from projinterp import GeometryFamily, ProjDataGeometry


def _make_geometry(family=GeometryFamily.ARC_CORRECTED, num_views=6, num_tangential_poss=9,
                   num_axial_poss=3, tangential_spacing=2.0, axial_spacing=4.0,
                   inner_ring_radius=400.0, **kwargs):
    return ProjDataGeometry(
        family=family,
        num_views=num_views,
        num_tangential_poss=num_tangential_poss,
        num_axial_poss=num_axial_poss,
        tangential_spacing=tangential_spacing,
        axial_spacing=axial_spacing,
        inner_ring_radius=inner_ring_radius,
        **kwargs,
    )


@pytest.fixture
def make_geometry():
    """Factory for small projection data geometries."""
    return _make_geometry


@pytest.fixture
def rng():
    return np.random.default_rng(1337)
