"""Removal of view interleaving in non-arc-corrected projection data.

In non-arc-corrected cylindrical data, consecutive views sample tangential
positions shifted by half a bin. Doubling the number of views puts all
samples on one regular grid: bins whose ``view + tangential`` parity is even
are copied, the others are filled by averaging their four neighbours.

The doubled sinograms are only meant as an intermediate for resampling.
"""

import logging

import numpy as np

from .constants import _ACC_DTYPE
from .geometry import GeometryFamily
from .kernels import (
    _non_interleave_kernel,
    _transpose_non_interleave_kernel,
    _adjoint_non_interleave_kernel,
)
from .volume import SampleVolume

logger = logging.getLogger(__name__)


def _require_non_arc_corrected(geometry):
    if geometry.geometry_family_tag() is not GeometryFamily.NON_ARC_CORRECTED:
        raise ValueError(
            "Removing interleaving is only appropriate for non-arc-corrected data, "
            f"got {geometry.geometry_family_tag().value}"
        )


def _require_view_origin(volume):
    if volume.min_indices[1] != 0:
        raise ValueError(f"Interleaved segments must start at view 0, got {volume.min_indices[1]}")


# ============================================================================
# Geometry Descriptors
# ============================================================================

def make_non_interleaved_geometry(geometry):
    """Descriptor of the doubled-view grid of a non-arc-corrected geometry.

    Raises
    ------
    ValueError
        If `geometry` is not non-arc-corrected.
    """
    _require_non_arc_corrected(geometry)
    return geometry.with_num_views(geometry.num_views * 2)


def transpose_make_non_interleaved_geometry(geometry):
    """Descriptor with half the views of a doubled-view geometry."""
    _require_non_arc_corrected(geometry)
    if geometry.num_views % 2:
        raise ValueError(f"Cannot halve an odd number of views ({geometry.num_views})")
    return geometry.with_num_views(geometry.num_views // 2)


# ============================================================================
# Segments
# ============================================================================

def make_non_interleaved_segment(geometry, segment):
    """Resample an interleaved segment onto the doubled-view grid.

    Parameters
    ----------
    geometry : ProjDataGeometry
        Geometry of `segment` (non-arc-corrected).
    segment : SampleVolume
        Interleaved segment, views starting at 0.

    Returns
    -------
    SampleVolume
        Segment with twice the views. The first and last tangential
        positions are left at zero.

    Raises
    ------
    ValueError
        If `geometry` is arc-corrected or `segment` does not start at view 0.
    """
    _require_non_arc_corrected(geometry)
    _require_view_origin(segment)
    n_ax, n_views, n_tang = segment.shape
    out = np.zeros((n_ax, 2 * n_views, n_tang), dtype=segment.array.dtype)
    _non_interleave_kernel(np.ascontiguousarray(segment.array), out, segment.min_indices[2])
    logger.debug("Non-interleaved segment: %d views -> %d views", n_views, 2 * n_views)
    return SampleVolume(out, segment.min_indices)


def transpose_make_non_interleaved_segment(geometry, segment):
    """Route the even-parity bins of a doubled-view segment back.

    This reverses the copy branch of :func:`make_non_interleaved_segment`
    only: averaged (odd-parity) bins are discarded, so it is not the exact
    transpose of the forward transform. See
    :func:`adjoint_make_non_interleaved_segment` for that.

    Parameters
    ----------
    geometry : ProjDataGeometry
        Geometry of the doubled-view `segment` (non-arc-corrected).
    segment : SampleVolume
        Doubled-view segment, views starting at 0, even number of views.

    Returns
    -------
    SampleVolume
        Segment with half the views.
    """
    _require_non_arc_corrected(geometry)
    _require_view_origin(segment)
    n_ax, n_views, n_tang = segment.shape
    if n_views % 2:
        raise ValueError(f"Views need to be reduced by a factor 2, got {n_views} views")
    out = np.zeros((n_ax, n_views // 2, n_tang), dtype=segment.array.dtype)
    _transpose_non_interleave_kernel(np.ascontiguousarray(segment.array), out, segment.min_indices[2])
    return SampleVolume(out, segment.min_indices)


def adjoint_make_non_interleaved_segment(geometry, segment):
    """Exact transpose of :func:`make_non_interleaved_segment`.

    Even-parity bins are routed back like
    :func:`transpose_make_non_interleaved_segment`; each odd-parity bin adds
    a quarter of its value to the four bins it was averaged from.

    Parameters
    ----------
    geometry : ProjDataGeometry
        Geometry of the doubled-view `segment` (non-arc-corrected).
    segment : SampleVolume
        Doubled-view segment, views starting at 0, even number of views.

    Returns
    -------
    SampleVolume
        Segment with half the views.
    """
    _require_non_arc_corrected(geometry)
    _require_view_origin(segment)
    n_ax, n_views, n_tang = segment.shape
    if n_views % 2:
        raise ValueError(f"Views need to be reduced by a factor 2, got {n_views} views")
    out = np.zeros((n_ax, n_views // 2, n_tang), dtype=_ACC_DTYPE)
    _adjoint_non_interleave_kernel(np.ascontiguousarray(segment.array), out, segment.min_indices[2])
    return SampleVolume(out.astype(segment.array.dtype, copy=False), segment.min_indices)
