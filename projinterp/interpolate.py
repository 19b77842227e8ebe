"""Resampling of projection data between scanner geometries.

Three entry points operate on projection data containers:

- :func:`interpolate_projdata` fits interpolating B-splines to the input and
  samples them on the output grid.
- :func:`interpolate_projdata_pull` samples the input with spline weights on
  the output grid (linear interpolation by default).
- :func:`interpolate_projdata_push` is the adjoint of the pull.

Each entry point validates the geometries, optionally removes the view
interleaving of non-arc-corrected data, extends the view and tangential
boundaries, derives the affine index map and commits the resampled segment
with a single ``set_segment`` call. The segment-level functions
:func:`pull_segment` and :func:`push_segment` do the work and are shared
with the autograd operators.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Tuple

from .constants import _ACC_DTYPE
from .coordinates import compute_pull_map, compute_push_map
from .geometry import check_compatible
from .interleaving import (
    make_non_interleaved_geometry,
    make_non_interleaved_segment,
    transpose_make_non_interleaved_segment,
    adjoint_make_non_interleaved_segment,
)
from .resampler import BSplineType, RegularGridResampler, as_spline_types
from .volume import SampleVolume, extend_boundaries, transpose_extend_boundaries

logger = logging.getLogger(__name__)


# ============================================================================
# Per-call Configuration
# ============================================================================

@dataclass(frozen=True)
class InterpolationConfig:
    """Options of one resampling call.

    Parameters
    ----------
    spline_types : BSplineType or tuple of BSplineType, optional
        Spline type for all axes or per (axial, view, tangential) axis
        (default: ``BSplineType.LINEAR``).
    remove_interleaving : bool, optional
        Resample non-arc-corrected data through its doubled-view grid
        (default: False).
    use_view_offset : bool, optional
        Account for the intrinsic tilt of both geometries. Experimental
        (default: False).
    prefilter : bool, optional
        Fit interpolating spline coefficients before sampling. Not available
        for push (default: False).
    exact_interleaving_adjoint : bool, optional
        In push, transpose the interleaving removal exactly instead of only
        routing back its copied bins (default: True).
    """

    spline_types: Tuple[BSplineType, BSplineType, BSplineType] = (BSplineType.LINEAR,) * 3
    remove_interleaving: bool = False
    use_view_offset: bool = False
    prefilter: bool = False
    exact_interleaving_adjoint: bool = True

    def __post_init__(self):
        object.__setattr__(self, "spline_types", as_spline_types(self.spline_types))


def _validate(geometry_in, geometry_out, config):
    if config.use_view_offset:
        warnings.warn(
            "Projection data interpolation with use_view_offset is EXPERIMENTAL and NOT TESTED.",
            UserWarning,
            stacklevel=3,
        )
    check_compatible(geometry_in, geometry_out)


# ============================================================================
# Segment-level Operations
# ============================================================================

def pull_segment(segment_in, geometry_in, geometry_out, config=InterpolationConfig()):
    """Sample a segment of `geometry_in` on the grid of `geometry_out`.

    Parameters
    ----------
    segment_in : SampleVolume
        Segment 0 of the input data, with the index ranges of `geometry_in`.
    geometry_in, geometry_out : ProjDataGeometry
        Geometries of the input and output data.
    config : InterpolationConfig, optional
        Call options.

    Returns
    -------
    SampleVolume
        New segment with the index ranges of `geometry_out`.

    Raises
    ------
    ValueError
        If the geometries are incompatible, or interleaving removal is
        requested for arc-corrected data.
    """
    _validate(geometry_in, geometry_out, config)
    affine_map = compute_pull_map(geometry_in, geometry_out,
                                  remove_interleaving=config.remove_interleaving,
                                  use_view_offset=config.use_view_offset)
    segment = segment_in
    if config.remove_interleaving:
        non_interleaved_geometry = make_non_interleaved_geometry(geometry_in)
        segment = make_non_interleaved_segment(geometry_in, segment_in)
        logger.debug("Input %s, non-interleaved %s (%d views)", segment_in.shape,
                     segment.shape, non_interleaved_geometry.num_views)

    extended = extend_boundaries(segment)
    logger.debug("Extended input %s, affine map %s", extended.shape, affine_map)

    resampler = RegularGridResampler(config.spline_types, prefilter=config.prefilter)
    resampler.set_coef(extended)
    out = geometry_out.get_empty_segment(0, dtype=segment_in.array.dtype)
    return resampler.pull(out, affine_map)


def push_segment(segment_in, geometry_in, geometry_out, config=InterpolationConfig(), scale=True):
    """Adjoint of :func:`pull_segment` from `geometry_out` to `geometry_in`.

    Parameters
    ----------
    segment_in : SampleVolume
        Segment 0 of the data to push, with the index ranges of `geometry_in`.
    geometry_in, geometry_out : ProjDataGeometry
        Geometries of the pushed data and of the receiving grid.
    config : InterpolationConfig, optional
        Call options; ``config.prefilter`` must be False.
    scale : bool, optional
        Multiply by the product of the affine steps (default: True). Without
        it the result is the plain matrix transpose of the pull.

    Returns
    -------
    SampleVolume
        New segment with the index ranges of `geometry_out`.
    """
    _validate(geometry_in, geometry_out, config)
    affine_map = compute_push_map(geometry_in, geometry_out,
                                  remove_interleaving=config.remove_interleaving,
                                  use_view_offset=config.use_view_offset)
    target_geometry = geometry_out
    if config.remove_interleaving:
        target_geometry = make_non_interleaved_geometry(geometry_out)

    extended = extend_boundaries(target_geometry.get_empty_segment(0, dtype=_ACC_DTYPE))
    resampler = RegularGridResampler(config.spline_types, prefilter=config.prefilter)
    resampler.set_coef(extended)
    pushed = transpose_extend_boundaries(resampler.push(segment_in, affine_map, scale=scale))
    logger.debug("Pushed %s onto extended %s, affine map %s",
                 segment_in.shape, extended.shape, affine_map)

    if config.remove_interleaving:
        if config.exact_interleaving_adjoint:
            pushed = adjoint_make_non_interleaved_segment(target_geometry, pushed)
        else:
            pushed = transpose_make_non_interleaved_segment(target_geometry, pushed)

    return SampleVolume(pushed.array.astype(segment_in.array.dtype), pushed.min_indices)


# ============================================================================
# Projection Data Entry Points
# ============================================================================

def _commit(proj_data_out, segment):
    if not proj_data_out.set_segment(segment):
        logger.warning("Output projection data refused the resampled segment %s", segment.shape)
        return False
    return True


def _geometries(proj_data_out, proj_data_in):
    return proj_data_in.get_geometry_descriptor(), proj_data_out.get_geometry_descriptor()


def interpolate_projdata(proj_data_out, proj_data_in, spline_type,
                         remove_interleaving=False, use_view_offset=False):
    """Interpolate segment 0 of `proj_data_in` onto the grid of `proj_data_out`.

    Interpolating B-spline coefficients are fitted to the boundary-extended
    input and evaluated at the output bins.

    Parameters
    ----------
    proj_data_out : ProjDataInMemory
        Receives the result.
    proj_data_in : ProjDataInMemory
        Data to interpolate.
    spline_type : BSplineType or sequence of BSplineType
        Spline type for all axes, or one per (axial, view, tangential) axis.
    remove_interleaving : bool, optional
        Remove the view interleaving of non-arc-corrected input first
        (default: False).
    use_view_offset : bool, optional
        Account for the intrinsic tilt. Experimental (default: False).

    Returns
    -------
    bool
        True if the result was stored, False if `proj_data_out` refused it.

    Raises
    ------
    ValueError
        On incompatible geometries or an invalid spline type.

    Examples
    --------
    >>> interpolate_projdata(proj_data_out, proj_data_in, BSplineType.CUBIC)
    True
    """
    config = InterpolationConfig(spline_types=as_spline_types(spline_type),
                                 remove_interleaving=remove_interleaving,
                                 use_view_offset=use_view_offset,
                                 prefilter=True)
    geometry_in, geometry_out = _geometries(proj_data_out, proj_data_in)
    segment = pull_segment(proj_data_in.get_segment(0), geometry_in, geometry_out, config)
    return _commit(proj_data_out, segment)


def interpolate_projdata_pull(proj_data_out, proj_data_in, remove_interleaving=False,
                              use_view_offset=False, spline_type=BSplineType.LINEAR):
    """Pull segment 0 of `proj_data_in` onto the grid of `proj_data_out`.

    Every output bin is mapped to a continuous input position and evaluated
    with spline weights on the raw input samples. This is the forward
    operator whose adjoint is :func:`interpolate_projdata_push`.

    Returns
    -------
    bool
        True if the result was stored, False if `proj_data_out` refused it.
    """
    config = InterpolationConfig(spline_types=spline_type,
                                 remove_interleaving=remove_interleaving,
                                 use_view_offset=use_view_offset)
    geometry_in, geometry_out = _geometries(proj_data_out, proj_data_in)
    segment = pull_segment(proj_data_in.get_segment(0), geometry_in, geometry_out, config)
    return _commit(proj_data_out, segment)


def interpolate_projdata_push(proj_data_out, proj_data_in, remove_interleaving=False,
                              use_view_offset=False, spline_type=BSplineType.LINEAR,
                              exact_interleaving_adjoint=True):
    """Push segment 0 of `proj_data_in` onto the grid of `proj_data_out`.

    Adjoint of :func:`interpolate_projdata_pull` with the roles of the two
    containers swapped: for data ``x`` on the grid of `proj_data_in` and
    ``y`` on the grid of `proj_data_out`,
    ``dot(push(x), y) == step_product * dot(x, pull(y))`` where
    ``step_product`` is the product of the affine steps.

    Parameters
    ----------
    exact_interleaving_adjoint : bool, optional
        With `remove_interleaving`, transpose the interleaving removal
        exactly (default) or only route back its directly copied bins.

    Returns
    -------
    bool
        True if the result was stored, False if `proj_data_out` refused it.
    """
    config = InterpolationConfig(spline_types=spline_type,
                                 remove_interleaving=remove_interleaving,
                                 use_view_offset=use_view_offset,
                                 exact_interleaving_adjoint=exact_interleaving_adjoint)
    geometry_in, geometry_out = _geometries(proj_data_out, proj_data_in)
    segment = push_segment(proj_data_in.get_segment(0), geometry_in, geometry_out, config)
    return _commit(proj_data_out, segment)
