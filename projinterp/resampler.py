"""B-spline resampler on regular 3D grids.

:class:`RegularGridResampler` holds a spline coefficient volume and samples
it at the continuous coordinates given by an :class:`AffineMap` (pull), or
scatters values onto it with the same weights (push). Boundaries are handled
by whole-sample mirroring.
"""

import enum
import logging

import numba
import numpy as np
from scipy.ndimage import spline_filter1d

from .constants import _ACC_DTYPE, _INDEX_EPSILON
from .kernels import _evaluate_kernel, _pull_kernel, _push_kernel
from .volume import SampleVolume

logger = logging.getLogger(__name__)


class BSplineType(enum.IntEnum):
    """Supported B-spline types, valued by their polynomial order."""

    NEAR_N = 0
    LINEAR = 1
    QUADRATIC = 2
    CUBIC = 3
    QUARTIC = 4
    QUINTIC = 5


def as_spline_types(spline_types):
    """Expand a scalar spline type into a 3-axis tuple.

    Parameters
    ----------
    spline_types : BSplineType, int, str or sequence of three of those
        Strings are matched case-insensitively against member names.

    Returns
    -------
    tuple of BSplineType
        Types for the (axial, view, tangential) axes.
    """
    if isinstance(spline_types, (str, int)):
        spline_types = (spline_types,) * 3
    spline_types = tuple(spline_types)
    if len(spline_types) != 3:
        raise ValueError(f"Expected one spline type per axis (3), got {len(spline_types)}")
    result = []
    for spline_type in spline_types:
        try:
            if isinstance(spline_type, str):
                result.append(BSplineType[spline_type.upper()])
            else:
                result.append(BSplineType(spline_type))
        except (KeyError, ValueError):
            raise ValueError(f"Unknown spline type: {spline_type!r}") from None
    return tuple(result)


def _require_regular(volume, what):
    if not isinstance(volume, SampleVolume) or not volume.is_regular():
        raise ValueError(f"{what} must be a regular range (non-empty 3D sample volume)")


class RegularGridResampler:
    """Spline interpolator over a regular 3D coefficient grid.

    Parameters
    ----------
    spline_types : BSplineType or sequence of BSplineType, optional
        Spline type for all axes or per (axial, view, tangential) axis
        (default: ``BSplineType.LINEAR``).
    prefilter : bool, optional
        If True, :meth:`set_coef` fits interpolating spline coefficients to
        the given samples. If False the samples are used as coefficients,
        which interpolates for NEAR_N and LINEAR only (default: False).

    Examples
    --------
    >>> resampler = RegularGridResampler(BSplineType.CUBIC, prefilter=True)
    >>> resampler.set_coef(extended_segment)
    >>> resampler.pull(out_segment, affine_map)
    """

    def __init__(self, spline_types=BSplineType.LINEAR, prefilter=False):
        self.spline_types = as_spline_types(spline_types)
        self.prefilter = bool(prefilter)
        self._coef = None

    @property
    def coefficients(self):
        """Current coefficient volume, or None before :meth:`set_coef`."""
        return self._coef

    def _require_coef(self):
        if self._coef is None:
            raise RuntimeError("RegularGridResampler has no coefficients; call set_coef() first")

    def set_coef(self, volume):
        """Fit (or copy) spline coefficients for `volume`.

        Parameters
        ----------
        volume : SampleVolume
            Samples on a regular range, typically boundary-extended.

        Raises
        ------
        ValueError
            If `volume` is not a regular range.
        """
        _require_regular(volume, "Spline input")
        coef = np.array(volume.array, dtype=_ACC_DTYPE)
        if self.prefilter:
            for axis, spline_type in enumerate(self.spline_types):
                if spline_type >= BSplineType.QUADRATIC and coef.shape[axis] > 1:
                    coef = spline_filter1d(coef, order=int(spline_type), axis=axis,
                                           output=_ACC_DTYPE, mode="mirror")
        self._coef = SampleVolume(np.ascontiguousarray(coef), volume.min_indices)

    def _limits(self):
        return tuple(float(hi) + _INDEX_EPSILON for hi in self._coef.max_indices)

    def __call__(self, position):
        """Evaluate the spline at a continuous (axial, view, tangential) index."""
        self._require_coef()
        p = [float(x) - lo for x, lo in zip(position, self._coef.min_indices)]
        return _evaluate_kernel(self._coef.array, p[0], p[1], p[2], *map(int, self.spline_types))

    def pull(self, out, affine_map):
        """Sample the spline at ``index * step + offset`` for each index of `out`.

        Parameters
        ----------
        out : SampleVolume
            Output volume on a regular range, filled in place.
        affine_map : AffineMap
            Relation from `out` indices to coefficient indices.

        Returns
        -------
        SampleVolume
            `out`. Cells whose coordinate lies beyond the last coefficient
            (plus ``_INDEX_EPSILON``) keep their previous value.
        """
        self._require_coef()
        _require_regular(out, "Pull output")
        if not out.array.flags.c_contiguous or not out.array.flags.writeable:
            raise ValueError("Pull output must be a writeable C-contiguous array")
        _pull_kernel(
            self._coef.array, *self._coef.min_indices,
            *map(int, self.spline_types),
            out.array, *out.min_indices,
            *map(float, affine_map.offset), *map(float, affine_map.step),
            *self._limits(),
        )
        return out

    def push(self, values, affine_map, scale=True):
        """Scatter `values` onto the coefficient grid (transpose of :meth:`pull`).

        Contributions are added to the current coefficients. Start from a
        zero volume passed to :meth:`set_coef` to obtain the push alone.

        Parameters
        ----------
        values : SampleVolume
            Values located at ``index * step + offset`` in coefficient indices.
        affine_map : AffineMap
            Same relation a pull into `values` would use.
        scale : bool, optional
            If True (default), multiply the whole coefficient volume,
            previous content included, by the product of the steps, so
            that push is the adjoint of pull for inner products weighted by
            cell volume. If False, push is the plain matrix transpose of
            pull.

        Returns
        -------
        SampleVolume
            The updated coefficient volume.

        Raises
        ------
        ValueError
            If the resampler prefilters, since the prefilter is not
            transposed.
        """
        self._require_coef()
        _require_regular(values, "Push input")
        if self.prefilter:
            raise ValueError("push is only defined for prefilter=False")
        n_chunks = max(1, min(numba.get_num_threads(), values.shape[0]))
        partial = _push_kernel(
            np.ascontiguousarray(values.array), *values.min_indices,
            *self._coef.shape, *self._coef.min_indices,
            *map(int, self.spline_types),
            *map(float, affine_map.offset), *map(float, affine_map.step),
            *self._limits(),
            n_chunks,
        )
        coef = self._coef.array
        coef += partial.sum(axis=0)
        if scale:
            coef *= affine_map.step_product
        logger.debug("Pushed %s values onto %s grid using %d buffers",
                     values.shape, coef.shape, n_chunks)
        return self._coef
