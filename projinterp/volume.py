"""Index-ranged sample volumes and boundary extension.

A :class:`SampleVolume` pairs a 3D array (axial, view, tangential) with the
logical index of its first sample along each axis, so ranges such as
tangential positions ``-4 .. 4`` are addressed directly. Growing or shrinking
a volume returns a new volume rather than mutating the extent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .constants import _DTYPE


# ============================================================================
# Sample Volume
# ============================================================================

@dataclass(frozen=True, eq=False)
class SampleVolume:
    """3D block of projection data with per-axis index offsets.

    Parameters
    ----------
    array : numpy.ndarray
        Data of shape (num_axial_poss, num_views, num_tangential_poss).
    min_indices : tuple of int
        Logical index of ``array[0, 0, 0]`` along (axial, view, tangential).

    Examples
    --------
    >>> vol = SampleVolume(np.zeros((3, 4, 5)), (0, 0, -2))
    >>> vol.max_indices
    (2, 3, 2)
    """

    array: np.ndarray
    min_indices: Tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self):
        array = np.asarray(self.array)
        if array.ndim != 3:
            raise ValueError(f"Sample volume must be 3D (axial, view, tangential), got {array.ndim}D")
        object.__setattr__(self, "array", array)
        object.__setattr__(self, "min_indices", tuple(int(i) for i in self.min_indices))

    @classmethod
    def zeros(cls, min_indices, max_indices, dtype=_DTYPE):
        """Create a zero-filled volume covering ``min_indices .. max_indices`` inclusive."""
        shape = tuple(hi - lo + 1 for lo, hi in zip(min_indices, max_indices))
        return cls(np.zeros(shape, dtype=dtype), tuple(min_indices))

    @property
    def shape(self):
        return self.array.shape

    @property
    def max_indices(self):
        return tuple(lo + n - 1 for lo, n in zip(self.min_indices, self.array.shape))

    def is_regular(self):
        """True if every axis holds at least one sample."""
        return all(n > 0 for n in self.array.shape)

    def __getitem__(self, index):
        """Return the sample at logical index ``(axial, view, tangential)``."""
        return self.array[tuple(i - lo for i, lo in zip(index, self.min_indices))]

    def copy(self):
        return SampleVolume(self.array.copy(), self.min_indices)


# ============================================================================
# Boundary Extension
# ============================================================================

_EXTENDED_AXES = (1, 2)
"""View and tangential axes grow by one sample at each end."""


def _check_extent(volume, axes):
    for axis in axes:
        if volume.shape[axis] == 0:
            raise ValueError(f"Cannot extend axis {axis} of an empty sample volume")


def extend_boundaries(volume):
    """Grow the view and tangential axes by one sample at each end.

    The new samples replicate the nearest boundary sample (zero-order
    extension), so an extent ``[a, b]`` becomes ``[a-1, b+1]``.

    Parameters
    ----------
    volume : SampleVolume
        Volume to extend. It is not modified.

    Returns
    -------
    SampleVolume
        New volume with two extra samples on each extended axis.

    Raises
    ------
    ValueError
        If an extended axis is empty.
    """
    _check_extent(volume, _EXTENDED_AXES)
    array = np.pad(volume.array, ((0, 0), (1, 1), (1, 1)), mode="edge")
    lo = volume.min_indices
    return SampleVolume(array, (lo[0], lo[1] - 1, lo[2] - 1))


def shrink_boundaries(volume):
    """Inverse of :func:`extend_boundaries`: drop one sample at each end.

    Returns a view of the original data; nothing is copied.
    """
    if any(volume.shape[axis] < 3 for axis in _EXTENDED_AXES):
        raise ValueError("Sample volume is too small to remove its boundaries")
    lo = volume.min_indices
    return SampleVolume(volume.array[:, 1:-1, 1:-1], (lo[0], lo[1] + 1, lo[2] + 1))


def _fold_edges(array, axis):
    inner = np.take(array, np.arange(1, array.shape[axis] - 1), axis=axis)
    first = [slice(None)] * 3
    last = [slice(None)] * 3
    first[axis] = 0
    last[axis] = -1
    inner[tuple(first)] += np.take(array, 0, axis=axis)
    inner[tuple(last)] += np.take(array, -1, axis=axis)
    return inner


def transpose_extend_boundaries(volume):
    """Transpose of :func:`extend_boundaries`.

    Replication copies an edge sample into the new boundary sample, so its
    transpose adds each removed boundary sample onto the edge sample it was
    copied from.

    Parameters
    ----------
    volume : SampleVolume
        Extended volume, e.g. the result of a push onto an extended grid.

    Returns
    -------
    SampleVolume
        Volume with the original (unextended) index range.
    """
    if any(volume.shape[axis] < 3 for axis in _EXTENDED_AXES):
        raise ValueError("Sample volume is too small to be an extended volume")
    array = volume.array
    for axis in _EXTENDED_AXES:
        array = _fold_edges(array, axis)
    lo = volume.min_indices
    return SampleVolume(array, (lo[0], lo[1] + 1, lo[2] + 1))
