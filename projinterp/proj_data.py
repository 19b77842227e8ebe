"""In-memory projection data container."""

import logging

import numpy as np

from .constants import _DTYPE
from .volume import SampleVolume

logger = logging.getLogger(__name__)


class ProjDataInMemory:
    """Projection data for a single segment held in a numpy array.

    Parameters
    ----------
    geometry : ProjDataGeometry
        Descriptor fixing the index ranges of the stored segment.
    array : array-like, optional
        Initial data of shape ``geometry.segment_shape``. Zeros if omitted.

    Examples
    --------
    >>> proj_data = ProjDataInMemory(geometry)
    >>> segment = proj_data.get_segment(0)
    >>> proj_data.set_segment(segment)
    True
    """

    def __init__(self, geometry, array=None):
        self._geometry = geometry
        if array is None:
            array = np.zeros(geometry.segment_shape, dtype=_DTYPE)
        array = np.asarray(array, dtype=_DTYPE)
        if array.shape != tuple(geometry.segment_shape):
            raise ValueError(
                f"Projection data of shape {array.shape} does not match the "
                f"geometry shape {tuple(geometry.segment_shape)}"
            )
        self._array = array.copy()

    @property
    def array(self):
        """Read-only view of the stored segment."""
        view = self._array.view()
        view.flags.writeable = False
        return view

    def get_geometry_descriptor(self):
        return self._geometry

    def _check_segment_num(self, segment_num):
        if segment_num != 0:
            raise ValueError(f"Only segment 0 is stored, got segment {segment_num}")

    def get_segment(self, segment_num=0):
        """Return a copy of the segment as a :class:`SampleVolume`."""
        self._check_segment_num(segment_num)
        return SampleVolume(self._array.copy(), self._geometry.min_indices)

    def get_empty_segment(self, segment_num=0):
        self._check_segment_num(segment_num)
        return self._geometry.get_empty_segment(segment_num)

    def set_segment(self, volume):
        """Store `volume` as segment 0.

        Returns
        -------
        bool
            False, leaving the stored data untouched, if the index ranges of
            `volume` differ from the geometry.
        """
        if (tuple(volume.min_indices) != tuple(self._geometry.min_indices)
                or tuple(volume.shape) != tuple(self._geometry.segment_shape)):
            logger.warning(
                "Refusing segment with index range %s..%s, expected %s..%s",
                volume.min_indices, volume.max_indices,
                self._geometry.min_indices, self._geometry.max_indices,
            )
            return False
        self._array[...] = volume.array
        return True
