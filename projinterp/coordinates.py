"""Affine relation between the index grids of two projection data geometries.

For each axis the map satisfies ``input_index = output_index * step + offset``
so that both indices refer to the same physical position. Positions and
sampling distances are read at the reference bin ``Bin(0, 0, 0, 0)``; the
angular sampling is the phi difference between views 1 and 0.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .geometry import Axis, REFERENCE_BIN


@dataclass(frozen=True)
class AffineMap:
    """Per-axis ``(offset, step)`` pairs in (axial, view, tangential) order.

    Examples
    --------
    >>> amap = AffineMap(offset=(0.0, 0.5, 0.0), step=(1.0, 2.0, 1.0))
    >>> amap.map((1, 1, 1))
    (1.0, 2.5, 1.0)
    """

    offset: Tuple[float, float, float]
    step: Tuple[float, float, float]

    def map(self, index):
        """Continuous input-grid coordinate of an output-grid index."""
        return tuple(i * s + o for i, s, o in zip(index, self.step, self.offset))

    @property
    def step_product(self):
        """Ratio of output to input cell volume."""
        return float(np.prod(self.step))


def _angular_reference(geometry, use_view_offset):
    phi = geometry.position_on_axis(Axis.VIEW, REFERENCE_BIN)
    if use_view_offset:
        phi += geometry.intrinsic_tilt()
    return phi


def compute_pull_map(geometry_in, geometry_out, remove_interleaving=False, use_view_offset=False):
    """Map output indices of a pull onto input index coordinates.

    Parameters
    ----------
    geometry_in : ProjDataGeometry
        Geometry of the data being sampled.
    geometry_out : ProjDataGeometry
        Geometry of the grid being filled.
    remove_interleaving : bool, optional
        If True, the input is sampled on its doubled-view grid, so its angular
        sampling is halved (default: False).
    use_view_offset : bool, optional
        If True, each geometry's intrinsic tilt is added to its reference
        angle (default: False).

    Returns
    -------
    AffineMap
        Offsets in input index units and steps ``sampling_out / sampling_in``.

    Examples
    --------
    >>> amap = compute_pull_map(coarse_geometry, fine_geometry)
    >>> amap.step[Axis.VIEW]
    0.5
    """
    offset = [0.0, 0.0, 0.0]
    step = [1.0, 1.0, 1.0]
    for axis in Axis:
        sampling_in = geometry_in.sampling_in_axis(axis, REFERENCE_BIN)
        sampling_out = geometry_out.sampling_in_axis(axis, REFERENCE_BIN)
        if axis is Axis.VIEW:
            if remove_interleaving:
                sampling_in /= 2
            position_in = _angular_reference(geometry_in, use_view_offset)
            position_out = _angular_reference(geometry_out, use_view_offset)
        else:
            position_in = geometry_in.position_on_axis(axis, REFERENCE_BIN)
            position_out = geometry_out.position_on_axis(axis, REFERENCE_BIN)
        offset[axis] = (position_out - position_in) / sampling_in
        step[axis] = sampling_out / sampling_in
    return AffineMap(tuple(offset), tuple(step))


def compute_push_map(geometry_in, geometry_out, remove_interleaving=False, use_view_offset=False):
    """Map the indices of pushed data onto the grid receiving the push.

    A push from `geometry_in` to `geometry_out` is the transpose of a pull
    from `geometry_out` to `geometry_in`, so the roles of the two geometries
    swap and interleaving removal applies to `geometry_out`.
    """
    return compute_pull_map(geometry_out, geometry_in,
                            remove_interleaving=remove_interleaving,
                            use_view_offset=use_view_offset)
