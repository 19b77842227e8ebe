# projinterp/__init__.py
"""projinterp - Projection Data Resampling Between Scanner Geometries.

B-spline resampling of 3D sinograms from one scanner geometry onto another,
with an exact adjoint (push) of the forward interpolation (pull), removal of
the view interleaving of non-arc-corrected data, and PyTorch autograd
wrappers built on Numba CPU kernels.
"""

from .interpolate import (
    InterpolationConfig,
    interpolate_projdata,
    interpolate_projdata_pull,
    interpolate_projdata_push,
    pull_segment,
    push_segment,
)

from .geometry import (
    Axis,
    Bin,
    GeometryFamily,
    ProjDataGeometry,
    check_compatible,
)

from .volume import (
    SampleVolume,
    extend_boundaries,
    shrink_boundaries,
    transpose_extend_boundaries,
)

from .interleaving import (
    make_non_interleaved_geometry,
    transpose_make_non_interleaved_geometry,
    make_non_interleaved_segment,
    transpose_make_non_interleaved_segment,
    adjoint_make_non_interleaved_segment,
)

from .coordinates import AffineMap, compute_pull_map, compute_push_map
from .resampler import BSplineType, RegularGridResampler
from .proj_data import ProjDataInMemory
from .operators import SinogramPullFunction, SinogramPushFunction

__version__ = '0.3.0'

__all__ = [
    'InterpolationConfig',
    'interpolate_projdata',
    'interpolate_projdata_pull',
    'interpolate_projdata_push',
    'pull_segment',
    'push_segment',
    'Axis',
    'Bin',
    'GeometryFamily',
    'ProjDataGeometry',
    'check_compatible',
    'SampleVolume',
    'extend_boundaries',
    'shrink_boundaries',
    'transpose_extend_boundaries',
    'make_non_interleaved_geometry',
    'transpose_make_non_interleaved_geometry',
    'make_non_interleaved_segment',
    'transpose_make_non_interleaved_segment',
    'adjoint_make_non_interleaved_segment',
    'AffineMap',
    'compute_pull_map',
    'compute_push_map',
    'BSplineType',
    'RegularGridResampler',
    'ProjDataInMemory',
    'SinogramPullFunction',
    'SinogramPushFunction',
]
