"""Numba kernels for projection data resampling.

This subpackage contains the CPU kernels for B-spline sampling (pull and
push) and for the interleaving transform of non-arc-corrected sinograms.
"""

from .bspline import (
    _bspline_weight,
    _mirror_index,
)

from .sampling import (
    _evaluate_kernel,
    _pull_kernel,
    _push_kernel,
)

from .interleaving import (
    _non_interleave_kernel,
    _transpose_non_interleave_kernel,
    _adjoint_non_interleave_kernel,
)

__all__ = [
    '_bspline_weight',
    '_mirror_index',
    '_evaluate_kernel',
    '_pull_kernel',
    '_push_kernel',
    '_non_interleave_kernel',
    '_transpose_non_interleave_kernel',
    '_adjoint_non_interleave_kernel',
]
