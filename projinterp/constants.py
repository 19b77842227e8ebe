"""Global constants and configuration for the projinterp package.

This module defines core constants used throughout the package, including
data types, numerical tolerances, geometry compatibility limits and the
Numba JIT decorators applied to the sampling kernels.
"""

import numpy as np
from numba import njit

# ---------------------------------------------------------------------------
# Data Types and Numerical Constants
# ---------------------------------------------------------------------------

_DTYPE = np.float32
"""Storage data type for projection data (numpy.float32)."""

_ACC_DTYPE = np.float64
"""Data type used for spline coefficients and push accumulation buffers."""

_INDEX_EPSILON = 1e-3
"""Tolerance (in index units) on the maximum continuous coordinate sampled."""

_MAX_SPLINE_ORDER = 5
"""Highest supported B-spline order."""

RING_RADIUS_TOLERANCE = 1.0
"""Largest ring radius difference (physical units) between compatible geometries."""

# ---------------------------------------------------------------------------
# Numba JIT Decorators
# ---------------------------------------------------------------------------

# Device functions called from inside the loops below; inlined by LLVM
_JIT_DECORATOR = njit(cache=True, nogil=True)
"""Numba JIT decorator for serial helpers and kernels."""

# Outer loop uses prange; each iteration owns distinct output cells
_PARALLEL_JIT_DECORATOR = njit(cache=True, nogil=True, parallel=True)
"""Numba JIT decorator with automatic parallelisation for sampling kernels."""
