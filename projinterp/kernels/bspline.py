"""B-spline basis kernels.

This module contains the Numba-compiled building blocks shared by the pull
and push sampling kernels: the centred B-spline basis functions of order 0
to 5, mirror boundary indexing and the per-axis weight computation.
"""

import math

from ..constants import _JIT_DECORATOR


# ============================================================================
# B-Spline Basis Functions
# ============================================================================

@_JIT_DECORATOR
def _bspline_weight(order, x):
    """Evaluate the centred B-spline basis function of a given order.

    Parameters
    ----------
    order : int
        Spline order, 0 (nearest neighbour) to 5 (quintic).
    x : float
        Distance between the sampling position and the knot, in index units.

    Returns
    -------
    float
        Basis function value, zero outside the support ``|x| < (order + 1) / 2``.
    """
    x = abs(x)
    if order == 0:
        if x < 0.5:
            return 1.0
        return 0.5 if x == 0.5 else 0.0
    if order == 1:
        return 1.0 - x if x < 1.0 else 0.0
    if order == 2:
        if x < 0.5:
            return 0.75 - x * x
        if x < 1.5:
            t = 1.5 - x
            return 0.5 * t * t
        return 0.0
    if order == 3:
        if x < 1.0:
            return 2.0 / 3.0 - x * x + 0.5 * x * x * x
        if x < 2.0:
            t = 2.0 - x
            return t * t * t / 6.0
        return 0.0
    if order == 4:
        if x < 0.5:
            x2 = x * x
            return x2 * (0.25 * x2 - 0.625) + 115.0 / 192.0
        if x < 1.5:
            return 55.0 / 96.0 + x * (5.0 / 24.0 + x * (-1.25 + x * (5.0 / 6.0 - x / 6.0)))
        if x < 2.5:
            t = x - 2.5
            t2 = t * t
            return t2 * t2 / 24.0
        return 0.0
    # quintic
    if x < 1.0:
        x2 = x * x
        return x2 * (x2 * (0.25 - x / 12.0) - 0.5) + 0.55
    if x < 2.0:
        return 0.425 + x * (0.625 + x * (-1.75 + x * (1.25 + x * (x / 24.0 - 0.375))))
    if x < 3.0:
        t = 3.0 - x
        t2 = t * t
        return t2 * t2 * t / 120.0
    return 0.0


# ============================================================================
# Boundary Handling
# ============================================================================

@_JIT_DECORATOR
def _mirror_index(i, n):
    """Fold an array index into ``[0, n)`` by whole-sample mirroring.

    The extension is ``d c b | a b c d | c b a``, the same convention as the
    ``'mirror'`` mode of :func:`scipy.ndimage.spline_filter1d`, so coefficients
    fitted there are evaluated consistently here.
    """
    if n == 1:
        return 0
    period = 2 * n - 2
    i = abs(i) % period
    if i >= n:
        i = period - i
    return i


@_JIT_DECORATOR
def _fill_weights(order, p, n, weights, indices):
    """Compute the ``order + 1`` basis weights and array indices around `p`.

    Parameters
    ----------
    order : int
        Spline order along this axis.
    p : float
        Continuous position in array index units (0 is the first sample).
    n : int
        Number of samples along this axis.
    weights : numpy.ndarray
        Output buffer of length at least ``order + 1``.
    indices : numpy.ndarray
        Output buffer of length at least ``order + 1`` receiving mirrored indices.
    """
    start = int(math.floor(p - 0.5 * (order - 1)))
    if order == 0:
        weights[0] = 1.0
        indices[0] = _mirror_index(start, n)
        return
    for a in range(order + 1):
        k = start + a
        weights[a] = _bspline_weight(order, p - k)
        indices[a] = _mirror_index(k, n)
