"""Numba kernels sampling a B-spline coefficient volume on a regular grid.

The pull kernel evaluates the spline at ``index * step + offset`` for every
index of an output volume. The push kernel is its transpose: every input
value is scattered into the coefficient grid with the same weights.
"""

import numpy as np
from numba import prange

from ..constants import _JIT_DECORATOR, _PARALLEL_JIT_DECORATOR, _MAX_SPLINE_ORDER
from .bspline import _fill_weights


# ============================================================================
# Single Position Evaluation
# ============================================================================

@_JIT_DECORATOR
def _evaluate_kernel(coef, p0, p1, p2, order0, order1, order2):
    """Evaluate the spline at one position given in array index units."""
    n0c, n1c, n2c = coef.shape
    w0 = np.empty(_MAX_SPLINE_ORDER + 1)
    w1 = np.empty(_MAX_SPLINE_ORDER + 1)
    w2 = np.empty(_MAX_SPLINE_ORDER + 1)
    k0 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
    k1 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
    k2 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
    _fill_weights(order0, p0, n0c, w0, k0)
    _fill_weights(order1, p1, n1c, w1, k1)
    _fill_weights(order2, p2, n2c, w2, k2)
    acc = 0.0
    for a in range(order0 + 1):
        for b in range(order1 + 1):
            wab = w0[a] * w1[b]
            if wab == 0.0:
                continue
            for c in range(order2 + 1):
                acc += wab * w2[c] * coef[k0[a], k1[b], k2[c]]
    return acc


# ============================================================================
# Pull (Gather) Kernel
# ============================================================================

@_PARALLEL_JIT_DECORATOR
def _pull_kernel(
    coef, coef_min0, coef_min1, coef_min2,
    order0, order1, order2,
    out, out_min0, out_min1, out_min2,
    off0, off1, off2, st0, st1, st2,
    lim0, lim1, lim2
):
    """Sample the coefficient volume at every index of `out`.

    Parameters
    ----------
    coef : numpy.ndarray
        3D spline coefficient volume (axial, view, tangential).
    coef_min0, coef_min1, coef_min2 : int
        Logical index of the first coefficient along each axis.
    order0, order1, order2 : int
        Spline order per axis.
    out : numpy.ndarray
        3D output volume, written in place.
    out_min0, out_min1, out_min2 : int
        Logical index of the first output sample along each axis.
    off0, off1, off2 : float
        Affine offsets, in coefficient index units.
    st0, st1, st2 : float
        Affine steps.
    lim0, lim1, lim2 : float
        Largest continuous coordinate sampled per axis. Output cells mapping
        beyond it are left untouched.

    Notes
    -----
    The axial loop is distributed over threads. Every output cell is written
    by exactly one iteration, so no synchronisation is needed.
    """
    n0c, n1c, n2c = coef.shape
    n0, n1, n2 = out.shape
    for i0 in prange(n0):
        c0 = (i0 + out_min0) * st0 + off0
        if c0 > lim0:
            continue
        w0 = np.empty(_MAX_SPLINE_ORDER + 1)
        w1 = np.empty(_MAX_SPLINE_ORDER + 1)
        w2 = np.empty(_MAX_SPLINE_ORDER + 1)
        k0 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        k1 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        k2 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        _fill_weights(order0, c0 - coef_min0, n0c, w0, k0)
        for i1 in range(n1):
            c1 = (i1 + out_min1) * st1 + off1
            if c1 > lim1:
                continue
            _fill_weights(order1, c1 - coef_min1, n1c, w1, k1)
            for i2 in range(n2):
                c2 = (i2 + out_min2) * st2 + off2
                if c2 > lim2:
                    continue
                _fill_weights(order2, c2 - coef_min2, n2c, w2, k2)
                acc = 0.0
                for a in range(order0 + 1):
                    for b in range(order1 + 1):
                        wab = w0[a] * w1[b]
                        if wab == 0.0:
                            continue
                        for c in range(order2 + 1):
                            acc += wab * w2[c] * coef[k0[a], k1[b], k2[c]]
                out[i0, i1, i2] = acc


# ============================================================================
# Push (Scatter) Kernel
# ============================================================================

@_PARALLEL_JIT_DECORATOR
def _push_kernel(
    values, val_min0, val_min1, val_min2,
    n0c, n1c, n2c, coef_min0, coef_min1, coef_min2,
    order0, order1, order2,
    off0, off1, off2, st0, st1, st2,
    lim0, lim1, lim2,
    n_chunks
):
    """Scatter `values` onto a coefficient grid with spline weights.

    Parameters
    ----------
    values : numpy.ndarray
        3D volume of values to distribute.
    val_min0, val_min1, val_min2 : int
        Logical index of the first value along each axis.
    n0c, n1c, n2c : int
        Shape of the coefficient grid receiving the contributions.
    coef_min0, coef_min1, coef_min2 : int
        Logical index of the first coefficient along each axis.
    order0, order1, order2 : int
        Spline order per axis.
    off0, off1, off2, st0, st1, st2 : float
        Affine offsets and steps, as for the pull kernel.
    lim0, lim1, lim2 : float
        Largest continuous coordinate scattered per axis.
    n_chunks : int
        Number of partial accumulation buffers.

    Returns
    -------
    numpy.ndarray
        Partial sums of shape ``(n_chunks, n0c, n1c, n2c)``. Their sum over the
        first axis is the pushed volume.

    Notes
    -----
    Several input cells may land on the same coefficient, so each chunk of
    axial input positions accumulates into its own buffer.
    """
    n0, n1, n2 = values.shape
    buffers = np.zeros((n_chunks, n0c, n1c, n2c))
    for chunk in prange(n_chunks):
        w0 = np.empty(_MAX_SPLINE_ORDER + 1)
        w1 = np.empty(_MAX_SPLINE_ORDER + 1)
        w2 = np.empty(_MAX_SPLINE_ORDER + 1)
        k0 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        k1 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        k2 = np.empty(_MAX_SPLINE_ORDER + 1, dtype=np.int64)
        for i0 in range(chunk, n0, n_chunks):
            c0 = (i0 + val_min0) * st0 + off0
            if c0 > lim0:
                continue
            _fill_weights(order0, c0 - coef_min0, n0c, w0, k0)
            for i1 in range(n1):
                c1 = (i1 + val_min1) * st1 + off1
                if c1 > lim1:
                    continue
                _fill_weights(order1, c1 - coef_min1, n1c, w1, k1)
                for i2 in range(n2):
                    c2 = (i2 + val_min2) * st2 + off2
                    if c2 > lim2:
                        continue
                    v = values[i0, i1, i2]
                    if v == 0.0:
                        continue
                    _fill_weights(order2, c2 - coef_min2, n2c, w2, k2)
                    for a in range(order0 + 1):
                        for b in range(order1 + 1):
                            wab = w0[a] * w1[b] * v
                            if wab == 0.0:
                                continue
                            for c in range(order2 + 1):
                                buffers[chunk, k0[a], k1[b], k2[c]] += wab * w2[c]
    return buffers
