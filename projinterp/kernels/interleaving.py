"""Numba kernels removing the view interleaving of non-arc-corrected data.

Arrays are laid out as (axial, view, tangential). Tangential positions are
addressed by their logical index ``t``; ``tmin`` is the logical index of
array column 0. Views wrapping past 180 degrees reappear with a mirrored
tangential position.
"""

from numba import prange

from ..constants import _JIT_DECORATOR, _PARALLEL_JIT_DECORATOR


@_JIT_DECORATOR
def _tangential_column(t, flip, tmin, n_tang):
    """Array column of logical tangential position `t`, mirrored if `flip`."""
    if flip:
        t = -t
    j = t - tmin
    # asymmetric ranges: the mirrored position may not exist
    if j < 0:
        return 0
    if j >= n_tang:
        return n_tang - 1
    return j


@_JIT_DECORATOR
def _direct_view(view):
    """Compressed view feeding an even-parity cell of the doubled grid."""
    return view // 2 if view % 2 == 0 else (view + 1) // 2


# ============================================================================
# Forward Transform
# ============================================================================

@_PARALLEL_JIT_DECORATOR
def _non_interleave_kernel(inp, out, tmin):
    """Fill the doubled-view array `out` from the interleaved array `inp`.

    Even-parity cells (``view + t`` even) copy the matching input bin, odd
    parity cells average four neighbours. The first and last tangential
    columns are not written.
    """
    n_ax, n_views, n_tang = inp.shape
    n_out_views = out.shape[1]
    for ax in prange(n_ax):
        for view in range(n_out_views):
            for j in range(1, n_tang - 1):
                t = j + tmin
                if (view + t) & 1 == 0:
                    in_view = _direct_view(view)
                    out[ax, view, j] = inp[
                        ax, in_view % n_views,
                        _tangential_column(t, in_view >= n_views, tmin, n_tang)]
                else:
                    next_view = view // 2 + 1
                    other_view = (view + 1) // 2
                    out[ax, view, j] = (
                        inp[ax, view // 2, j]
                        + inp[ax, next_view % n_views,
                              _tangential_column(t, next_view >= n_views, tmin, n_tang)]
                        + inp[ax, other_view % n_views,
                              _tangential_column(t - 1, other_view >= n_views, tmin, n_tang)]
                        + inp[ax, other_view % n_views,
                              _tangential_column(t + 1, other_view >= n_views, tmin, n_tang)]
                    ) / 4


# ============================================================================
# Direct-Copy Transpose
# ============================================================================

@_JIT_DECORATOR
def _transpose_non_interleave_kernel(inp, out, tmin):
    """Route the even-parity cells of the doubled array `inp` back into `out`.

    Odd-parity cells are ignored. Serial, since clamped tangential
    positions may receive more than one write and the last one wins.
    """
    n_ax, n_in_views, n_tang = inp.shape
    n_views = out.shape[1]
    for ax in range(n_ax):
        for view in range(n_in_views):
            for j in range(n_tang):
                t = j + tmin
                if (view + t) & 1 == 0:
                    out_view = _direct_view(view)
                    out[ax, out_view % n_views,
                        _tangential_column(t, out_view >= n_views, tmin, n_tang)] = inp[ax, view, j]


# ============================================================================
# Exact Adjoint
# ============================================================================

@_PARALLEL_JIT_DECORATOR
def _adjoint_non_interleave_kernel(inp, out, tmin):
    """Accumulate into `out` the transpose of :func:`_non_interleave_kernel`.

    `out` must be zero on entry. Axial sinograms are independent, so the
    axial loop runs in parallel without contention.
    """
    n_ax, n_in_views, n_tang = inp.shape
    n_views = out.shape[1]
    for ax in prange(n_ax):
        for view in range(n_in_views):
            for j in range(1, n_tang - 1):
                t = j + tmin
                value = inp[ax, view, j]
                if (view + t) & 1 == 0:
                    out_view = _direct_view(view)
                    out[ax, out_view % n_views,
                        _tangential_column(t, out_view >= n_views, tmin, n_tang)] += value
                else:
                    quarter = value / 4
                    next_view = view // 2 + 1
                    other_view = (view + 1) // 2
                    out[ax, view // 2, j] += quarter
                    out[ax, next_view % n_views,
                        _tangential_column(t, next_view >= n_views, tmin, n_tang)] += quarter
                    out[ax, other_view % n_views,
                        _tangential_column(t - 1, other_view >= n_views, tmin, n_tang)] += quarter
                    out[ax, other_view % n_views,
                        _tangential_column(t + 1, other_view >= n_views, tmin, n_tang)] += quarter
