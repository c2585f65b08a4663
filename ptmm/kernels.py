"""
kernels.py
----------
Per-partition inner-product kernels. Compiled with Numba in nogil mode so the
engine's worker threads actually run side by side instead of taking turns on
the GIL.

Both kernels walk a contiguous range of linear result cells and map each one
back to (row, col) row-major. The accumulator is a float64 summed left to
right over k; no fastmath, so results are bit-reproducible against the serial
reference.
"""

import os
os.environ.setdefault("NUMBA_DISABLE_COVERAGE", "1")

import numba as nb
import numpy as np


@nb.njit(nogil=True)
def product_partition(a, b, c, inner, cols, start, count):
    """
    c[k] = sum_kx a[row, kx] * b[kx, col] for k in [start, start+count).

    a: rows x inner, b: inner x cols, c: rows x cols, all flat row-major.
    """
    row = start // cols
    col = start - row * cols
    for k in range(start, start + count):
        tval = 0.0
        for kx in range(inner):
            tval += a[row * inner + kx] * b[kx * cols + col]
        c[k] = tval
        col += 1
        if col == cols:
            col = 0
            row += 1


@nb.njit(nogil=True)
def square_partition(src, dst, n, start, count):
    """One squaring round over [start, start+count) of an n x n matrix: dst = src @ src."""
    product_partition(src, src, dst, n, n, start, count)


@nb.njit(nogil=True)
def matmul_full(a, b, c, rows, inner, cols):
    # serial triple loop, same accumulation order as product_partition
    for ix in range(rows):
        for jx in range(cols):
            tval = 0.0
            for kx in range(inner):
                tval += a[ix * inner + kx] * b[kx * cols + jx]
            c[ix * cols + jx] = tval


def warmup() -> None:
    """Force compilation so the first timed call does not pay for the JIT."""
    a = np.ones(4, dtype=np.float64)
    c = np.empty(4, dtype=np.float64)
    product_partition(a, a, c, 2, 2, 0, 4)
    square_partition(a, c, 2, 0, 4)
    matmul_full(a, a, c, 2, 2, 2)
