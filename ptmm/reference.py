"""
Single-threaded reference implementations.

matmul: the naive x*y*z loop.
matsquare: A^(2^times) by alternating between two buffers.
matsquare_original: what squaring the untouched input every round yields.
"""

from .kernels import matmul_full
from .matrix import Matrix


def matmul(a: Matrix, b: Matrix) -> Matrix:
    if a.cols != b.rows:
        raise ValueError(f"inner dimensions differ: {a.shape} x {b.shape}")
    c = Matrix.allocate(a.rows, b.cols, zero=False)
    matmul_full(a.data, b.data, c.data, a.rows, a.cols, b.cols)
    return c


def matsquare(a: Matrix, times: int) -> Matrix:
    if times < 1:
        raise ValueError(f"times must be >= 1, got {times}")
    result = matmul(a, a)
    if times > 1:
        # need a temporary for the computation
        tmp = Matrix.allocate(a.rows, a.cols, zero=False)
        n = a.rows
        i = 1
        while i < times:
            matmul_full(result.data, result.data, tmp.data, n, n, n)
            if i == times - 1:
                result.data[:] = tmp.data
            else:
                matmul_full(tmp.data, tmp.data, result.data, n, n, n)
            i += 2
    return result


def matsquare_original(a: Matrix, times: int) -> Matrix:
    if times < 1:
        raise ValueError(f"times must be >= 1, got {times}")
    # every round recomputes the same A*A, so the count only changes the cost
    return matmul(a, a)
