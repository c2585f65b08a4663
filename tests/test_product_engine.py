import pathlib
import sys

import numpy as np

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from ptmm import engine, reference
from ptmm.matrix import Matrix, generate
from ptmm.trace import RoundRecorder


def _serial(a, b):
    out = []
    for i in range(a.rows):
        row = []
        for j in range(b.cols):
            tval = 0.0
            for k in range(a.cols):
                tval += a.get(i, k) * b.get(k, j)
            row.append(tval)
        out.append(row)
    return Matrix.from_rows(out)


def test_small_product():
    a = Matrix.from_rows([[1, 2], [3, 4]])
    b = Matrix.from_rows([[5, 6], [7, 8]])
    c = engine.matmul(a, b, num_workers=3)
    assert c.view().tolist() == [[19.0, 22.0], [43.0, 50.0]]


def test_product_matches_serial_loop_bit_for_bit():
    a = generate(7, 5, "deterministic")
    b = generate(5, 9, "random", seed=3)
    c = engine.matmul(a, b, num_workers=4)
    assert c.shape == (7, 9)
    assert np.array_equal(c.data, _serial(a, b).data)
    assert np.array_equal(c.data, reference.matmul(a, b).data)
    assert np.allclose(c.view(), a.view() @ b.view())


def test_single_worker_equivalence():
    a = generate(9, 11, "random", seed=5)
    b = generate(11, 6, "random", seed=6)
    one = engine.matmul(a, b, num_workers=1)
    for workers in (2, 3, 7, 8, 54, 500):
        assert engine.matmul(a, b, num_workers=workers) == one


def test_inputs_not_mutated():
    a = generate(4, 3, "random", seed=1)
    b = generate(3, 4, "random", seed=2)
    a0, b0 = a.copy(), b.copy()
    engine.matmul(a, b, num_workers=5)
    assert a == a0 and b == b0


def test_deterministic_runs_are_identical():
    a = generate(12, 8, "deterministic")
    b = generate(8, 10, "deterministic")
    runs = [engine.matmul(a, b, num_workers=6) for _ in range(3)]
    assert runs[0] == runs[1] == runs[2]


def test_clamp_creates_no_idle_workers():
    a = Matrix.from_rows([[1, 2], [3, 4]])
    rec = RoundRecorder()
    engine.matmul(a, a, num_workers=64, recorder=rec)
    assert rec.workers() == {0, 1, 2, 3}
    assert len(rec.events_for(0, "start")) == 4
    assert len(rec.events_for(0, "finish")) == 4
