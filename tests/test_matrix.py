import pathlib
import sys

import numpy as np
import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from ptmm.errors import ConfigurationError, ResourceError
from ptmm.matrix import Matrix, deterministic_fill, format_matrix, generate, random_fill


def test_row_major_indexing():
    m = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
    assert m.shape == (2, 3)
    assert m.index(1, 2) == 5
    assert m.get(1, 0) == 4.0
    m.set(0, 2, 9.5)
    assert m.data[2] == 9.5
    assert m.data.dtype == np.float64


def test_deterministic_fill_formula():
    m = Matrix.allocate(4, 5).fill(deterministic_fill)
    for ix in range(4):
        for iy in range(5):
            assert m.get(ix, iy) == 1.0 + (ix / 100.0) + (iy / 1000.0)


def test_random_fill_seeded_and_bounded():
    a = generate(6, 7, "random", seed=11)
    b = generate(6, 7, "random", seed=11)
    assert a == b
    assert np.all(a.data >= 0.0) and np.all(a.data < 0.1)
    c = Matrix.allocate(6, 7).fill(random_fill(12))
    assert not np.array_equal(a.data, c.data)


def test_generate_rejects_unknown_fill_mode():
    with pytest.raises(ConfigurationError):
        generate(2, 2, "gaussian")


def test_allocation_failure_is_resource_error(monkeypatch):
    def no_memory(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(np, "zeros", no_memory)
    with pytest.raises(ResourceError):
        Matrix.allocate(10, 10)


def test_format_matrix_rows():
    text = format_matrix(Matrix.from_rows([[1.0, 2.5], [1234567.0, 0.000125]]))
    lines = text.splitlines()
    assert len(lines) == 2
    assert lines[0].split() == ["Row", "0:", "1", "2.5"]
    assert lines[1].split() == ["Row", "1:", "1.2346E+06", "0.000125"]
    assert len(lines[0]) == len("Row 0: ") + 2 * 11
