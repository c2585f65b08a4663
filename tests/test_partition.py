import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from ptmm.errors import ConfigurationError
from ptmm.partition import cell_coords, effective_workers, partition


def _covered(parts):
    cells = []
    for p in parts:
        cells.extend(p.cells())
    return cells


def test_partition_tiles_index_space_exactly_once():
    for total in range(1, 41):
        for workers in range(1, 51):
            parts = partition(total, workers)
            assert _covered(parts) == list(range(total)), (total, workers)
            assert [p.worker for p in parts] == list(range(len(parts)))


def test_last_worker_absorbs_remainder():
    parts = partition(10, 3)
    assert [(p.start, p.count) for p in parts] == [(0, 3), (3, 3), (6, 4)]
    assert parts[-1].stop == 10


def test_single_worker_owns_everything():
    assert partition(12, 1) == [(0, 0, 12)]


def test_one_cell_per_worker_when_workers_equal_total():
    parts = partition(6, 6)
    assert [(p.start, p.count) for p in parts] == [(i, 1) for i in range(6)]


def test_workers_clamped_to_total_without_idle_workers():
    parts = partition(4, 64)
    assert len(parts) == 4
    assert all(p.count == 1 for p in parts)
    assert effective_workers(4, 64) == 4
    assert effective_workers(100, 8) == 8


def test_invalid_worker_or_cell_counts_rejected():
    with pytest.raises(ConfigurationError):
        partition(10, 0)
    with pytest.raises(ConfigurationError):
        partition(0, 4)


def test_cell_coords_row_major():
    assert cell_coords(0, 5) == (0, 0)
    assert cell_coords(4, 5) == (0, 4)
    assert cell_coords(5, 5) == (1, 0)
    assert cell_coords(13, 5) == (2, 3)
