"""
Static work division over the linear result-cell index space.

total = rows * cols cells are split among the workers:
  part = total // workers
  worker i owns [i*part, (i+1)*part), the last worker owns [i*part, total)
Workers are clamped to total first, so nobody gets zero cells.
"""

from typing import List, NamedTuple, Tuple

from .errors import ConfigurationError


class Partition(NamedTuple):
    worker: int
    start: int
    count: int

    @property
    def stop(self) -> int:
        return self.start + self.count

    def cells(self) -> range:
        return range(self.start, self.start + self.count)


def effective_workers(total: int, requested: int) -> int:
    if total < 1:
        raise ConfigurationError(f"nothing to partition: total={total}")
    if requested < 1:
        raise ConfigurationError(f"need at least one worker, got {requested}")
    return min(requested, total)


def partition(total: int, requested: int) -> List[Partition]:
    workers = effective_workers(total, requested)
    part = total // workers
    parts = []
    for i in range(workers):
        start = i * part
        count = total - start if i == workers - 1 else part
        parts.append(Partition(i, start, count))
    return parts


def cell_coords(k: int, cols: int) -> Tuple[int, int]:
    return k // cols, k % cols
