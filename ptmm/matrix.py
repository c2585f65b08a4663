"""
matrix.py
---------
Flat row-major float64 storage shared by every engine, plus the data
generators and the row printer used by the benchmark.

Cell (r, c) of a rows x cols matrix lives at r*cols + c. Buffers are fixed
size once allocated; the kernels index the flat array directly and rely on the
partitioner never producing an index outside [0, rows*cols).
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

import numpy as np

from .errors import ConfigurationError, ResourceError

log = logging.getLogger(__name__)

FILL_MODES = ("deterministic", "random")

# random() % 200000000 / 2000000000.0 in the original generator -> [0, 0.1)
RANDOM_SPAN = 200_000_000
RANDOM_SCALE = 2_000_000_000.0

Generator = Callable[[np.ndarray, np.ndarray], np.ndarray]


class Matrix:
    """Fixed-size rows x cols buffer of doubles in a 1-D contiguous array."""

    __slots__ = ("rows", "cols", "data")

    def __init__(self, rows: int, cols: int, data: np.ndarray):
        if data.shape != (rows * cols,):
            raise ValueError(f"buffer of shape {data.shape} does not hold {rows}x{cols} cells")
        self.rows = rows
        self.cols = cols
        self.data = data

    @classmethod
    def allocate(cls, rows: int, cols: int, zero: bool = True) -> "Matrix":
        try:
            data = np.zeros(rows * cols, dtype=np.float64) if zero else np.empty(rows * cols, dtype=np.float64)
        except MemoryError as exc:
            raise ResourceError(f"cannot allocate {rows}x{cols} float64 matrix") from exc
        return cls(rows, cols, data)

    @classmethod
    def from_array(cls, arr) -> "Matrix":
        arr = np.asarray(arr, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"expected a 2-D array, got {arr.ndim}-D")
        rows, cols = arr.shape
        return cls(rows, cols, np.ascontiguousarray(arr).reshape(-1).copy())

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[float]]) -> "Matrix":
        return cls.from_array([list(r) for r in rows])

    @property
    def shape(self):
        return self.rows, self.cols

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def index(self, r: int, c: int) -> int:
        return r * self.cols + c

    def get(self, r: int, c: int) -> float:
        return float(self.data[r * self.cols + c])

    def set(self, r: int, c: int, value: float) -> None:
        self.data[r * self.cols + c] = value

    def fill(self, generator: Generator) -> "Matrix":
        """
        Fill every cell from generator(row_idx, col_idx).

        row_idx has shape (rows, 1) and col_idx shape (1, cols); the generator
        returns anything broadcastable to (rows, cols).
        """
        ix = np.arange(self.rows).reshape(self.rows, 1)
        iy = np.arange(self.cols).reshape(1, self.cols)
        values = np.broadcast_to(generator(ix, iy), (self.rows, self.cols))
        self.data[:] = values.reshape(-1)
        return self

    def view(self) -> np.ndarray:
        return self.data.reshape(self.rows, self.cols)

    def copy(self) -> "Matrix":
        return Matrix(self.rows, self.cols, self.data.copy())

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.data, other.data)

    def __repr__(self):
        return f"Matrix({self.rows}x{self.cols})"


def deterministic_fill(ix: np.ndarray, iy: np.ndarray) -> np.ndarray:
    return 1.0 + ix / 100.0 + iy / 1000.0


def random_fill(seed: Optional[int] = None) -> Generator:
    """Uniform values in [0, 0.1), drawn row-major. Seeded from the wall clock when seed is None."""
    if seed is None:
        seed = time.time_ns()
        log.info("random fill seeded from wall clock: %d", seed)
    rng = np.random.default_rng(seed)

    def _gen(ix, iy):
        draws = rng.integers(0, RANDOM_SPAN, size=(ix.shape[0], iy.shape[1]))
        return draws / RANDOM_SCALE

    return _gen


def generate(rows: int, cols: int, fill_mode: str = "deterministic", seed: Optional[int] = None) -> Matrix:
    if fill_mode == "deterministic":
        gen = deterministic_fill
    elif fill_mode == "random":
        gen = random_fill(seed)
    else:
        raise ConfigurationError(f"unknown fill mode {fill_mode!r}; expected one of {FILL_MODES}")
    return Matrix.allocate(rows, cols, zero=False).fill(gen)


def format_matrix(m: Matrix) -> str:
    rows: List[str] = []
    grid = m.view()
    for ix in range(m.rows):
        line = f"Row {ix}: " + "".join(f" {v:10.5G}" for v in grid[ix])
        rows.append(line)
    return "\n".join(rows)


def print_matrix(m: Matrix, title: Optional[str] = None) -> None:
    if title is not None:
        print(f"-------------- {title} ------------------")
    print(format_matrix(m))
