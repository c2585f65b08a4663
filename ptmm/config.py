"""
Request objects handed to the engine, and the benchmark configuration that
produces them from the command line.

Everything here validates eagerly and raises ConfigurationError, so the engine
only ever sees self-consistent requests.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .errors import ConfigurationError
from .matrix import FILL_MODES, Matrix, generate

DEFAULT_WORKERS = 8
SQUARING_MODES = ("accumulate", "original")


@dataclass
class ProductRequest:
    """C = A x B with A rows x inner and B inner x cols."""

    a: Matrix
    b: Matrix

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.a.cols != self.b.rows:
            raise ConfigurationError(
                f"inner dimensions differ: A is {self.a.rows}x{self.a.cols}, B is {self.b.rows}x{self.b.cols}"
            )

    @property
    def result_shape(self) -> Tuple[int, int]:
        return self.a.rows, self.b.cols

    @property
    def flops(self) -> int:
        return 2 * self.a.rows * self.a.cols * self.b.cols


@dataclass
class PowerRequest:
    """
    Square A `rounds` times.

    squaring="accumulate" squares the running result (A^2, A^4, ...);
    squaring="original" squares the untouched input every round.
    """

    a: Matrix
    rounds: int
    squaring: str = "accumulate"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.a.rows != self.a.cols:
            raise ConfigurationError(f"cannot square a {self.a.rows}x{self.a.cols} matrix")
        if self.rounds < 1:
            raise ConfigurationError(f"rounds must be >= 1, got {self.rounds}")
        if self.squaring not in SQUARING_MODES:
            raise ConfigurationError(f"unknown squaring mode {self.squaring!r}; expected one of {SQUARING_MODES}")

    @property
    def result_shape(self) -> Tuple[int, int]:
        return self.a.rows, self.a.rows

    @property
    def flops(self) -> int:
        return 2 * self.a.rows ** 3 * self.rounds


Request = Union[ProductRequest, PowerRequest]


@dataclass(frozen=True)
class BenchConfig:
    x: int = 0
    y: int = 0
    z: int = 0
    rounds: Optional[int] = None
    workers: int = DEFAULT_WORKERS
    fill_mode: str = "deterministic"
    seed: Optional[int] = None
    debug: bool = False
    timed: bool = False
    squaring: str = "accumulate"
    check: bool = False

    @classmethod
    def from_args(cls, args) -> "BenchConfig":
        return cls(
            x=args.x,
            y=args.y,
            z=args.z,
            rounds=args.s,
            workers=args.n,
            fill_mode="random" if args.r else "deterministic",
            seed=args.seed,
            debug=args.d,
            timed=args.T,
            squaring=args.squaring,
            check=args.check,
        )

    @property
    def square(self) -> bool:
        return self.rounds is not None

    def validate(self) -> "BenchConfig":
        if self.square:
            if self.y != 0 or self.z != 0 or self.x <= 0 or self.rounds < 1:
                raise ConfigurationError("Inconsistent options: squaring takes -x and -s >= 1 only")
        elif self.x <= 0 or self.y <= 0 or self.z <= 0:
            raise ConfigurationError("x, y, and z all need to be specified.")
        if self.workers < 1:
            raise ConfigurationError(f"need at least one thread, got -n {self.workers}")
        if self.fill_mode not in FILL_MODES:
            raise ConfigurationError(f"unknown fill mode {self.fill_mode!r}")
        if self.squaring not in SQUARING_MODES:
            raise ConfigurationError(f"unknown squaring mode {self.squaring!r}")
        return self

    def build_request(self) -> Request:
        self.validate()
        if self.square:
            a = generate(self.x, self.x, self.fill_mode, self.seed)
            return PowerRequest(a, self.rounds, self.squaring)
        a = generate(self.x, self.y, self.fill_mode, self.seed)
        # distinct stream for B so A and B differ under a fixed seed
        b_seed = None if self.seed is None else self.seed + 1
        b = generate(self.y, self.z, self.fill_mode, b_seed)
        return ProductRequest(a, b)
