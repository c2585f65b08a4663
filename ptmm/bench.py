"""
bench.py
--------
Command line driver: generate the input(s), run the threaded product or power
engine, optionally print the matrices, time the computation call and compare
against the serial reference.

Usage:
  python -m ptmm.bench -x 200 -y 300 -z 100 -n 8 -T
  python -m ptmm.bench -x 128 -s 4 -n 4 -r --seed 7 --check
  python -m ptmm.bench -x 3 -y 2 -z 3 -d
"""

from __future__ import annotations

import argparse
import logging
from typing import Dict

import numpy as np

from . import engine, kernels, reference
from .config import DEFAULT_WORKERS, SQUARING_MODES, BenchConfig, PowerRequest, Request
from .errors import ConfigurationError
from .matrix import Matrix, print_matrix
from .timing import Stopwatch, format_timing

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ptmm-bench",
        description="Threaded naive matrix multiply / repeated squaring benchmark.",
    )
    parser.add_argument("-d", action="store_true", help="Debug: print the input(s) and the result.")
    parser.add_argument("-r", action="store_true", help="Fill with random values in [0, 0.1).")
    parser.add_argument("-s", type=int, default=None, metavar="T", help="Square the -x by -x matrix T times.")
    parser.add_argument("-x", type=int, default=0, help="Rows of A (rows and cols when squaring).")
    parser.add_argument("-y", type=int, default=0, help="Cols of A, rows of B.")
    parser.add_argument("-z", type=int, default=0, help="Cols of B.")
    parser.add_argument("-n", type=int, default=DEFAULT_WORKERS, help="Worker threads.")
    parser.add_argument("-T", action="store_true", help="Report CPU and wall-clock time of the computation.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for -r (default: wall clock).")
    parser.add_argument(
        "--squaring",
        choices=SQUARING_MODES,
        default="accumulate",
        help="accumulate: A^2, A^4, ... ; original: square the input every round.",
    )
    parser.add_argument("--check", action="store_true", help="Compare with the single-threaded reference.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    return parser


def serial_result(request: Request) -> Matrix:
    if isinstance(request, PowerRequest):
        if request.squaring == "accumulate":
            return reference.matsquare(request.a, request.rounds)
        return reference.matsquare_original(request.a, request.rounds)
    return reference.matmul(request.a, request.b)


def run_benchmark(config: BenchConfig) -> Dict:
    request = config.build_request()
    kernels.warmup()

    with Stopwatch() as timing:
        result = engine.run(request, config.workers)
    log.info("computation: %.6fs wall, %.6fs cpu", timing.wall_s, timing.cpu_s)

    out = {"request": request, "result": result, "timing": timing, "matches_reference": None}
    if config.check:
        expected = serial_result(request)
        out["matches_reference"] = bool(np.array_equal(result.data, expected.data))
    return out


def report(config: BenchConfig, out: Dict) -> None:
    request = out["request"]
    if config.debug:
        if isinstance(request, PowerRequest):
            print_matrix(request.a, "original matrix")
        else:
            print_matrix(request.a, "original A matrix")
            print_matrix(request.b, "original B matrix")
        print_matrix(out["result"], "result matrix" if isinstance(request, PowerRequest) else "result C matrix")
    if config.timed:
        print(format_timing(out["timing"], request.flops))
    if out["matches_reference"] is not None:
        print(f"reference check: {'ok' if out['matches_reference'] else 'MISMATCH'}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
    )

    try:
        config = BenchConfig.from_args(args).validate()
    except ConfigurationError as exc:
        parser.error(str(exc))

    out = run_benchmark(config)
    report(config, out)
    if out["matches_reference"] is False:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
