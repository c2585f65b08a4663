import time
from dataclasses import dataclass


@dataclass
class Timing:
    cpu_s: float = 0.0
    wall_s: float = 0.0

    def gflops(self, flops: int) -> float:
        return flops / self.wall_s / 1e9 if self.wall_s > 0 else float("inf")


class Stopwatch:
    """Process CPU time and wall-clock time around a block."""

    def __init__(self):
        self.timing = Timing()

    def __enter__(self) -> Timing:
        self._cpu0 = time.process_time()
        self._t0 = time.perf_counter()
        return self.timing

    def __exit__(self, *exc):
        self.timing.wall_s = time.perf_counter() - self._t0
        self.timing.cpu_s = time.process_time() - self._cpu0
        return False


def format_timing(timing: Timing, flops: int) -> str:
    return (
        f"\n  cpu time: {timing.cpu_s:f}\n"
        f"clock time: {timing.wall_s:f}\n"
        f"throughput: {timing.gflops(flops):8.3f} Gflop/s"
    )
