"""
engine.py
---------
Thread pool orchestration for the product and power engines.

Per request: partition the result cells, start one thread per partition,
join them all, hand back the result buffer. Threads are never reused across
requests.

Power rounds, per worker:
  WORKING     square its cells of buffers.current into buffers.next
  AT_BARRIER  worker 0 decrements `remaining`, then everyone waits
              (the barrier action publishes `remaining` and swaps the buffers
              while all parties are parked)
  CONTINUING  observed > 0 -> same partition, next round
  DONE        observed <= 0 -> return
"""

import logging
from dataclasses import dataclass, field
from threading import Barrier, BrokenBarrierError, Lock, Thread
from typing import Callable, List, Optional

from . import kernels
from .config import DEFAULT_WORKERS, PowerRequest, ProductRequest, Request
from .errors import ResourceError
from .matrix import Matrix
from .partition import Partition, partition
from .trace import RoundRecorder

log = logging.getLogger(__name__)

DISTINGUISHED_WORKER = 0


class RoundBuffers:
    """
    Source/destination pair for one squaring round.

    With rotate=True the two handles swap after every round, so round k+1
    squares what round k produced. With rotate=False the source stays the
    original input and every round rewrites the same destination.
    """

    def __init__(self, current: Matrix, nxt: Matrix, rotate: bool):
        self.current = current
        self.next = nxt
        self.rotate = rotate

    def swap(self) -> None:
        if self.rotate:
            self.current, self.next = self.next, self.current

    @property
    def latest(self) -> Matrix:
        return self.current if self.rotate else self.next


class RoundState:
    def __init__(self, rounds: int, buffers: RoundBuffers):
        self.remaining = rounds  # written by DISTINGUISHED_WORKER only
        self.observed = rounds   # written by the barrier action only
        self.completed = 0
        self.buffers = buffers

    def publish(self) -> None:
        # barrier action: runs once per round with every worker parked
        self.observed = self.remaining
        self.completed += 1
        self.buffers.swap()


@dataclass
class _Job:
    parts: List[Partition]
    barrier: Optional[Barrier] = None
    recorder: Optional[RoundRecorder] = None
    errors: List[Exception] = field(default_factory=list)
    lock: Lock = field(default_factory=Lock)

    def fail(self, exc: Exception) -> None:
        with self.lock:
            self.errors.append(exc)
        self.abort()

    def abort(self) -> None:
        if self.barrier is not None:
            self.barrier.abort()


@dataclass
class _ProductJob(_Job):
    a: Matrix = None
    b: Matrix = None
    c: Matrix = None


@dataclass
class _PowerJob(_Job):
    n: int = 0
    state: RoundState = None


def _product_worker(job: _ProductJob, part: Partition) -> None:
    if job.recorder is not None:
        job.recorder.round_started(part.worker, 0)
    kernels.product_partition(
        job.a.data, job.b.data, job.c.data, job.a.cols, job.c.cols, part.start, part.count
    )
    if job.recorder is not None:
        job.recorder.round_finished(part.worker, 0)


def _power_worker(job: _PowerJob, part: Partition) -> None:
    state = job.state
    rnd = 0
    while True:
        src, dst = state.buffers.current, state.buffers.next
        if job.recorder is not None:
            job.recorder.round_started(part.worker, rnd)
        kernels.square_partition(src.data, dst.data, job.n, part.start, part.count)
        if job.recorder is not None:
            job.recorder.round_finished(part.worker, rnd)

        if part.worker == DISTINGUISHED_WORKER:
            state.remaining -= 1
        job.barrier.wait()

        if state.observed <= 0:
            log.debug("worker %d done after %d rounds", part.worker, rnd + 1)
            return
        rnd += 1


def _run_worker(job: _Job, target: Callable, part: Partition) -> None:
    try:
        target(job, part)
    except BrokenBarrierError:
        # a peer failed or was never started; it owns the error report
        log.debug("worker %d released by aborted barrier", part.worker)
    except Exception as exc:
        log.error("worker %d failed: %r", part.worker, exc)
        job.fail(exc)


def _spawn_and_join(job: _Job, target: Callable, name: str) -> None:
    threads: List[Thread] = []
    try:
        for part in job.parts:
            t = Thread(target=_run_worker, args=(job, target, part), name=f"{name}-{part.worker}", daemon=True)
            t.start()
            threads.append(t)
    except (RuntimeError, MemoryError) as exc:
        job.abort()
        raise ResourceError(f"can't create thread {len(threads)}") from exc
    finally:
        for t in threads:
            t.join()
    log.debug("%s: joined %d workers", name, len(threads))
    if job.errors:
        raise job.errors[0]


def _run_product(request: ProductRequest, num_workers: int, recorder: Optional[RoundRecorder]) -> Matrix:
    rows, cols = request.result_shape
    parts = partition(rows * cols, num_workers)
    log.info("product %dx%d @ %dx%d on %d workers (requested %d)",
             request.a.rows, request.a.cols, request.b.rows, request.b.cols, len(parts), num_workers)
    c = Matrix.allocate(rows, cols, zero=False)
    job = _ProductJob(parts=parts, recorder=recorder, a=request.a, b=request.b, c=c)
    _spawn_and_join(job, _product_worker, "matmul")
    return c


def _run_power(request: PowerRequest, num_workers: int, recorder: Optional[RoundRecorder]) -> Matrix:
    n = request.a.rows
    parts = partition(n * n, num_workers)
    log.info("power %dx%d, %d rounds (%s) on %d workers (requested %d)",
             n, n, request.rounds, request.squaring, len(parts), num_workers)
    out = Matrix.allocate(n, n, zero=False)
    if request.squaring == "accumulate":
        current = Matrix.allocate(n, n, zero=False)
        current.data[:] = request.a.data
        buffers = RoundBuffers(current, out, rotate=True)
    else:
        buffers = RoundBuffers(request.a, out, rotate=False)

    state = RoundState(request.rounds, buffers)
    barrier = Barrier(len(parts), action=state.publish)
    job = _PowerJob(parts=parts, barrier=barrier, recorder=recorder, n=n, state=state)
    _spawn_and_join(job, _power_worker, "matsquare")
    log.debug("power: %d rounds completed", state.completed)
    return buffers.latest


def run(request: Request, num_workers: int = DEFAULT_WORKERS, recorder: Optional[RoundRecorder] = None) -> Matrix:
    """Run one request on a fresh pool of num_workers threads (clamped to the cell count)."""
    if isinstance(request, PowerRequest):
        request.validate()
        return _run_power(request, num_workers, recorder)
    if isinstance(request, ProductRequest):
        request.validate()
        return _run_product(request, num_workers, recorder)
    raise TypeError(f"unsupported request {type(request).__name__}")


def matmul(a: Matrix, b: Matrix, num_workers: int = DEFAULT_WORKERS, recorder: Optional[RoundRecorder] = None) -> Matrix:
    return run(ProductRequest(a, b), num_workers, recorder)


def matpower(
    a: Matrix,
    rounds: int,
    num_workers: int = DEFAULT_WORKERS,
    squaring: str = "accumulate",
    recorder: Optional[RoundRecorder] = None,
) -> Matrix:
    return run(PowerRequest(a, rounds, squaring), num_workers, recorder)
