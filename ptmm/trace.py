"""Thread-safe round event log used to check round counts and barrier ordering."""

import threading
import time
from dataclasses import dataclass
from typing import List, Set


@dataclass(frozen=True)
class RoundEvent:
    seq: int
    ns: int
    worker: int
    round: int
    kind: str  # "start" | "finish"


class RoundRecorder:
    def __init__(self):
        self._lock = threading.Lock()
        self.events: List[RoundEvent] = []

    def _record(self, worker: int, rnd: int, kind: str) -> None:
        with self._lock:
            self.events.append(RoundEvent(len(self.events), time.perf_counter_ns(), worker, rnd, kind))

    def round_started(self, worker: int, rnd: int) -> None:
        self._record(worker, rnd, "start")

    def round_finished(self, worker: int, rnd: int) -> None:
        self._record(worker, rnd, "finish")

    def events_for(self, rnd: int, kind: str = None) -> List[RoundEvent]:
        return [e for e in self.events if e.round == rnd and (kind is None or e.kind == kind)]

    def workers(self) -> Set[int]:
        return {e.worker for e in self.events}

    def rounds_run(self, worker: int = 0) -> int:
        return sum(1 for e in self.events if e.worker == worker and e.kind == "finish")
