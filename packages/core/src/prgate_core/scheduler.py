"""Serial-per-PR, parallel-across-PRs execution of reconciliation passes.

Command replay is order-sensitive, so two passes over the same PR must never
overlap. Passes over different PRs share no state and run in a thread pool.
A pass still waiting for its PR's lock when a newer pass for the same PR is
submitted is superseded: it returns None without running, because the newer
pass will observe at least as much history.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _PullRequestSlot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    generation: int = 0


class PassScheduler(Generic[T]):
    def __init__(self, run: Callable[[int], T], max_workers: int = 4):
        self._run = run
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="prgate-pass")
        self._slots: dict[int, _PullRequestSlot] = {}
        self._guard = threading.Lock()

    def submit(self, pr_number: int) -> Future:
        """Queue a pass for ``pr_number`` and supersede any pass still queued for it."""
        with self._guard:
            slot = self._slots.setdefault(pr_number, _PullRequestSlot())
            slot.generation += 1
            generation = slot.generation
        return self._executor.submit(self._run_serially, pr_number, slot, generation)

    def _run_serially(self, pr_number: int, slot: _PullRequestSlot, generation: int) -> T | None:
        with slot.lock:
            with self._guard:
                superseded = slot.generation != generation
            if superseded:
                logger.debug("Pass %d for #%d superseded before it started", generation, pr_number)
                return None
            return self._run(pr_number)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> PassScheduler[T]:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
