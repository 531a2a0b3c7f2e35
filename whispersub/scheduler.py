"""Bounded-concurrency execution of pipeline tasks."""

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

class TaskScheduler:
    """
    Runs callables on a pool of at most ``max_concurrency`` workers.

    Tasks start in submission order. Results are returned in submission
    order too, whatever order the tasks finish in. Once any task fails, no
    further task body starts; the failure is re-raised after the running
    tasks finish.
    """

    def __init__(self, max_concurrency: int = 1, name: str = "whispersub"):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.name = name

    def _guarded(self, task: Callable[[], T], failed: threading.Event) -> Callable[[], T]:
        def run() -> T:
            # Set by a failing task before its worker can pick up the next one
            if failed.is_set():
                raise CancelledError()
            try:
                return task()
            except BaseException:
                failed.set()
                raise
        return run

    def run(self, tasks: Sequence[Callable[[], T]]) -> List[T]:
        if not tasks:
            return []

        logger.debug(f"[{self.name}] Scheduling {len(tasks)} task(s) with concurrency {self.max_concurrency}")
        failed = threading.Event()
        executor = ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix=self.name)
        futures = [executor.submit(self._guarded(task, failed)) for task in tasks]
        try:
            results = [future.result() for future in futures]
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results
