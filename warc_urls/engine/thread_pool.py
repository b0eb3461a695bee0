"""Thread pool abstraction giving each pipeline stage its own executor."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable, Dict, Optional

TaskWrapper = Callable[[Callable[..., Any]], Callable[..., Any]]


class ThreadPoolManager:
    """Manage one executor per pipeline stage.

    ``task_wrapper`` is applied to every callable passed to :meth:`submit`,
    e.g. to run it under a per-thread profiler.
    """

    def __init__(
        self, thread_name_prefix: str = "warc-urls", task_wrapper: Optional[TaskWrapper] = None
    ) -> None:
        self.thread_name_prefix = thread_name_prefix
        self.task_wrapper = task_wrapper
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, stage: str, max_workers: int = 1) -> ThreadPoolExecutor:
        """Return the executor for ``stage``, creating it on first use.

        ``max_workers`` only applies when the executor is created.
        """

        with self._lock:
            if stage not in self._executors:
                self._executors[stage] = ThreadPoolExecutor(
                    max_workers=max_workers, thread_name_prefix=f"{self.thread_name_prefix}-{stage}"
                )
            return self._executors[stage]

    def submit(self, stage: str, fn: Callable[..., Any], *args: Any, max_workers: int = 1) -> Future:
        if self.task_wrapper is not None:
            fn = self.task_wrapper(fn)
        return self.get(stage, max_workers=max_workers).submit(fn, *args)

    def stages(self) -> list[str]:
        with self._lock:
            return list(self._executors)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executors = list(self._executors.values())
            self._executors.clear()
        for executor in executors:
            executor.shutdown(wait=wait)


__all__ = ["ThreadPoolManager"]
