"""Bounded producer/consumer hand-off between pipeline stages."""

from __future__ import annotations

import queue
from threading import Event, Lock
from typing import Generic, Iterator, TypeVar

from ..errors import PipelineCancelled

T = TypeVar("T")

_CLOSED = object()


class HandOffQueue(Generic[T]):
    """Bounded queue with downstream close propagation and cooperative cancel.

    Producers block on ``put`` while the queue is full. ``close`` enqueues a
    single sentinel; a consumer that takes it puts it back so every sibling
    consumer sees the closure. All blocking calls wake up every
    ``poll_interval`` seconds to observe the shared ``cancel`` event.
    """

    def __init__(
        self,
        maxsize: int,
        cancel: Event,
        *,
        name: str = "handoff",
        poll_interval: float = 0.1,
    ) -> None:
        if maxsize < 1:
            raise ValueError("HandOffQueue requires a bounded capacity >= 1")
        self.name = name
        self.maxsize = maxsize
        self.poll_interval = poll_interval
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._cancel = cancel
        self._closed = False
        self._lock = Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def put(self, item: T) -> None:
        if self._closed:
            raise RuntimeError(f"put on closed queue {self.name!r}")
        self._put(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._put(_CLOSED)
        except PipelineCancelled:
            # consumers stop on the cancel event instead
            pass

    def __iter__(self) -> Iterator[T]:
        while True:
            if self._cancel.is_set():
                return
            try:
                item = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            if item is _CLOSED:
                self._queue.put(_CLOSED)
                return
            yield item

    def _put(self, item: object) -> None:
        while True:
            if self._cancel.is_set():
                raise PipelineCancelled(f"queue {self.name!r} cancelled")
            try:
                self._queue.put(item, timeout=self.poll_interval)
                return
            except queue.Full:
                continue


__all__ = ["HandOffQueue"]
