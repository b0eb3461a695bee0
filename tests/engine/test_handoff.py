from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from warc_urls.engine.handoff import HandOffQueue
from warc_urls.errors import PipelineCancelled


def test_close_reaches_every_consumer() -> None:
    cancel = threading.Event()
    handoff: HandOffQueue[int] = HandOffQueue(2, cancel, poll_interval=0.01)

    with ThreadPoolExecutor(max_workers=3) as executor:
        futures = [executor.submit(lambda: list(handoff)) for _ in range(3)]
        for item in range(10):
            handoff.put(item)
        handoff.close()
        results = [future.result(timeout=5) for future in futures]

    delivered = sorted(item for result in results for item in result)
    assert delivered == list(range(10))


def test_put_after_close_is_rejected() -> None:
    handoff: HandOffQueue[int] = HandOffQueue(1, threading.Event())
    handoff.close()
    handoff.close()
    assert handoff.closed
    with pytest.raises(RuntimeError):
        handoff.put(1)


def test_full_queue_blocks_until_cancelled() -> None:
    cancel = threading.Event()
    handoff: HandOffQueue[int] = HandOffQueue(1, cancel, poll_interval=0.01)
    handoff.put(1)

    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    with pytest.raises(PipelineCancelled):
        handoff.put(2)
    timer.join()


def test_iteration_stops_on_cancel() -> None:
    cancel = threading.Event()
    handoff: HandOffQueue[int] = HandOffQueue(1, cancel, poll_interval=0.01)
    cancel.set()
    assert list(handoff) == []


def test_queue_requires_bounded_capacity() -> None:
    with pytest.raises(ValueError):
        HandOffQueue(0, threading.Event())
