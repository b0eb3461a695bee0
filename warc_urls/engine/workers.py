"""Worker pool parsing raw records and forwarding target URIs."""

from __future__ import annotations

from concurrent.futures import Future, wait
from dataclasses import dataclass

from ..config import DEFAULT_TARGET_FIELD
from ..errors import FieldFormatError, PipelineCancelled
from ..logging_conf import component_logger
from .fields import extract_target_uri, parse_fields
from .handoff import HandOffQueue
from .reader import RawRecord
from .thread_pool import ThreadPoolManager

WORKERS_STAGE = "workers"
BARRIER_STAGE = "workers-barrier"


@dataclass
class WorkerStats:
    records: int = 0
    field_errors: int = 0
    empty: int = 0
    forwarded: int = 0

    def merge(self, other: "WorkerStats") -> "WorkerStats":
        return WorkerStats(
            records=self.records + other.records,
            field_errors=self.field_errors + other.field_errors,
            empty=self.empty + other.empty,
            forwarded=self.forwarded + other.forwarded,
        )


class RecordWorkerPool:
    """Fixed pool of workers racing on a shared intake.

    The URI queue is closed by a barrier task that waits for every worker
    future, so downstream sees closure only after the last worker returned.
    """

    def __init__(
        self,
        concurrency: int,
        records: HandOffQueue[RawRecord],
        urls: HandOffQueue[str],
        target_field: str = DEFAULT_TARGET_FIELD,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be a positive integer")
        self.concurrency = concurrency
        self.records = records
        self.urls = urls
        self.target_field = target_field
        self.futures: list[Future[WorkerStats]] = []

    def start(self, pools: ThreadPoolManager) -> Future[WorkerStats]:
        """Launch the workers and return the barrier's future (merged stats)."""

        if self.futures:
            raise RuntimeError("worker pool already started")
        self.futures = [
            pools.submit(WORKERS_STAGE, self._work, worker_id, max_workers=self.concurrency)
            for worker_id in range(self.concurrency)
        ]
        return pools.submit(BARRIER_STAGE, self._close_when_done)

    def _close_when_done(self) -> WorkerStats:
        try:
            wait(self.futures)
        finally:
            self.urls.close()
        total = WorkerStats()
        for future in self.futures:
            total = total.merge(future.result())
        component_logger("workers").debug(
            "workers_finished",
            workers=self.concurrency,
            records=total.records,
            forwarded=total.forwarded,
        )
        return total

    def _work(self, worker_id: int) -> WorkerStats:
        stats = WorkerStats()
        logger = component_logger("worker", worker=worker_id)
        try:
            for record in self.records:
                stats.records += 1
                try:
                    fields = parse_fields(record.data)
                except FieldFormatError as exc:
                    stats.field_errors += 1
                    logger.warning(
                        "record_fields_malformed",
                        record_index=record.index,
                        record_offset=record.offset,
                        error=str(exc),
                    )
                    continue
                target = extract_target_uri(fields, self.target_field)
                if target is None:
                    stats.empty += 1
                    continue
                self.urls.put(target)
                stats.forwarded += 1
        except PipelineCancelled:
            logger.info("worker_cancelled", records=stats.records)
        return stats


__all__ = ["BARRIER_STAGE", "RecordWorkerPool", "WORKERS_STAGE", "WorkerStats"]
