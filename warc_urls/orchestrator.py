"""Pipeline coordinator wiring source, worker pool and sink together."""

from __future__ import annotations

import time
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Event

from .config import ExtractConfig
from .engine import (
    DeduplicatingSink,
    HandOffQueue,
    RawRecord,
    RecordSource,
    RecordWorkerPool,
    SinkStats,
    SourceResult,
    ThreadPoolManager,
    WorkerStats,
    build_seen_set,
)
from .engine.exporter import BaseExporter
from .logging_conf import component_logger

SOURCE_STAGE = "source"
SINK_STAGE = "sink"


@dataclass(slots=True)
class RunSummary:
    """Aggregate counters for one run, merged after the pipeline drained."""

    records: int
    malformed: int
    field_errors: int
    empty: int
    forwarded: int
    received: int
    written: int
    duplicates: int
    started_at: datetime
    elapsed: float

    @classmethod
    def build(
        cls,
        source: SourceResult,
        workers: WorkerStats,
        sink: SinkStats,
        started_at: datetime,
        elapsed: float,
    ) -> "RunSummary":
        return cls(
            records=source.records,
            malformed=source.malformed,
            field_errors=workers.field_errors,
            empty=workers.empty,
            forwarded=workers.forwarded,
            received=sink.received,
            written=sink.written,
            duplicates=sink.duplicates,
            started_at=started_at,
            elapsed=elapsed,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "records": self.records,
            "malformed": self.malformed,
            "field_errors": self.field_errors,
            "empty": self.empty,
            "forwarded": self.forwarded,
            "received": self.received,
            "written": self.written,
            "duplicates": self.duplicates,
            "started_at": self.started_at.isoformat(),
            "elapsed": self.elapsed,
        }


class Orchestrator:
    """Central coordinator managing the lifecycle of one extraction run.

    Each stage runs as a future on its own executor. A failing stage sets
    the shared cancel event, every blocking queue call observes it, and
    :meth:`run` re-raises the first failure once all stages have returned.
    """

    def __init__(
        self,
        config: ExtractConfig,
        thread_pool: ThreadPoolManager | None = None,
        poll_interval: float = 0.1,
    ) -> None:
        self.config = config
        self.thread_pool = thread_pool or ThreadPoolManager()
        self.poll_interval = poll_interval
        self.logger = component_logger("orchestrator")

    def run(self, exporter: BaseExporter) -> RunSummary:
        cancel = Event()
        done = Event()
        records: HandOffQueue[RawRecord] = HandOffQueue(
            self.config.queue_size, cancel, name="records", poll_interval=self.poll_interval
        )
        urls: HandOffQueue[str] = HandOffQueue(
            self.config.queue_size, cancel, name="urls", poll_interval=self.poll_interval
        )
        source = RecordSource(self.config.input_path, records)
        workers = RecordWorkerPool(
            self.config.concurrency, records, urls, target_field=self.config.target_field
        )
        sink = DeduplicatingSink(urls, build_seen_set(self.config.deduplication), exporter, done)

        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        try:
            source_future = self.thread_pool.submit(SOURCE_STAGE, source.run)
            self._cancel_on_failure(source_future, cancel, SOURCE_STAGE)
            workers_future = workers.start(self.thread_pool)
            self._cancel_on_failure(workers_future, cancel, "workers")
            sink_future = self.thread_pool.submit(SINK_STAGE, sink.run)
            self._cancel_on_failure(sink_future, cancel, SINK_STAGE)

            done.wait()
            elapsed = time.perf_counter() - started

            for future in (source_future, workers_future, sink_future):
                error = future.exception()
                if error is not None:
                    raise error
            summary = RunSummary.build(
                source_future.result(),
                workers_future.result(),
                sink_future.result(),
                started_at,
                elapsed,
            )
        finally:
            cancel.set()
            self.thread_pool.shutdown(wait=True)

        self.logger.info(
            "run_complete",
            records=summary.records,
            written=summary.written,
            elapsed=round(summary.elapsed, 6),
        )
        return summary

    def _cancel_on_failure(self, future: Future, cancel: Event, stage: str) -> None:
        def _callback(done_future: Future) -> None:
            error = done_future.exception()
            if error is not None:
                self.logger.error("stage_failed", stage=stage, error=str(error))
                cancel.set()

        future.add_done_callback(_callback)


__all__ = ["Orchestrator", "RunSummary"]
