"""Engine components wiring framing -> parsing -> dedup -> export."""

from .dedup import DeduplicatingSink, SinkStats, build_seen_set
from .fields import extract_target_uri, parse_fields
from .handoff import HandOffQueue
from .reader import RawRecord, WarcRecordReader, open_container
from .source import RecordSource, SourceResult
from .thread_pool import ThreadPoolManager
from .workers import RecordWorkerPool, WorkerStats

__all__ = [
    "DeduplicatingSink",
    "HandOffQueue",
    "RawRecord",
    "RecordSource",
    "RecordWorkerPool",
    "SinkStats",
    "SourceResult",
    "ThreadPoolManager",
    "WarcRecordReader",
    "WorkerStats",
    "build_seen_set",
    "extract_target_uri",
    "open_container",
    "parse_fields",
]
