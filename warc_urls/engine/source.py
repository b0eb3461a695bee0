"""Record source: sequential framing of a WARC container into the intake queue."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import InputOpenError, MalformedRecordError, PipelineCancelled
from ..logging_conf import component_logger
from .handoff import HandOffQueue
from .reader import RawRecord, WarcRecordReader


@dataclass
class SourceResult:
    records: int = 0
    malformed: int = 0
    cancelled: bool = False


class RecordSource:
    """Read ``path`` record by record and hand each raw record downstream.

    The intake queue is closed on every exit path. Frame-malformed records
    are logged and skipped; every other framing failure propagates.
    """

    def __init__(self, path: Path, records: HandOffQueue[RawRecord]) -> None:
        self.path = Path(path)
        self.records = records

    def run(self) -> SourceResult:
        result = SourceResult()
        logger = component_logger("source", path=str(self.path))
        try:
            try:
                handle = self.path.open("rb")
            except OSError as exc:
                raise InputOpenError(f"cannot open {self.path}: {exc}") from exc
            with handle:
                reader = WarcRecordReader.from_fileobj(handle)
                while True:
                    try:
                        record = reader.next_raw()
                    except MalformedRecordError as exc:
                        result.malformed += 1
                        logger.warning(
                            "record_frame_malformed",
                            record_index=exc.index,
                            record_offset=exc.offset,
                            error=str(exc),
                        )
                        continue
                    if record is None:
                        break
                    self.records.put(record)
                    result.records += 1
        except PipelineCancelled:
            result.cancelled = True
            logger.info("source_cancelled", records=result.records)
        finally:
            self.records.close()
        logger.debug("source_finished", records=result.records, malformed=result.malformed)
        return result


__all__ = ["RecordSource", "SourceResult"]
