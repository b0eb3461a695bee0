"""Exception hierarchy shared by the pipeline stages."""

from __future__ import annotations


class WarcUrlsError(Exception):
    """Base class for every error raised by warc-urls."""


class FatalError(WarcUrlsError):
    """Errors that abort the whole run."""


class InputOpenError(FatalError):
    """The input container could not be opened."""


class WarcFormatError(FatalError):
    """Unrecoverable framing or decompression failure."""


class ContainerInitError(WarcFormatError):
    """The container (e.g. its gzip header) could not be initialised."""


class TruncatedRecordError(WarcFormatError):
    """Input ended inside a record header or content block."""


class ProfileError(FatalError):
    """The CPU profile output could not be created."""


class SeenStoreError(FatalError):
    """The on-disk deduplication store could not be opened."""


class RecordError(WarcUrlsError):
    """Per-record problem; the record is skipped and the run continues."""

    def __init__(self, message: str, *, index: int | None = None, offset: int | None = None) -> None:
        super().__init__(message)
        self.index = index
        self.offset = offset


class MalformedRecordError(RecordError):
    """Record boundary or version line violates the WARC format."""


class FieldFormatError(RecordError):
    """Record header block cannot be parsed into fields."""


class PipelineCancelled(WarcUrlsError):
    """Raised inside a stage when the run's cancellation token is set."""


__all__ = [
    "ContainerInitError",
    "FatalError",
    "FieldFormatError",
    "InputOpenError",
    "MalformedRecordError",
    "PipelineCancelled",
    "ProfileError",
    "RecordError",
    "SeenStoreError",
    "TruncatedRecordError",
    "WarcFormatError",
    "WarcUrlsError",
]
