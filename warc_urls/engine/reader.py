"""Sequential WARC record framing over plain or gzip-compressed streams."""

from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass
from typing import BinaryIO

from ..errors import ContainerInitError, MalformedRecordError, TruncatedRecordError, WarcFormatError

GZIP_MAGIC = b"\x1f\x8b"
WARC_PREFIX = b"WARC/"
_BLANK_LINES = (b"\r\n", b"\n")
_READ_ERRORS = (OSError, EOFError, zlib.error)


@dataclass(slots=True)
class RawRecord:
    """Undecoded bytes of one WARC record plus its position in the stream."""

    data: bytes
    index: int
    offset: int


def open_container(fileobj: BinaryIO) -> BinaryIO:
    """Return a stream of decompressed WARC bytes for ``fileobj``.

    Gzip input is detected from its magic bytes; anything else is read as
    an uncompressed WARC.
    """

    magic = fileobj.read(len(GZIP_MAGIC))
    fileobj.seek(0)
    if magic != GZIP_MAGIC:
        return fileobj
    stream = gzip.GzipFile(fileobj=fileobj, mode="rb")
    try:
        stream.peek(1)
    except _READ_ERRORS as exc:
        raise ContainerInitError(f"cannot initialise gzip container: {exc}") from exc
    return stream


class WarcRecordReader:
    """Frame raw records one at a time from a decompressed WARC stream.

    ``next_raw`` returns ``None`` at end of input and raises
    :class:`MalformedRecordError` for records that can be skipped; the reader
    then resumes at the next ``WARC/`` line. Any other failure raises a
    :class:`WarcFormatError`.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._pending: bytes | None = None
        self.offset = 0
        self.index = 0

    @classmethod
    def from_fileobj(cls, fileobj: BinaryIO) -> "WarcRecordReader":
        return cls(open_container(fileobj))

    def next_raw(self) -> RawRecord | None:
        line = self._readline()
        while line in _BLANK_LINES:
            line = self._readline()
        if not line:
            return None

        start = self.offset - len(line)
        self.index += 1
        if not line.startswith(WARC_PREFIX):
            self._resync()
            raise MalformedRecordError(
                f"expected WARC version line, found {line[:32]!r}", index=self.index, offset=start
            )

        header = [line]
        content_length: int | None = None
        while True:
            line = self._readline()
            if not line:
                raise TruncatedRecordError(
                    f"input ended inside header of record {self.index} at offset {start}"
                )
            header.append(line)
            if line in _BLANK_LINES:
                break
            name, sep, value = line.partition(b":")
            if sep and name.strip().lower() == b"content-length":
                try:
                    content_length = int(value.strip())
                except ValueError:
                    content_length = -1

        if content_length is None or content_length < 0:
            self._resync()
            raise MalformedRecordError(
                "missing or invalid Content-Length", index=self.index, offset=start
            )

        block = self._read_exact(content_length, start)

        trailer = []
        for _ in range(2):
            line = self._readline()
            if line not in _BLANK_LINES:
                if line:
                    self._pending = line
                    self._resync()
                raise MalformedRecordError(
                    "record is not terminated by CRLF CRLF", index=self.index, offset=start
                )
            trailer.append(line)

        return RawRecord(b"".join(header) + block + b"".join(trailer), self.index, start)

    def _readline(self) -> bytes:
        if self._pending is not None:
            line, self._pending = self._pending, None
            return line
        try:
            line = self._stream.readline()
        except _READ_ERRORS as exc:
            raise WarcFormatError(f"read failed at offset {self.offset}: {exc}") from exc
        self.offset += len(line)
        return line

    def _read_exact(self, size: int, start: int) -> bytes:
        chunks: list[bytes] = []
        remaining = size
        while remaining:
            try:
                chunk = self._stream.read(remaining)
            except _READ_ERRORS as exc:
                raise WarcFormatError(f"read failed at offset {self.offset}: {exc}") from exc
            if not chunk:
                raise TruncatedRecordError(
                    f"input ended inside content block of record {self.index} at offset {start}"
                )
            self.offset += len(chunk)
            remaining -= len(chunk)
            chunks.append(chunk)
        return b"".join(chunks)

    def _resync(self) -> None:
        # skip to the next line that looks like a version line and keep it for next_raw
        while True:
            line = self._readline()
            if not line:
                return
            if line.startswith(WARC_PREFIX):
                self._pending = line
                return


__all__ = ["GZIP_MAGIC", "RawRecord", "WarcRecordReader", "open_container"]
