"""Exporters writing URI lines to files or already open streams."""

from __future__ import annotations

from pathlib import Path
from typing import IO

from .base import BaseExporter

OUTPUT_ENCODING = "utf-8"


class StreamExporter(BaseExporter):
    """Write lines to an open text stream such as ``sys.stdout``.

    When the stream exposes a binary ``buffer`` the lines are encoded as
    UTF-8 and written there, whatever the stream's own encoding is. The
    stream is never closed here, only flushed.
    """

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self._binary = getattr(stream, "buffer", None)
        if self._binary is not None:
            stream.flush()

    def export(self, line: str) -> None:
        if self._binary is not None:
            self._binary.write(line.encode(OUTPUT_ENCODING))
        else:
            self.stream.write(line)

    def flush(self) -> None:
        if self._binary is not None:
            self._binary.flush()
        self.stream.flush()

    def close(self) -> None:
        self.flush()


class FileExporter(BaseExporter):
    """Write lines to a local UTF-8 file, replacing previous content."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps "\n" untranslated on every platform
        self._file = self.path.open("w", encoding=OUTPUT_ENCODING, newline="")
        self.lines_written = 0

    def export(self, line: str) -> None:
        self._file.write(line)
        self.lines_written += 1

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


__all__ = ["FileExporter", "OUTPUT_ENCODING", "StreamExporter"]
