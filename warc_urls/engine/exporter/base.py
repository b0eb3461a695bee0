"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class BaseExporter(ABC):
    """Uniform exporter contract for the sink's output."""

    @abstractmethod
    def export(self, line: str) -> None:
        """Write a single newline-terminated URI verbatim."""

    def export_many(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.export(line)

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BaseExporter"]
