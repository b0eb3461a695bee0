"""Pytest configuration providing WARC builders and shared fixtures."""

from __future__ import annotations

import gzip
import itertools
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

import pytest
import structlog

from warc_urls.config import ExtractConfig

_record_ids = itertools.count(1)


def _build_record(
    target: str | None = "http://example.com/",
    *,
    record_type: str = "response",
    body: bytes = b"HTTP/1.1 200 OK\r\n\r\nhello",
    content_length: bool = True,
    extra_headers: Iterable[bytes] = (),
    version: bytes = b"WARC/1.0",
) -> bytes:
    headers = [
        version,
        b"WARC-Type: " + record_type.encode("ascii"),
        b"WARC-Record-ID: <urn:uuid:00000000-0000-0000-0000-%012d>" % next(_record_ids),
    ]
    if target is not None:
        headers.append(b"WARC-Target-URI: " + target.encode("utf-8"))
    headers.extend(extra_headers)
    if content_length:
        headers.append(b"Content-Length: %d" % len(body))
    return b"\r\n".join(headers) + b"\r\n\r\n" + body + b"\r\n\r\n"


@pytest.fixture
def warc_record() -> Callable[..., bytes]:
    """Return a builder for one serialised WARC record."""

    return _build_record


@pytest.fixture
def write_warc(tmp_path: Path) -> Callable[..., Path]:
    def _writer(records: Iterable[bytes], name: str = "sample.warc.gz", compress: bool = True) -> Path:
        path = tmp_path / name
        if compress:
            # one gzip member per record, as crawlers write them
            data = b"".join(gzip.compress(record) for record in records)
        else:
            data = b"".join(records)
        path.write_bytes(data)
        return path

    return _writer


@pytest.fixture
def extract_config(tmp_path: Path) -> Callable[..., ExtractConfig]:
    def _builder(input_path: Path, **overrides: Any) -> ExtractConfig:
        base: dict[str, Any] = {"input_path": input_path, "concurrency": 1, "queue_size": 4}
        base.update(overrides)
        return ExtractConfig(**base)

    return _builder


@pytest.fixture(autouse=True)
def captured_logs() -> Iterator[list[dict[str, Any]]]:
    """Capture structlog events so tests can assert on warnings."""

    with structlog.testing.capture_logs() as logs:
        yield logs


def warnings_for(logs: list[dict[str, Any]], event: str) -> list[dict[str, Any]]:
    return [entry for entry in logs if entry.get("event") == event and entry.get("log_level") == "warning"]


@pytest.fixture
def warning_events(captured_logs: list[dict[str, Any]]) -> Callable[[str], list[dict[str, Any]]]:
    return lambda event: warnings_for(captured_logs, event)
