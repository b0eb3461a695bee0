from __future__ import annotations

import io
from pathlib import Path

import pytest

from warc_urls.config import DedupStrategy, DeduplicationConfig
from warc_urls.engine.exporter import StreamExporter
from warc_urls.errors import ContainerInitError, InputOpenError, TruncatedRecordError
from warc_urls.orchestrator import Orchestrator


def _run(config) -> tuple[list[str], object]:
    output = io.StringIO()
    summary = Orchestrator(config, poll_interval=0.01).run(StreamExporter(output))
    return output.getvalue().splitlines(keepends=True), summary


def test_single_worker_preserves_container_order(write_warc, warc_record, extract_config) -> None:
    targets = [f"http://example.com/{i}" for i in range(20)]
    path = write_warc([warc_record(target) for target in targets])

    lines, summary = _run(extract_config(path, concurrency=1))

    assert lines == [target + "\n" for target in targets]
    assert summary.records == 20
    assert summary.written == 20


@pytest.mark.parametrize("concurrency", [1, 3, 8])
def test_duplicates_written_once_for_any_concurrency(
    write_warc, warc_record, extract_config, concurrency: int
) -> None:
    targets = ["http://a/", "http://b/", " http://a/", "http://c/\t", "http://b/"] * 10
    path = write_warc([warc_record(target) for target in targets])

    lines, summary = _run(extract_config(path, concurrency=concurrency))

    assert sorted(lines) == ["http://a/\n", "http://b/\n", "http://c/\n"]
    assert summary.records == 50
    assert summary.forwarded == 50
    assert summary.received == summary.forwarded
    assert summary.duplicates == 47


def test_backpressure_with_tiny_queues(write_warc, warc_record, extract_config) -> None:
    targets = [f"http://example.com/{i}" for i in range(200)]
    path = write_warc([warc_record(target) for target in targets])

    lines, summary = _run(extract_config(path, concurrency=4, queue_size=1))

    assert sorted(lines) == sorted(target + "\n" for target in targets)
    assert summary.records == 200
    assert summary.received == 200


def test_malformed_frames_are_skipped_and_logged(
    write_warc, warc_record, extract_config, warning_events
) -> None:
    records = [
        warc_record("http://ok-1/"),
        warc_record("http://bad-1/", content_length=False),
        warc_record("http://ok-2/"),
        warc_record("http://bad-2/", content_length=False),
        warc_record("http://ok-3/"),
    ]
    path = write_warc(records)

    lines, summary = _run(extract_config(path, concurrency=2))

    assert sorted(lines) == ["http://ok-1/\n", "http://ok-2/\n", "http://ok-3/\n"]
    assert summary.records == 3
    assert summary.malformed == 2
    warnings = warning_events("record_frame_malformed")
    assert [entry["record_index"] for entry in warnings] == [2, 4]


def test_empty_targets_and_field_errors_produce_no_output(
    write_warc, warc_record, extract_config, warning_events
) -> None:
    records = [
        warc_record(None, record_type="warcinfo"),
        warc_record("   "),
        warc_record("http://kept/"),
        warc_record("http://dropped/", extra_headers=[b"no separator here"]),
    ]
    path = write_warc(records, compress=False, name="plain.warc")

    lines, summary = _run(extract_config(path))

    assert lines == ["http://kept/\n"]
    assert summary.records == 4
    assert summary.empty == 2
    assert summary.field_errors == 1
    assert len(warning_events("record_fields_malformed")) == 1


def test_custom_target_field_and_sqlite_dedup(write_warc, warc_record, extract_config, tmp_path: Path) -> None:
    records = [
        warc_record("http://a/", extra_headers=[b"WARC-Refers-To-Target-URI: http://orig/"]),
        warc_record("http://b/", extra_headers=[b"WARC-Refers-To-Target-URI: http://orig/"]),
        warc_record("http://c/"),
    ]
    path = write_warc(records)
    config = extract_config(
        path,
        target_field="WARC-Refers-To-Target-URI",
        deduplication=DeduplicationConfig(strategy=DedupStrategy.SQLITE, store_path=tmp_path / "seen.db"),
    )

    lines, summary = _run(config)

    assert lines == ["http://orig/\n"]
    assert summary.empty == 1
    assert summary.duplicates == 1


def test_empty_container_completes(write_warc, extract_config) -> None:
    path = write_warc([], compress=False, name="empty.warc")
    lines, summary = _run(extract_config(path, concurrency=3))
    assert lines == []
    assert summary.records == 0


def test_missing_input_is_fatal(tmp_path: Path, extract_config) -> None:
    with pytest.raises(InputOpenError):
        _run(extract_config(tmp_path / "missing.warc.gz", concurrency=2))


def test_corrupt_gzip_header_is_fatal(tmp_path: Path, extract_config) -> None:
    path = tmp_path / "corrupt.warc.gz"
    path.write_bytes(b"\x1f\x8b\x00not really gzip")
    with pytest.raises(ContainerInitError):
        _run(extract_config(path, concurrency=2))


def test_truncated_stream_aborts_without_hanging(write_warc, warc_record, extract_config) -> None:
    records = [warc_record(f"http://example.com/{i}") for i in range(30)]
    records.append(warc_record("http://cut/", body=b"x" * 500)[:-300])
    path = write_warc(records, compress=False, name="truncated.warc")

    with pytest.raises(TruncatedRecordError):
        _run(extract_config(path, concurrency=2, queue_size=1))
