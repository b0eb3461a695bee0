import io

from warc_urls.engine.exporter import FileExporter, StreamExporter


def test_file_exporter_writes_lines_verbatim(tmp_path):
    path = tmp_path / "out" / "urls.txt"
    exporter = FileExporter(path)
    exporter.export("http://example.com/\n")
    exporter.export_many(["http://example.com/é\n", "http://example.org/\n"])
    exporter.flush()
    exporter.close()
    exporter.close()
    assert path.read_bytes() == "http://example.com/\nhttp://example.com/é\nhttp://example.org/\n".encode("utf-8")
    assert exporter.lines_written == 3


def test_file_exporter_replaces_previous_output(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text("stale\n", encoding="utf-8")
    exporter = FileExporter(path)
    exporter.export("fresh\n")
    exporter.close()
    assert path.read_text(encoding="utf-8") == "fresh\n"


def test_stream_exporter_text_stream():
    stream = io.StringIO()
    exporter = StreamExporter(stream)
    exporter.export("http://example.com/\n")
    exporter.close()
    assert stream.getvalue() == "http://example.com/\n"


def test_stream_exporter_encodes_utf8_to_buffer():
    raw = io.BytesIO()
    stream = io.TextIOWrapper(raw, encoding="latin-1")
    exporter = StreamExporter(stream)
    exporter.export("http://例え.jp/\n")
    exporter.flush()
    assert raw.getvalue() == "http://例え.jp/\n".encode("utf-8")
