"""Record header parsing and target URI extraction."""

from __future__ import annotations

import io

from warcio.statusandheaders import StatusAndHeadersParser, StatusAndHeadersParserException

from ..errors import FieldFormatError

_PARSER = StatusAndHeadersParser(["WARC/"], verify=True)
_TRIM_CHARS = " \t"


def _header_block(raw: bytes) -> bytes:
    for separator in (b"\r\n\r\n", b"\n\n"):
        head, found, _ = raw.partition(separator)
        if found:
            return head
    return raw


def _check_structure(raw: bytes) -> None:
    for line in _header_block(raw).split(b"\n")[1:]:
        line = line.rstrip(b"\r")
        if not line or line[:1] in (b" ", b"\t"):
            continue
        if b":" not in line:
            raise FieldFormatError(f"header line without separator: {line[:40]!r}")


def parse_fields(raw: bytes) -> dict[str, str]:
    """Parse the WARC header block of ``raw`` into a name -> value mapping.

    Names keep their case. When a name repeats, the first value wins.
    """

    _check_structure(raw)
    try:
        parsed = _PARSER.parse(io.BytesIO(raw))
    except StatusAndHeadersParserException as exc:
        raise FieldFormatError(str(exc)) from exc
    except EOFError as exc:
        raise FieldFormatError("record is empty") from exc

    fields: dict[str, str] = {}
    for name, value in parsed.headers:
        fields.setdefault(name, value)
    if not fields:
        raise FieldFormatError("record has no header fields")
    return fields


def extract_target_uri(fields: dict[str, str], field_name: str) -> str | None:
    """Return the trimmed field value with a trailing newline, or ``None`` if blank."""

    value = fields.get(field_name, "").strip(_TRIM_CHARS)
    if not value:
        return None
    return value + "\n"


__all__ = ["extract_target_uri", "parse_fields"]
