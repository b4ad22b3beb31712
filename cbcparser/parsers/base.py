import csv
import io
import re
from typing import IO, Any, List, NamedTuple, Optional, Protocol, Union

from cbcparser.commons.errors import InsufficientRowsError, InvalidCSVError
from cbcparser.parsers.models import CBCRecord, CBCResults, NormalRange, to_float32

CBCSource = Union[bytes, str, IO]

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
# invalid bytes survive decoding as lone surrogates (surrogateescape)
_INVALID_BYTES_RE = re.compile(r"[\udc80-\udcff]")


class ColumnSpec(NamedTuple):
    """Where a measurement lives in a row and which normal ranges apply to it."""

    field: str
    column: int
    range_key: str
    flag_key: Optional[str] = None  # key used for the H/L comparison, defaults to range_key
    flag_column: Optional[int] = None  # analyzer supplied flag, Human only


class CBCParser(Protocol):
    def parse(self, data: CBCSource, normal_ranges: Any = None) -> CBCRecord: ...

    def parse_multi(self, data: CBCSource, normal_ranges: Any = None) -> CBCResults: ...


def read_text(data: CBCSource) -> str:
    if hasattr(data, "read"):
        data = data.read()
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="surrogateescape")
    return data


def clean_text(value: str, replacement: str = "\ufffd") -> str:
    """Replace every undecodable byte with ``replacement``."""
    return _INVALID_BYTES_RE.sub(replacement, value)


def _check_bare_quotes(text: str, delimiter: str):
    """A quote is only allowed to open a field or inside a quoted field."""
    in_quotes = False
    field_start = True
    line = 1
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\n":
            line += 1
        if in_quotes:
            if ch == '"':
                if text[i + 1 : i + 2] == '"':
                    i += 1
                else:
                    in_quotes = False
        elif ch == '"':
            if not field_start:
                raise InvalidCSVError(f'invalid csv file: line {line}: bare " in non-quoted field')
            in_quotes = True
        field_start = not in_quotes and (ch == delimiter or ch in "\r\n")
        i += 1


def read_rows(data: CBCSource, delimiter: str, nfields: int) -> List[List[str]]:
    """Read the whole export and check its shape.

    Every row must have exactly ``nfields`` columns and there must be a header
    plus at least one data row.
    """
    text = read_text(data)
    _check_bare_quotes(text, delimiter)
    # no cap on cell size
    if len(text) >= csv.field_size_limit():
        csv.field_size_limit(len(text) + 1)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    rows = []
    try:
        for row in reader:
            if not row:
                continue
            if len(row) != nfields:
                raise InvalidCSVError(
                    f"invalid csv file: line {reader.line_num} has {len(row)} fields, expected {nfields}"
                )
            rows.append(row)
    except csv.Error as e:
        raise InvalidCSVError(f"invalid csv file: {e}") from e

    if len(rows) < 2:
        raise InsufficientRowsError()
    return rows


def parse_float(value: str) -> float:
    """Parse a cell as float32; anything unparseable becomes 0.0."""
    if not _NUMBER_RE.fullmatch(value or ""):
        return 0.0
    try:
        return to_float32(float(value))
    except OverflowError:
        return 0.0


def get_flag(value: float, nrange: NormalRange) -> str:
    """Return L or H if value is out of range, otherwise an empty string."""
    if value < nrange.lower:
        return "L"
    if value > nrange.upper:
        return "H"
    return ""


def bind_range(normal_ranges: Any, key: str) -> NormalRange:
    """Copy one entry of the table so the record never shares it."""
    if normal_ranges is None:
        return NormalRange()
    entry = getattr(normal_ranges, key)
    return NormalRange(lower=entry.lower, upper=entry.upper)


def detect_device(data: CBCSource) -> str:
    """Return 'HUMAN' or 'EDAN' from the header line."""
    text = read_text(data)
    header = next((line for line in text.splitlines() if line.strip()), "")
    if "\t" in header:
        return "HUMAN"
    return "EDAN"
