from typing import Any, List, Optional

from cbcparser.commons.errors import BlankRecordError

from .base import CBCSource, ColumnSpec, bind_range, clean_text, parse_float, read_rows
from .models import CBCResults, CBCValue, HumanCBCResult

NFIELDS = 52
SEPARATOR = "\t"

# Sample ID, Date, Time, Patient ID, Birth date, then "<NAME> <UNIT>" / "<NAME> flag"
# pairs from column 5 to 48, then Type and Warning.
COLUMNS = (
    ColumnSpec("wbc", 5, "wbc", flag_column=6),
    ColumnSpec("lym", 7, "lym", flag_column=8),
    ColumnSpec("mid", 9, "mid", flag_column=10),
    ColumnSpec("gra", 11, "gra", flag_column=12),
    ColumnSpec("lym_percent", 13, "lym_percent", flag_column=14),
    ColumnSpec("mid_percent", 15, "mid_percent", flag_column=16),
    ColumnSpec("gra_percent", 17, "gra_percent", flag_column=18),
    ColumnSpec("rbc", 19, "rbc", flag_column=20),
    ColumnSpec("hgb", 21, "hgb", flag_column=22),
    ColumnSpec("hct", 23, "hct", flag_column=24),
    ColumnSpec("mcv", 25, "mcv", flag_column=26),
    ColumnSpec("mch", 27, "mch", flag_column=28),
    ColumnSpec("mchc", 29, "mchc", flag_column=30),
    ColumnSpec("rdw_s", 31, "rdw_s", flag_column=32),
    ColumnSpec("rdw_c", 33, "rdw_c", flag_column=34),
    ColumnSpec("plt", 35, "plt", flag_column=36),
    ColumnSpec("pct", 37, "pct", flag_column=38),
    ColumnSpec("mpv", 39, "mpv", flag_column=40),
    ColumnSpec("pdw_s", 41, "pdw_s", flag_column=42),
    ColumnSpec("pdw_c", 43, "pdw_c", flag_column=44),
    ColumnSpec("plcc", 45, "plcc", flag_column=46),
    ColumnSpec("plcr", 47, "plcr", flag_column=48),
)
TYPE_COLUMN = 49
WARNING_COLUMN = 50


def extract_units(header: str) -> str:
    parts = header.split(" ")
    if len(parts) != 2:
        return ""
    return clean_text(parts[1])


def is_blank(row: List[str]) -> bool:
    """Control runs carry sample id 0 or are marked Blank next to the last column."""
    return row[0] == "0" or row[len(row) - 2] == "Blank"


def _build_record(headers: List[str], row: List[str], normal_ranges: Any) -> HumanCBCResult:
    values = {
        col.field: CBCValue(
            value=parse_float(row[col.column]),
            units=extract_units(headers[col.column]),
            flag=clean_text(row[col.flag_column].strip()),
            normal_range=bind_range(normal_ranges, col.range_key),
        )
        for col in COLUMNS
    }
    return HumanCBCResult(
        sample_id=clean_text(row[0]),
        date=clean_text(row[1]),
        time=clean_text(row[2]),
        patient_id=clean_text(row[3]),
        birth_date=clean_text(row[4]),
        type=clean_text(row[TYPE_COLUMN]),
        warning=clean_text(row[WARNING_COLUMN]),
        **values,
    )


def parse_human(data: CBCSource, normal_ranges: Optional[Any] = None) -> HumanCBCResult:
    """Decode the first sample of a Human export (tab separated, 52 columns).

    Raises BlankRecordError when that sample is a blank/control run.
    """
    rows = read_rows(data, SEPARATOR, NFIELDS)
    row = rows[1]
    if is_blank(row):
        raise BlankRecordError()
    return _build_record(rows[0], row, normal_ranges)


def parse_human_multi(data: CBCSource, normal_ranges: Optional[Any] = None) -> CBCResults:
    """Decode every patient sample of a Human export, dropping blank runs."""
    rows = read_rows(data, SEPARATOR, NFIELDS)
    headers = rows[0]
    return CBCResults(
        tuple(_build_record(headers, row, normal_ranges) for row in rows[1:] if not is_blank(row))
    )


class HumanParser:
    device = "HUMAN"

    def parse(self, data: CBCSource, normal_ranges: Optional[Any] = None) -> HumanCBCResult:
        return parse_human(data, normal_ranges)

    def parse_multi(self, data: CBCSource, normal_ranges: Optional[Any] = None) -> CBCResults:
        return parse_human_multi(data, normal_ranges)
