import re
from typing import Any, List, Optional

from .base import (
    CBCSource,
    ColumnSpec,
    bind_range,
    clean_text,
    get_flag,
    parse_float,
    read_rows,
)
from .models import CBCResults, CBCValue, EdanCBCResult

NFIELDS = 24
SEPARATOR = ","

# Units live between brackets in the header, e.g. WBC(10^3/uL) -> 10^3/uL
UNITS_REGEX = re.compile(r"\((.*?)\)")
# a run of undecodable bytes stands for one mis-encoded micro sign
INVALID_RUN_REGEX = re.compile(r"[\udc80-\udcff]+")

# Columns 0-2 are identifiers, 3-23 one measurement each.
# Column 22 is headed P_LCR and 23 P_LCC; they are reported as plcc and plcr.
COLUMNS = (
    ColumnSpec("wbc", 3, "wbc"),
    ColumnSpec("lym", 4, "lym"),
    ColumnSpec("lym_percent", 5, "lym_percent"),
    ColumnSpec("mid", 6, "mid"),
    ColumnSpec("mid_percent", 7, "mid_percent"),
    ColumnSpec("gra", 8, "gra"),
    ColumnSpec("gra_percent", 9, "gra_percent"),
    ColumnSpec("rbc", 10, "rbc"),
    ColumnSpec("hgb", 11, "hgb"),
    ColumnSpec("hct", 12, "hct"),
    ColumnSpec("mcv", 13, "mcv"),
    ColumnSpec("mch", 14, "mch"),
    ColumnSpec("mchc", 15, "mchc"),
    ColumnSpec("rdw_c", 16, "rdw_c"),
    ColumnSpec("rdw_s", 17, "rdw_s"),
    ColumnSpec("plt", 18, "plt"),
    # flagged against PDWc, reported with the PDW range
    ColumnSpec("pdw", 19, "pdw", flag_key="pdw_c"),
    ColumnSpec("mpv", 20, "mpv"),
    ColumnSpec("pct", 21, "pct"),
    ColumnSpec("plcc", 22, "plcc"),
    ColumnSpec("plcr", 23, "plcr"),
)


def extract_units(header: str) -> str:
    """Return the text inside the first brackets of a header cell.

    The analyzer writes the micro sign in a broken encoding, so undecodable
    bytes are read as μ before matching.
    """
    m = UNITS_REGEX.search(INVALID_RUN_REGEX.sub("μ", header))
    return m.group(1) if m else ""


def _build_record(headers: List[str], row: List[str], normal_ranges: Any) -> EdanCBCResult:
    values = {}
    for col in COLUMNS:
        value = parse_float(row[col.column])
        flag = ""
        nrange = bind_range(normal_ranges, col.range_key)
        if normal_ranges is not None:
            flag_range = nrange
            if col.flag_key:
                flag_range = bind_range(normal_ranges, col.flag_key)
            flag = get_flag(value, flag_range)

        values[col.field] = CBCValue(
            value=value,
            units=extract_units(headers[col.column]),
            flag=flag,
            normal_range=nrange,
        )

    return EdanCBCResult(
        sid=clean_text(row[0]),
        mode=clean_text(row[1]),
        analysis_time=clean_text(row[2]),
        **values,
    )


def parse_edan(data: CBCSource, normal_ranges: Optional[Any] = None) -> EdanCBCResult:
    """Decode the first sample of an Edan export (comma separated, 24 columns)."""
    rows = read_rows(data, SEPARATOR, NFIELDS)
    return _build_record(rows[0], rows[1], normal_ranges)


def parse_edan_multi(data: CBCSource, normal_ranges: Optional[Any] = None) -> CBCResults:
    """Decode every sample of an Edan export. No row is ever skipped."""
    rows = read_rows(data, SEPARATOR, NFIELDS)
    headers = rows[0]
    return CBCResults(tuple(_build_record(headers, row, normal_ranges) for row in rows[1:]))


class EdanParser:
    device = "EDAN"

    def parse(self, data: CBCSource, normal_ranges: Optional[Any] = None) -> EdanCBCResult:
        return parse_edan(data, normal_ranges)

    def parse_multi(self, data: CBCSource, normal_ranges: Optional[Any] = None) -> CBCResults:
        return parse_edan_multi(data, normal_ranges)
