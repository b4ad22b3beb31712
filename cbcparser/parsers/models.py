# ===============================
# File: cbcparser/parsers/models.py
# ===============================
import math
import struct
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Tuple, Union

from cbcparser.commons.writer import OutFormat, write


def to_float32(value: float) -> float:
    """Round ``value`` to single precision.

    The result is the shortest decimal that maps back to the same float32,
    so 5.43 stays 5.43 instead of 5.429999828338623.
    Raises OverflowError when the value does not fit in a float32.
    """
    packed = struct.pack("<f", value)
    single = struct.unpack("<f", packed)[0]
    if math.isnan(single) or math.isinf(single):
        return single
    for digits in range(1, 10):
        candidate = float(f"{single:.{digits}g}")
        if struct.pack("<f", candidate) == packed:
            return candidate
    return single


@dataclass(frozen=True)
class NormalRange:
    lower: float = 0.0
    upper: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "lower", to_float32(float(self.lower)))
        object.__setattr__(self, "upper", to_float32(float(self.upper)))


@dataclass(frozen=True)
class CBCValue:
    value: float = 0.0
    units: str = ""
    flag: str = ""  # "", "L", "H" or the analyzer's own flag text
    normal_range: NormalRange = field(default_factory=NormalRange)


class _Record:
    def to_dict(self) -> Dict:
        return asdict(self)

    def write(self, fmt: Union[OutFormat, str] = OutFormat.JSON) -> bytes:
        return write(self.to_dict(), fmt, indent="   ")


# Sample ID,Mode,Analysis Time,WBC(10^3/uL),LYM#(10^3/uL),LYM%(%),MXD#(),MXD%(),NEUT#(),NEUT%(),
# RBC(10^6/uL),HGB(g/dL),HCT(%),MCV(fL),MCH(pg),MCHC(g/dL),RDW_CV(%),RDW_SD(fL),PLT(10^3/uL),
# PDW(fL),MPV(fL),PCT(%),P_LCR(%),P_LCC(10^3/uL)
@dataclass(frozen=True)
class EdanCBCResult(_Record):
    """One sample exported by the Edan H30 Pro analyzer."""

    sid: str = ""
    mode: str = ""
    analysis_time: str = ""
    pid: str = ""  # not exported by the analyzer

    wbc: CBCValue = field(default_factory=CBCValue)
    lym: CBCValue = field(default_factory=CBCValue)
    lym_percent: CBCValue = field(default_factory=CBCValue)
    mid: CBCValue = field(default_factory=CBCValue)
    mid_percent: CBCValue = field(default_factory=CBCValue)
    gra: CBCValue = field(default_factory=CBCValue)
    gra_percent: CBCValue = field(default_factory=CBCValue)

    rbc: CBCValue = field(default_factory=CBCValue)
    hgb: CBCValue = field(default_factory=CBCValue)
    hct: CBCValue = field(default_factory=CBCValue)
    mcv: CBCValue = field(default_factory=CBCValue)
    mch: CBCValue = field(default_factory=CBCValue)
    mchc: CBCValue = field(default_factory=CBCValue)
    rdw_c: CBCValue = field(default_factory=CBCValue)
    rdw_s: CBCValue = field(default_factory=CBCValue)

    plt: CBCValue = field(default_factory=CBCValue)
    pdw: CBCValue = field(default_factory=CBCValue)
    mpv: CBCValue = field(default_factory=CBCValue)
    pct: CBCValue = field(default_factory=CBCValue)

    plcc: CBCValue = field(default_factory=CBCValue)
    plcr: CBCValue = field(default_factory=CBCValue)


@dataclass(frozen=True)
class HumanCBCResult(_Record):
    """One sample exported by the HUMAN HumaCount 30 analyzer."""

    sample_id: str = ""
    date: str = ""
    time: str = ""
    patient_id: str = ""
    birth_date: str = ""

    wbc: CBCValue = field(default_factory=CBCValue)
    lym: CBCValue = field(default_factory=CBCValue)
    mid: CBCValue = field(default_factory=CBCValue)
    gra: CBCValue = field(default_factory=CBCValue)
    lym_percent: CBCValue = field(default_factory=CBCValue)
    mid_percent: CBCValue = field(default_factory=CBCValue)
    gra_percent: CBCValue = field(default_factory=CBCValue)
    rbc: CBCValue = field(default_factory=CBCValue)
    hgb: CBCValue = field(default_factory=CBCValue)
    hct: CBCValue = field(default_factory=CBCValue)
    mcv: CBCValue = field(default_factory=CBCValue)
    mch: CBCValue = field(default_factory=CBCValue)
    mchc: CBCValue = field(default_factory=CBCValue)
    rdw_s: CBCValue = field(default_factory=CBCValue)
    rdw_c: CBCValue = field(default_factory=CBCValue)
    plt: CBCValue = field(default_factory=CBCValue)
    pct: CBCValue = field(default_factory=CBCValue)
    mpv: CBCValue = field(default_factory=CBCValue)
    pdw_s: CBCValue = field(default_factory=CBCValue)
    pdw_c: CBCValue = field(default_factory=CBCValue)
    plcc: CBCValue = field(default_factory=CBCValue)
    plcr: CBCValue = field(default_factory=CBCValue)

    type: str = ""
    warning: str = ""


CBCRecord = Union[EdanCBCResult, HumanCBCResult]


@dataclass(frozen=True)
class CBCResults:
    """Records decoded from a multi-row export, in input order."""

    records: Tuple[CBCRecord, ...] = ()

    def __iter__(self) -> Iterator[CBCRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index):
        return self.records[index]

    def to_dict(self) -> List[Dict]:
        return [r.to_dict() for r in self.records]

    def write(self, fmt: Union[OutFormat, str] = OutFormat.JSON) -> bytes:
        return write(self.to_dict(), fmt, indent="\t")
