from cbcparser.commons.errors import (
    BlankRecordError,
    CBCParserError,
    InsufficientRowsError,
    InvalidCSVError,
    InvalidNormalRangesError,
    InvalidOutputFormatError,
    UnknownDeviceError,
)
from cbcparser.commons.writer import OutFormat
from cbcparser.parsers.edan import EdanParser
from cbcparser.parsers.human import HumanParser
from cbcparser.parsers.models import CBCResults, CBCValue, EdanCBCResult, HumanCBCResult, NormalRange
from cbcparser.validation.validators import NormalRangeTable, load_normal_ranges

__all__ = [
    "BlankRecordError",
    "CBCParserError",
    "CBCResults",
    "CBCValue",
    "EdanCBCResult",
    "EdanParser",
    "HumanCBCResult",
    "HumanParser",
    "InsufficientRowsError",
    "InvalidCSVError",
    "InvalidNormalRangesError",
    "InvalidOutputFormatError",
    "NormalRange",
    "NormalRangeTable",
    "OutFormat",
    "UnknownDeviceError",
    "load_normal_ranges",
]
