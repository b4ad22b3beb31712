from typing import Any, Dict, Optional, Union

from cbcparser.commons.errors import UnknownDeviceError
from cbcparser.parsers.base import CBCParser, CBCSource, detect_device, read_text
from cbcparser.parsers.edan import EdanParser
from cbcparser.parsers.human import HumanParser
from cbcparser.parsers.models import CBCRecord, CBCResults

PARSERS: Dict[str, CBCParser] = {
    "EDAN": EdanParser(),
    "HUMAN": HumanParser(),
}


def get_parser(device: str) -> CBCParser:
    try:
        return PARSERS[device.upper()]
    except KeyError:
        raise UnknownDeviceError(
            f"unknown device {device!r}, expected one of {', '.join(PARSERS)}"
        ) from None


class CBCNormalizer:
    def __init__(self, device: str = "", autodetect: bool = True):
        self.autodetect = autodetect
        self.device = (device or "").upper()
        if self.device:
            get_parser(self.device)

    def resolve_device(self, text: str) -> str:
        if self.device:
            return self.device
        return detect_device(text) if self.autodetect else "EDAN"

    def normalize(
        self, data: CBCSource, normal_ranges: Optional[Any] = None, multi: bool = False
    ) -> Union[CBCRecord, CBCResults]:
        # streams are consumed once: detection and parsing share the text
        text = read_text(data)
        parser = get_parser(self.resolve_device(text))
        if multi:
            return parser.parse_multi(text, normal_ranges)
        return parser.parse(text, normal_ranges)
