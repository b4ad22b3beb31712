import json
from enum import Enum
from typing import Any, Union

from cbcparser.commons.errors import InvalidOutputFormatError


class OutFormat(str, Enum):
    JSON = "json"
    JSON_INDENT = "json-indent"


def resolve_format(fmt: Union[OutFormat, str]) -> OutFormat:
    try:
        return OutFormat(fmt)
    except ValueError:
        raise InvalidOutputFormatError() from None


def write(data: Any, fmt: Union[OutFormat, str] = OutFormat.JSON, indent: str = "   ") -> bytes:
    """Serialize an already projected record (dict or list of dicts) to UTF-8 JSON."""
    fmt = resolve_format(fmt)
    if fmt is OutFormat.JSON:
        text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    else:
        text = json.dumps(data, ensure_ascii=False, indent=indent)
    return text.encode("utf-8")
