# cbcparser/validation/validators.py
import json
from pathlib import Path
from typing import IO, Any, Dict, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cbcparser.commons.errors import InvalidNormalRangesError
from cbcparser.parsers.models import to_float32


class RangeBounds(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lower: float = 0.0
    upper: float = 0.0

    @field_validator("lower", "upper")
    @classmethod
    def _fits_float32(cls, v: float):
        try:
            return to_float32(v)
        except OverflowError:
            raise ValueError(f"{v} does not fit in a 32-bit float")


class NormalRangeTable(BaseModel):
    """Reference intervals keyed like the JSON document, e.g. ``wbc``, ``pdw_s``.

    Missing keys fall back to the (0, 0) range, unknown keys are ignored.
    Frozen, so one table can be shared by any number of decode calls.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    wbc: RangeBounds = RangeBounds()
    lym: RangeBounds = RangeBounds()
    mid: RangeBounds = RangeBounds()
    gra: RangeBounds = RangeBounds()
    lym_percent: RangeBounds = RangeBounds()
    mid_percent: RangeBounds = RangeBounds()
    gra_percent: RangeBounds = RangeBounds()
    rbc: RangeBounds = RangeBounds()
    hgb: RangeBounds = RangeBounds()
    hct: RangeBounds = RangeBounds()
    mcv: RangeBounds = RangeBounds()
    mch: RangeBounds = RangeBounds()
    mchc: RangeBounds = RangeBounds()
    rdw_s: RangeBounds = RangeBounds()
    rdw_c: RangeBounds = RangeBounds()
    plt: RangeBounds = RangeBounds()
    pct: RangeBounds = RangeBounds()
    mpv: RangeBounds = RangeBounds()

    # Edan
    pdw: RangeBounds = RangeBounds()
    # Human
    pdw_s: RangeBounds = RangeBounds()
    pdw_c: RangeBounds = RangeBounds()

    plcc: RangeBounds = RangeBounds()
    plcr: RangeBounds = RangeBounds()


def load_normal_ranges(source: Union[str, Path, bytes, IO, Dict[str, Any]]) -> NormalRangeTable:
    """Build a NormalRangeTable from a path, a stream, raw JSON or a dict.

    Raises InvalidNormalRangesError if the document is not valid JSON or a
    bound is not a number.
    """
    try:
        if isinstance(source, dict):
            doc = source
        elif isinstance(source, Path):
            doc = json.loads(source.read_text(encoding="utf-8"))
        elif hasattr(source, "read"):
            doc = json.load(source)
        elif isinstance(source, str) and source.lstrip()[:1] not in ("{", "["):
            doc = json.loads(Path(source).read_text(encoding="utf-8"))
        else:
            doc = json.loads(source)
        return NormalRangeTable.model_validate(doc)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidNormalRangesError(f"normal ranges are not valid JSON: {e}") from e
    except ValidationError as e:
        raise InvalidNormalRangesError(f"invalid normal ranges: {e}") from e
