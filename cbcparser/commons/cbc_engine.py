import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from cbcparser.commons.cbc_normalizer import CBCNormalizer
from cbcparser.commons.types import Settings
from cbcparser.commons.writer import OutFormat
from cbcparser.parsers.base import CBCSource
from cbcparser.parsers.models import CBCRecord, CBCResults
from cbcparser.validation.validators import NormalRangeTable, load_normal_ranges

DEFAULT_SETTINGS = Path(__file__).resolve().parent.parent / "configs" / "settings.yaml"


def load_cfg(path: Union[str, Path, None] = None) -> Settings:
    """Read the YAML settings; CBC_SETTINGS overrides the bundled file, LOG_LEVEL the level."""
    config_path = Path(path or os.getenv("CBC_SETTINGS") or DEFAULT_SETTINGS)
    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    settings = Settings.model_validate(raw)
    if os.getenv("LOG_LEVEL"):
        settings.logging.level = os.environ["LOG_LEVEL"]
    return settings


class CBCEngine:
    """Facade that loads settings and the normal range table and exposes normalize/render."""

    def __init__(self, config_path_or_obj: Any = None):
        # path, dict, Settings or nothing (bundled settings)
        if isinstance(config_path_or_obj, Settings):
            self.cfg = config_path_or_obj
        elif isinstance(config_path_or_obj, dict):
            self.cfg = Settings.model_validate(config_path_or_obj)
        else:
            self.cfg = load_cfg(config_path_or_obj)

        parsers_cfg = self.cfg.parsers
        self.normalizer = CBCNormalizer(device=parsers_cfg.device, autodetect=parsers_cfg.autodetect)
        self.normal_ranges: Optional[NormalRangeTable] = None
        if self.cfg.paths.normal_ranges:
            self.normal_ranges = load_normal_ranges(Path(self.cfg.paths.normal_ranges))

    def with_device(self, device: str) -> "CBCEngine":
        self.normalizer = CBCNormalizer(device=device, autodetect=self.cfg.parsers.autodetect)
        return self

    def load_ranges(self, source: Any) -> NormalRangeTable:
        self.normal_ranges = load_normal_ranges(source)
        return self.normal_ranges

    def normalize(self, data: CBCSource, multi: Optional[bool] = None) -> Union[CBCRecord, CBCResults]:
        if multi is None:
            multi = self.cfg.output.multi
        return self.normalizer.normalize(data, self.normal_ranges, multi=multi)

    def render(self, result: Union[CBCRecord, CBCResults], fmt: Union[OutFormat, str, None] = None) -> bytes:
        return result.write(fmt or self.cfg.output.format)

    def parse_and_render(self, data: CBCSource, multi: Optional[bool] = None, fmt=None) -> bytes:
        return self.render(self.normalize(data, multi=multi), fmt)
