from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from cbcparser.commons.writer import OutFormat


class AppCfg(BaseModel):
    name: str = "cbcparser"


class PathsCfg(BaseModel):
    logs_root: Optional[str] = None  # None/empty: log to stderr only
    normal_ranges: Optional[str] = None


class LoggingCfg(BaseModel):
    level: str = "WARNING"


class OutputCfg(BaseModel):
    format: OutFormat = OutFormat.JSON_INDENT
    multi: bool = False


class ParsersCfg(BaseModel):
    autodetect: bool = True
    device: Literal["", "EDAN", "HUMAN"] = ""

    @field_validator("device", mode="before")
    @classmethod
    def _upper(cls, v):
        if v is None:
            return ""
        return v.upper() if isinstance(v, str) else v


class Settings(BaseModel):
    app: AppCfg = AppCfg()
    paths: PathsCfg = PathsCfg()
    logging: LoggingCfg = LoggingCfg()
    output: OutputCfg = OutputCfg()
    parsers: ParsersCfg = ParsersCfg()
