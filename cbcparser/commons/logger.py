import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(root: Optional[str] = None, level: str = "INFO"):
    """Log to stderr (stdout carries the JSON) and, if ``root`` is set, to a dated file."""
    logger.remove()
    if root:
        logdir = Path(root) / datetime.now().strftime("%Y/%m/%d")
        logdir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(logdir / "cbcparser.log"),
            rotation="00:00",
            retention="14 days",
            level=level,
            backtrace=True,
            diagnose=False,
        )
    logger.add(sys.stderr, level=level)
    return logger
