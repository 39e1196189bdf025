import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "RV_COPILOT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# chatty client libraries pulled in by the embedding and index adapters
_NOISY_LOGGERS = ("httpx", "chromadb.telemetry", "pypdf")


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name or "rv_copilot")
    if logger.handlers:
        return logger
    logger.setLevel(_resolve_level(level))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger
