"""Loguru sink configuration."""
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Replace loguru's default stderr sink with one at the given level.

    Safe to call more than once; only the first call installs the sink.
    """
    global _configured
    if _configured:
        return
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, backtrace=False)
    _configured = True
