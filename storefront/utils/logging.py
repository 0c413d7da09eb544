# storefront/utils/logging.py
import sys

from loguru import logger

from storefront.utils.settings import LOG_LEVEL

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_configured = False


def _configure() -> None:
    global _configured
    if _configured:
        return
    logger.remove()
    logger.configure(extra={"name": "storefront"})
    logger.add(sys.stderr, level=LOG_LEVEL.upper(), format=_FORMAT)
    _configured = True


def get_logger(name: str | None = None):
    """Zwraca loggera loguru z przypietą nazwą modułu."""
    _configure()
    if name:
        return logger.bind(name=name)
    return logger
