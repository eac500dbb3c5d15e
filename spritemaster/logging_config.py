import logging
import os
from typing import Optional

_DEFAULT_LEVEL = os.getenv("SPRITEMASTER_LOG_LEVEL", "INFO").upper()
_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Настраивает корневой логгер пакета: один потоковый обработчик, повторный вызов меняет только уровень."""
    desired_level = getattr(logging, (level or _DEFAULT_LEVEL).upper(), logging.INFO)
    logger = logging.getLogger("spritemaster")
    logger.setLevel(desired_level)
    if getattr(configure_logging, "_configured", False):
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)

    configure_logging._configured = True  # type: ignore[attr-defined]
    logger.debug("Logging configured at %s", logging.getLevelName(desired_level))
    return logger
