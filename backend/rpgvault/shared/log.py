# backend/rpgvault/shared/log.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """rpgvault 루트 로거에 스트림 핸들러를 한 번만 붙인다."""
    logger = logging.getLogger("rpgvault")
    logger.setLevel(level.upper())
    if not any(getattr(h, "_rpgvault", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._rpgvault = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
