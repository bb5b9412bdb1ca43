import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from crm.config import Settings

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(settings: Settings) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to the ``crm`` logger."""
    logger = logging.getLogger("crm")
    logger.setLevel(settings.log_level.upper())

    formatter = logging.Formatter(LOG_FORMAT, LOG_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger.handlers.clear()
    logger.addHandler(console_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
