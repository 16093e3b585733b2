import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import colorlog

LOG_COLORS = {
    'DEBUG': 'bold_blue',
    'INFO': 'bold_green',
    'WARNING': 'bold_yellow',
    'ERROR': 'bold_red',
    'CRITICAL': 'bold_purple'
}


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger for command-line use.

    The library itself only creates module loggers; applications embedding the
    client keep their own logging setup and never need to call this.

    Args:
        level: Log level overriding OPENSUBSONIC_LOG_LEVEL (default INFO)
    """
    log_level = (level or os.getenv('OPENSUBSONIC_LOG_LEVEL', 'INFO')).upper()
    log_file = os.getenv('OPENSUBSONIC_LOG_FILE')
    max_bytes = int(os.getenv('LOG_FILE_MAX_BYTES', '10485760'))  # 10 MB
    backup_count = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

    logger = logging.getLogger()
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        console_handler = logging.StreamHandler()
        console_formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)s:%(name)s:%(message)s",
            log_colors=LOG_COLORS
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s - (%(filename)s:%(lineno)d)'
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
