"""
Logging setup for the check-in service
"""

import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'


def setup_logging(app, log_level='INFO', log_dir=None, max_log_size=10*1024*1024, backup_count=5):
    """
    Configure the root logger and the Flask logger.

    Args:
        app: Flask app instance
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_dir: directory for a rotating log file; console only when unset
        max_log_size: size of one log file (bytes)
        backup_count: number of rotated files kept
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / 'checkin_service.log',
            maxBytes=max_log_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger = logging.getLogger('checkin_service')
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)

    app.logger.setLevel(level)
    app.logger.info("Logging configured (level=%s, dir=%s)", logging.getLevelName(level), log_dir or '-')
