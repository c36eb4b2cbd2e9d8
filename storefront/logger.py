"""
Logging setup shared by the API, the order notifier and the seeding helpers.

Every module asks for a child of the ``storefront`` logger through
``get_logger(__name__)``; the root ``storefront`` logger is configured once
by ``setup_logger()`` from the application factory.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from . import config

ROOT_LOGGER_NAME = "storefront"


def setup_logger(name: str = ROOT_LOGGER_NAME, log_level=None, log_file: str = None):
    """
    Sets up a logger with a console handler and, when LOG_DIR is configured,
    rotating file handlers for all records and for errors only.

    Args:
        name (str): The name of the logger.
        log_level: Level name or number (default: config.LOG_LEVEL).
        log_file (str): Optional log filename (without path). Defaults to "{name}.log".

    Returns:
        logging.Logger: The configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level or config.LOG_LEVEL)

    # attach handlers once per logger
    if not logger.handlers:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if config.LOG_DIR:
            os.makedirs(config.LOG_DIR, exist_ok=True)
            if log_file is None:
                log_file = f"{name}.log"
            app_log_file = os.path.join(config.LOG_DIR, log_file)
            error_log_file = os.path.join(
                config.LOG_DIR, f"{os.path.splitext(log_file)[0]}_error.log"
            )

            file_handler = RotatingFileHandler(
                app_log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            error_file_handler = RotatingFileHandler(
                error_log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
            error_file_handler.setFormatter(formatter)
            error_file_handler.setLevel(logging.ERROR)
            logger.addHandler(error_file_handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    if module_name == ROOT_LOGGER_NAME or module_name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
