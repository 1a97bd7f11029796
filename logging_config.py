"""
logging_config.py: logging setup shared by every module of the coupons API.

Console output always goes to stdout; a log file is added when LOG_FILE is set.
"""

import logging
import os
import sys


def setup_logging():
    """
    Configures the root logger once for the application.

    Level comes from LOG_LEVEL (default INFO). Third-party loggers that are
    chatty at INFO are lowered to WARNING.
    """
    log_format = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stdout)]
    log_file = os.getenv("LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=log_format,
        handlers=handlers,
    )

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


def get_logger(name):
    """Returns the logger for a module; pass the module's __name__."""
    return logging.getLogger(name)
