"""
Logging Configuration

Configures the root logger once at application startup. Modules log through
``logging.getLogger(__name__)``.
"""

import logging

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_configured = False


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Set up console logging for the service.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: Custom log format string
    """
    global _configured
    if _configured:
        return

    level = LEVEL_MAP.get(log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))
    root_logger.addHandler(console_handler)

    # SQL echo is controlled by DEBUG, keep the engine logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _configured = True
    logging.getLogger(__name__).info(f"Logging configured at {logging.getLevelName(level)}")
