"""Logging configuration for mediathek2rss."""

import logging


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure a single console handler on the root logger.

    Args:
        level: Name of the log level for the root logger.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers (avoid duplicates on reload)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    # niquests/urllib3 are chatty on DEBUG
    logging.getLogger("urllib3").setLevel(max(logging.INFO, root_logger.level))

    return root_logger
