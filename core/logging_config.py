"""Logging setup for applications embedding the planner core."""

import logging

from core.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure console logging for the planner packages."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    formatter = logging.Formatter(
        '%(asctime)s | %(name)-28s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # Only our own loggers, so embedding apps keep control of the root logger
    planner_logger = logging.getLogger("services")
    planner_logger.setLevel(log_level)
    if not any(isinstance(h, logging.StreamHandler) for h in planner_logger.handlers):
        planner_logger.addHandler(console_handler)

    return planner_logger
