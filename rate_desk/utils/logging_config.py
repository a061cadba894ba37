"""Logging configuration for Rate Desk."""
import logging
import sys

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", stream=None):
    """
    Configure the rate_desk logger.

    Messages go to stderr tagged like the dashboard scripts' console output,
    e.g. ``[WARNING] rate_desk.utils.data_loader: CSV export failed: ...``.
    """
    logger = logging.getLogger("rate_desk")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers = [handler]
    logger.propagate = False

    # Suppress noisy loggers
    for name in ["urllib3", "watchdog"]:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
