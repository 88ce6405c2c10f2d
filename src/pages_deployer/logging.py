"""Logging configuration for the deployment tool."""

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Intercept standard logging messages toward loguru."""

    def emit(self, record):
        # Get corresponding loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str, compact: bool = False) -> None:
    """Configure loguru logging for the entire tool.

    Args:
        log_level: Log level to use (from settings or the --verbose flag).
        compact: Use the short ``level | message`` format (no timestamps), as
            the CLI does.
    """
    log_level = log_level.upper()

    logger.remove()
    if compact:
        logger.add(
            sys.stderr,
            format="<level>{level: <8}</level> | <level>{message}</level>",
            level=log_level,
            colorize=True,
        )
    else:
        logger.add(sys.stderr, level=log_level, colorize=True)

    logger.debug("Log level set to: {}", log_level)

    # Redirect all standard logging to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # httpx logs every request at INFO; keep it one notch quieter than the tool
    for noisy_logger in ("httpcore", "httpx", "asyncio"):
        logging.getLogger(noisy_logger).setLevel("WARNING" if log_level == "INFO" else log_level)
