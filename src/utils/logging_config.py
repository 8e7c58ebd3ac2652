"""Loguru setup shared by the CLI and the web app."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.utils.logging_utils import add_optional_sinks, env_log_level

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
SHORT_CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}"

# Third-party loggers routed through loguru
STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine")


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def intercept_stdlib_logging(names=STDLIB_LOGGERS, level: int = logging.INFO) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def configure_logger(
    log_file: str = "nyc_property.log",
    level: str | None = None,
    *,
    console_format: str = CONSOLE_FORMAT,
    rotation: str = "10 MB",
    retention: str = "10 days",
):
    """
    Configure loguru for the whole project: stderr, a rotating file under
    logs/, and the env-controlled debug/JSON sinks.
    """
    level = level or env_log_level()

    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    # Remove default handler to avoid duplicate logs
    logger.remove()
    logger.add(sys.stderr, format=console_format, level=level)
    logger.add(
        log_dir / log_file,
        rotation=rotation,
        retention=retention,
        level=level,
        format=FILE_FORMAT,
        backtrace=True,
        diagnose=True,
    )
    add_optional_sinks()
    intercept_stdlib_logging()


_configured = False


def setup_default_logging():
    global _configured
    if not _configured:
        configure_logger()
        _configured = True
