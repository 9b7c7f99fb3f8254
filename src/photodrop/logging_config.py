import logging
import sys
from logging import config as logging_config

DEFAULT_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
ACCESS_FORMAT = "%(asctime)s %(levelname)-5s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are far too chatty at INFO
NOISY_LOGGERS = ("botocore", "boto3", "aiobotocore", "urllib3")


class ColoredFormatter(logging.Formatter):
    """Colors the level name with ANSI codes, unless ``use_colors`` is off."""

    COLOR_MAP = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLOR_MAP.get(record.levelname) if self.use_colors else None
        if not color:
            return super().format(record)

        # Other handlers may format the same record, put the plain name back
        original_levelname = record.levelname
        record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def configure_logging(level: str = "INFO", use_colors: bool | None = None) -> None:
    """Send application and uvicorn logs to stdout.

    Colors default to on when stdout is a terminal.
    """
    if use_colors is None:
        use_colors = sys.stdout.isatty()

    def formatter(fmt: str) -> dict:
        return {"()": ColoredFormatter, "fmt": fmt, "datefmt": DATE_FORMAT, "use_colors": use_colors}

    loggers = {name: {"handlers": ["default"], "level": level, "propagate": False} for name in ("uvicorn", "uvicorn.error")}
    loggers["uvicorn.access"] = {"handlers": ["access"], "level": level, "propagate": False}
    loggers.update({name: {"level": "WARNING"} for name in NOISY_LOGGERS})

    logging_config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter(DEFAULT_FORMAT), "access": formatter(ACCESS_FORMAT)},
            "handlers": {
                "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
                "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
            },
            "loggers": loggers,
            "root": {"handlers": ["default"], "level": level},
        }
    )


__all__ = ["configure_logging", "ColoredFormatter"]
