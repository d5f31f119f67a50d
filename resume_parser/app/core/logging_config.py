"""
Logging setup. Provider client libraries are kept at WARNING so retried calls are reported
once by the retry controller instead of once per HTTP request.
"""
import logging
import sys

from resume_parser.app.core.config import settings

# Client libraries that log every outbound request at INFO
PROVIDER_CLIENT_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai")


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure stdout logging for the app; returns the resume_parser logger."""
    level_val = level or settings.log_level
    logging.basicConfig(
        level=getattr(logging, level_val.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in PROVIDER_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger("resume_parser")


def get_logger(name: str) -> logging.Logger:
    """resume_parser.<name> logger, e.g. get_logger("services.retry")."""
    return logging.getLogger(f"resume_parser.{name}")
