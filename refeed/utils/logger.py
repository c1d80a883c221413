# refeed/utils/logger.py
# Loguru sinks for the duplicate-detection engine
# ===============================================

"""
Centralized loguru configuration for refeed-dedup.

The pure scoring functions never log; the detector facade and the CLI emit
structured payloads through module loggers created here. Each record carries
the emitting component in ``extra["module"]``. Configuration comes from
``config.settings.LOGGING_CONFIG`` unless an explicit mapping is given.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "{time:HH:mm:ss} | {level: <8} | {extra[module]: <16} | {message}"
)
DEBUG_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> <dim>{name}:{line}</dim> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS Z} | {level: <8} | {process.id} | "
    "{extra[module]} | {message}"
)


class EngineLogger:
    """
    Installs loguru sinks once per process and hands out module loggers.
    """

    def __init__(self):
        self.is_configured = False
        self.log_file_path: Optional[Path] = None

    def configure_logging(self, config: Optional[Dict[str, Any]] = None, *, force: bool = False):
        """
        Replace loguru's default sink with the engine's console (and file) sinks.

        Args:
            config: ``level`` plus optional ``file_path``, ``max_file_size`` and
                ``retention``. Defaults to ``config.settings.LOGGING_CONFIG``.
            force: Reinstall sinks even when already configured.
        """
        if self.is_configured and not force:
            return

        from config.settings import DEBUG, LOGGING_CONFIG

        settings = dict(LOGGING_CONFIG)
        settings.update(config or {})
        level = "DEBUG" if DEBUG else settings.get("level", "INFO")

        logger.remove()
        logger.configure(extra={"module": "refeed"})
        logger.add(
            sys.stderr,
            format=DEBUG_CONSOLE_FORMAT if DEBUG else CONSOLE_FORMAT,
            level=level,
            colorize=DEBUG,
            backtrace=DEBUG,
            diagnose=DEBUG,
        )

        self.log_file_path = None
        if settings.get("file_path"):
            self.log_file_path = Path(settings["file_path"])
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(self.log_file_path),
                format=FILE_FORMAT,
                level=settings.get("level", "INFO"),
                rotation=settings.get("max_file_size", "10 MB"),
                retention=settings.get("retention", "30 days"),
                compression="gz",
                enqueue=True,
                diagnose=False,
            )

        self.is_configured = True
        logger.bind(module="logging").debug(
            {"event": "logging.configured", "level": level, "file": str(self.log_file_path or "")}
        )

    def create_module_logger(self, module_name: str) -> Any:
        """
        Return a loguru logger bound to ``module_name`` (e.g. ``'dedup.detector'``).
        """
        if not self.is_configured:
            self.configure_logging()
        return logger.bind(module=module_name)


_logger_instance: Optional[EngineLogger] = None


def get_logger() -> EngineLogger:
    """Return the process-wide logger factory, configuring it on first use."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = EngineLogger()
        _logger_instance.configure_logging()
    return _logger_instance


def setup_logging(config: Optional[Dict[str, Any]] = None) -> EngineLogger:
    """
    Configure logging at program start; an explicit ``config`` always reinstalls sinks.
    """
    logger_instance = get_logger()
    if config:
        logger_instance.configure_logging(config, force=True)
    return logger_instance
