"""Project configuration facade backed by refeed.config_manager."""
from __future__ import annotations

from typing import Any, Dict

from refeed.config_manager import Config, load_config
from refeed.config_manager import validate_config as _check_consistency

CONFIG: Config = load_config()

ENVIRONMENT = CONFIG.app.environment
DEBUG = CONFIG.app.debug

CLASSIFIER_CONFIG: Dict[str, Any] = CONFIG.classifier.model_dump(mode="python")
NORMALIZER_CONFIG: Dict[str, Any] = CONFIG.normalizer.model_dump(mode="python")
ENGINE_CONFIG: Dict[str, Any] = CONFIG.engine.model_dump(mode="python")

LOGGING_CONFIG: Dict[str, Any] = {
    "level": CONFIG.logging.level,
    "file_path": str(CONFIG.logging.file_path) if CONFIG.logging.file_path else None,
    "max_file_size": f"{CONFIG.logging.max_file_size_mb} MB",
    "retention": f"{CONFIG.logging.retention_days} days",
}


def validate_config(config: Config | None = None) -> None:
    """Execute domain specific consistency checks (defaults to ``CONFIG``)."""

    _check_consistency(config or CONFIG)


__all__ = [
    "CONFIG",
    "ENVIRONMENT",
    "DEBUG",
    "CLASSIFIER_CONFIG",
    "NORMALIZER_CONFIG",
    "ENGINE_CONFIG",
    "LOGGING_CONFIG",
    "validate_config",
]
