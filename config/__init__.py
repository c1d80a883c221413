"""Settings facade and version metadata, resolved on first attribute access.

``import config`` stays cheap (``setup.py`` imports ``config.version`` at
build time); ``config.settings`` only loads the layered configuration when a
setting is actually requested.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

_LAZY_EXPORTS: Dict[str, Tuple[str, ...]] = {
    "config.settings": (
        "CONFIG",
        "CLASSIFIER_CONFIG",
        "NORMALIZER_CONFIG",
        "ENGINE_CONFIG",
        "LOGGING_CONFIG",
        "ENVIRONMENT",
        "DEBUG",
        "validate_config",
    ),
    "config.version": (
        "MIN_PYTHON_VERSION",
        "PROJECT_VERSION",
        "PYTHON_REQUIRES_SPECIFIER",
        "__version__",
    ),
}

_OWNER: Dict[str, str] = {
    name: module for module, names in _LAZY_EXPORTS.items() for name in names
}

__all__ = list(_OWNER)


def __getattr__(name: str) -> Any:
    try:
        owner = _OWNER[name]
    except KeyError:
        raise AttributeError(f"module 'config' has no attribute {name!r}") from None
    value = getattr(import_module(owner), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
