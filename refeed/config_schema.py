"""Declarative configuration schema for refeed-dedup."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveInt,
    PrivateAttr,
    field_validator,
    model_validator,
)
from pydantic.fields import FieldInfo


class StrictModel(BaseModel):
    """Base model enforcing strict validation rules."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class AppSettings(StrictModel):
    """Top-level runtime metadata."""

    environment: str = Field(
        default="development",
        description="Normalized deployment environment name.",
        examples=["production"],
    )
    debug: bool = Field(
        default=False,
        description="When true, enables verbose logging with diagnostics.",
    )

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"development", "production", "staging", "test"}:
            raise ValueError(
                "environment must be one of: development, staging, production, test"
            )
        return normalized


class ClassifierSettings(StrictModel):
    """Thresholds used by the duplicate classifier."""

    similarity_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Minimum content Jaccard similarity for a content match.",
    )
    title_similarity_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum title Jaccard similarity for a title + time match.",
    )
    time_proximity_hours: NonNegativeFloat = Field(
        default=48.0,
        description="Maximum publish-time distance (hours) considered proximate.",
        examples=[24.0],
    )


class NormalizerSettings(StrictModel):
    """Tokenizer behaviour."""

    extra_stop_words: List[str] = Field(
        default_factory=list,
        description="Additional noise words dropped during tokenization.",
        examples=[["lexus", "press"]],
    )
    url_cache_size: int = Field(
        default=2048,
        ge=0,
        description="LRU cache size for link canonicalization (0 disables it).",
    )

    @field_validator("extra_stop_words", mode="before")
    @classmethod
    def _lower_stop_words(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [item for item in value.split(",")]
        return [str(item).strip().lower() for item in value if str(item).strip()]


class WindowSettings(StrictModel):
    """Candidate window supplied to the detector."""

    days: PositiveInt = Field(
        default=7,
        description="Trailing days of records compared against a candidate.",
    )
    limit: PositiveInt = Field(
        default=100,
        description="Maximum number of records in a comparison window.",
    )


class EngineSettings(StrictModel):
    """Execution settings for window scans."""

    max_workers: PositiveInt = Field(
        default=1,
        description="Worker threads used to classify a window (1 runs inline).",
        examples=[4],
    )


class LoggingConfig(StrictModel):
    """Logging subsystem configuration."""

    level: str = Field(
        default="INFO",
        description="Minimum log level captured by the engine logger.",
        examples=["DEBUG"],
    )
    file_path: Optional[Path] = Field(
        default=None,
        description="Path of the rotating log file; console only when unset.",
    )
    max_file_size_mb: PositiveInt = Field(
        default=10,
        description="Maximum size per log file before rotation (MiB).",
    )
    retention_days: PositiveInt = Field(
        default=30,
        description="Number of days to keep rotated log files.",
    )

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("file_path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _resolve_path(self) -> "LoggingConfig":
        if self.file_path is not None and not self.file_path.is_absolute():
            object.__setattr__(self, "file_path", self.file_path.resolve())
        return self


class Config(StrictModel):
    """Complete refeed-dedup configuration model."""

    app: AppSettings = Field(default_factory=AppSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    normalizer: NormalizerSettings = Field(default_factory=NormalizerSettings)
    window: WindowSettings = Field(default_factory=WindowSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    _metadata: object = PrivateAttr(default=None)


DEFAULT_CONFIG = Config()

_BOUND_SYMBOLS = (("ge", ">="), ("gt", ">"), ("le", "<="), ("lt", "<"))


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or str(annotation).replace("typing.", "")


def _describe_constraints(field: FieldInfo) -> str:
    """Render numeric bounds declared on ``field`` (``>= 0.0, <= 1.0``)."""

    bounds = []
    for meta in field.metadata:
        bounds.extend(
            f"{symbol} {getattr(meta, attr)}"
            for attr, symbol in _BOUND_SYMBOLS
            if getattr(meta, attr, None) is not None
        )
    return ", ".join(bounds)


def iter_field_docs(
    model: BaseModel | type[BaseModel],
    prefix: str = "",
    *,
    include_defaults: bool = True,
) -> Iterator[dict[str, object]]:
    """Walk a settings model depth-first, one documentation entry per field.

    Section entries (nested models) are flagged with ``is_nested`` and carry
    no default; their fields follow immediately with dotted names.
    """

    instance = model if isinstance(model, BaseModel) else DEFAULT_CONFIG
    for name, field in type(instance).model_fields.items():
        value = getattr(instance, name)
        dotted = f"{prefix}.{name}" if prefix else name
        nested = isinstance(value, BaseModel)
        yield {
            "name": dotted,
            "type": _type_name(field.annotation),
            "description": field.description or "",
            "default": value if include_defaults and not nested else None,
            "examples": list(field.examples or []),
            "constraints": _describe_constraints(field),
            "is_nested": nested,
        }
        if nested:
            yield from iter_field_docs(value, dotted, include_defaults=include_defaults)


__all__ = [
    "AppSettings",
    "ClassifierSettings",
    "Config",
    "DEFAULT_CONFIG",
    "EngineSettings",
    "LoggingConfig",
    "NormalizerSettings",
    "StrictModel",
    "WindowSettings",
    "iter_field_docs",
]
