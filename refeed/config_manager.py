"""Layered configuration loading for refeed-dedup.

Values are resolved in a fixed order, later layers winning:

1. ``defaults``  built into :mod:`refeed.config_schema`
2. ``file``      ``config.toml`` (or the path passed in)
3. ``env-file``  ``REFEED__SECTION__KEY`` lines of a ``.env`` next to the file
4. ``env``       ``REFEED__SECTION__KEY`` process environment variables

Every leaf key remembers the layer it came from so validation errors and the
``--explain`` command can point at the offending source.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from dotenv import dotenv_values
from pydantic import ValidationError

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Py <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from refeed.config_schema import Config, DEFAULT_CONFIG, iter_field_docs

DEFAULT_ENV_PREFIX = "REFEED"
DEFAULT_CONFIG_FILENAME = "config.toml"
DEFAULT_ENV_FILENAME = ".env"
LAYER_ORDER: Tuple[str, ...] = ("defaults", "file", "env-file", "env")


class ConfigError(RuntimeError):
    """Raised when configuration loading or validation fails."""


@dataclass(frozen=True)
class ConfigValueOrigin:
    """Where a single configuration value was taken from."""

    layer: str
    source: str
    env_var: str | None = None

    def render(self) -> str:
        details = ", ".join(item for item in (self.env_var, self.source) if item)
        return f"{self.layer} ({details})" if details else self.layer


@dataclass
class ConfigMetadata:
    """Provenance returned alongside a loaded :class:`Config`."""

    config_path: Path
    env_path: Optional[Path]
    env_prefix: str
    provenance: Dict[str, ConfigValueOrigin] = field(default_factory=dict)
    load_order: Tuple[str, ...] = LAYER_ORDER

    def describe_sources(self) -> list[str]:
        env_file = str(self.env_path) if self.env_path else "not found"
        return [
            "defaults: built into refeed.config_schema",
            f"config file: {self.config_path}",
            f".env file: {env_file}",
            f"environment prefix: {self.env_prefix}__*",
        ]


# ----------------------------------------------------------------------
# Layer readers
# ----------------------------------------------------------------------
Override = Tuple[str, Any, ConfigValueOrigin]


def _walk(mapping: Mapping[str, Any], prefix: str = "") -> Iterator[Tuple[str, Any]]:
    """Yield ``(dotted.key, leaf value)`` pairs of a nested mapping."""
    for key, value in mapping.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from _walk(value, dotted)
        else:
            yield dotted, value


def _mapping_layer(mapping: Mapping[str, Any], origin: ConfigValueOrigin) -> Iterator[Override]:
    for dotted, value in _walk(mapping):
        yield dotted, value, origin


def _parse_env_value(raw: str) -> Any:
    """Interpret an environment string the way a TOML author would expect."""
    text = raw.strip()
    lowered = text.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    if text and text[0] in "[{" and text[-1] in "]}":
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
    return text


def _env_key_path(name: str, prefix: str) -> Optional[str]:
    marker = f"{prefix}__"
    if not name.startswith(marker):
        return None
    segments = [segment.lower() for segment in name[len(marker) :].split("__") if segment]
    return ".".join(segments) or None


def _env_layer(
    variables: Mapping[str, Optional[str]],
    prefix: str,
    *,
    layer: str,
    source: str,
) -> Iterator[Override]:
    for name, raw in variables.items():
        dotted = _env_key_path(name, prefix)
        if dotted is None or raw is None:
            continue
        yield dotted, _parse_env_value(raw), ConfigValueOrigin(layer, source, env_var=name)


def _read_toml(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _locate_env_file(config_path: Path) -> Optional[Path]:
    for candidate in (
        config_path.parent / DEFAULT_ENV_FILENAME,
        _project_root() / DEFAULT_ENV_FILENAME,
    ):
        if candidate.exists():
            return candidate
    return None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _apply(target: Dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    node = target
    for segment in parents:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = node[segment] = {}
        node = child
    node[leaf] = value


def _validation_error(
    error: ValidationError, provenance: Mapping[str, ConfigValueOrigin]
) -> ConfigError:
    lines = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ())) or "<root>"
        message = issue.get("msg", "invalid value")
        received = issue.get("input")
        if received is not None and not isinstance(received, Mapping):
            message += f" (received={received!r})"
        origin = provenance.get(location)
        if origin is not None:
            message += f" [{origin.render()}]"
        lines.append(f"{location}: {message}")
    return ConfigError("Configuration validation failed:\n - " + "\n - ".join(lines))


def load_config(
    path: Path | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Resolve every layer into a validated :class:`Config` with provenance."""

    config_path = Path(path) if path else _project_root() / DEFAULT_CONFIG_FILENAME
    env_path = _locate_env_file(config_path)

    layers = [
        _mapping_layer(
            DEFAULT_CONFIG.model_dump(mode="python"),
            ConfigValueOrigin("defaults", "refeed.config_schema.DEFAULT_CONFIG"),
        ),
        _mapping_layer(_read_toml(config_path), ConfigValueOrigin("file", str(config_path))),
    ]
    if env_path is not None:
        layers.append(
            _env_layer(
                dotenv_values(env_path, verbose=False),
                env_prefix,
                layer="env-file",
                source=str(env_path),
            )
        )
    layers.append(
        _env_layer(
            os.environ if environ is None else environ,
            env_prefix,
            layer="env",
            source="process",
        )
    )

    merged: Dict[str, Any] = {}
    provenance: Dict[str, ConfigValueOrigin] = {}
    for layer in layers:
        for dotted, value, origin in layer:
            _apply(merged, dotted, value)
            provenance[dotted] = origin

    try:
        config = Config.model_validate(merged)
    except ValidationError as exc:
        raise _validation_error(exc, provenance) from exc

    config._metadata = ConfigMetadata(
        config_path=config_path,
        env_path=env_path,
        env_prefix=env_prefix,
        provenance=provenance,
    )
    return config


def validate_config(config: Config, *, max_workers: Optional[int] = None) -> None:
    """Cross-section checks the per-field bounds cannot express."""

    workers = config.engine.max_workers if max_workers is None else max_workers
    if workers > config.window.limit:
        raise ConfigError(
            f"engine.max_workers ({workers}) must not exceed window.limit ({config.window.limit})"
        )


# ----------------------------------------------------------------------
# Command line helpers
# ----------------------------------------------------------------------
def _display(value: Any) -> str:
    if isinstance(value, Path):
        return str(value)
    try:
        return json.dumps(value, ensure_ascii=False)
    except TypeError:
        return repr(value)


def _toml_literal(value: Any) -> str:
    if value is None:
        return '""'
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_toml_literal(item) for item in value) + "]"
    return json.dumps(str(value))


def render_defaults() -> str:
    """Built-in defaults as a ready-to-edit ``config.toml``."""
    blocks = []
    for section, values in DEFAULT_CONFIG.model_dump(mode="python").items():
        body = "\n".join(f"{key} = {_toml_literal(value)}" for key, value in values.items())
        blocks.append(f"[{section}]\n{body}")
    return "\n\n".join(blocks) + "\n"


def render_schema() -> str:
    """Markdown table documenting every leaf setting."""
    rows = [
        "| Field | Type | Default | Description | Constraints |",
        "| --- | --- | --- | --- | --- |",
    ]
    for entry in iter_field_docs(DEFAULT_CONFIG):
        if entry["is_nested"]:
            continue
        default = "" if entry["default"] is None else _display(entry["default"])
        rows.append(
            f"| {entry['name']} | {entry['type']} | {default} "
            f"| {entry['description']} | {entry['constraints']} |"
        )
    return "\n".join(rows) + "\n"


def explain(config: Config, key: str) -> str:
    """Current value of ``key`` and the layer that supplied it."""
    node: Any = config.model_dump(mode="python")
    for segment in key.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            raise ConfigError(f"Unknown configuration key: {key}")
        node = node[segment]
    metadata: Optional[ConfigMetadata] = config._metadata
    origin = metadata.provenance.get(key) if metadata else None
    return f"{key} = {_display(node)}\nsource: {origin.render() if origin else 'unknown'}"


def _validate(config: Config) -> str:
    validate_config(config)
    return "Configuration OK"


def _show_sources(config: Config) -> str:
    metadata: Optional[ConfigMetadata] = config._metadata
    if metadata is None:
        raise ConfigError("Metadata unavailable for source display")
    return "\n".join(
        ["Active configuration sources:", *(f"- {item}" for item in metadata.describe_sources())]
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="refeed-config",
        description="refeed-dedup configuration utilities",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to the TOML configuration file")
    parser.add_argument(
        "--env-prefix",
        default=DEFAULT_ENV_PREFIX,
        help="Environment variable prefix (e.g. REFEED__CLASSIFIER__SIMILARITY_THRESHOLD)",
    )
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--validate", action="store_true", help="Validate the active configuration")
    actions.add_argument("--dump-defaults", action="store_true", help="Print built-in defaults as TOML")
    actions.add_argument("--print-schema", action="store_true", help="Print a Markdown table of all fields")
    actions.add_argument("--show-sources", action="store_true", help="Show configuration source precedence")
    actions.add_argument("--explain", metavar="KEY", help="Explain where a field value originates")
    args = parser.parse_args(argv)

    if args.dump_defaults:
        sys.stdout.write(render_defaults())
        return 0
    if args.print_schema:
        sys.stdout.write(render_schema())
        return 0

    commands: Dict[str, Callable[[Config], str]] = {
        "validate": _validate,
        "show_sources": _show_sources,
        "explain": lambda config: explain(config, args.explain),
    }
    selected = next(name for name in commands if getattr(args, name))
    try:
        config = load_config(args.config, env_prefix=args.env_prefix)
        print(commands[selected](config))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


__all__ = [
    "Config",
    "ConfigError",
    "ConfigMetadata",
    "ConfigValueOrigin",
    "LAYER_ORDER",
    "explain",
    "load_config",
    "main",
    "render_defaults",
    "render_schema",
    "validate_config",
]


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
