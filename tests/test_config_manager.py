from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import validate_config
from refeed.config_manager import Config, ConfigError, load_config, main
from refeed.config_manager import validate_config as check_worker_budget
from refeed.config_schema import DEFAULT_CONFIG, iter_field_docs


def _flatten(mapping: dict[str, object], prefix: str = "") -> set[str]:
    keys: set[str] = set()
    for name, value in mapping.items():
        path = f"{prefix}.{name}" if prefix else name
        keys.add(path)
        if isinstance(value, dict):
            keys.update(_flatten(value, path))
    return keys


def test_precedence_env_overrides(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[classifier]\nsimilarity_threshold = 0.6\n", encoding="utf-8")
    env_file = tmp_path / ".env"
    env_file.write_text("REFEED__CLASSIFIER__SIMILARITY_THRESHOLD=0.7\n", encoding="utf-8")
    environ = {"REFEED__CLASSIFIER__SIMILARITY_THRESHOLD": "0.75"}

    config = load_config(config_file, environ=environ)

    assert config.classifier.similarity_threshold == 0.75
    provenance = config._metadata.provenance["classifier.similarity_threshold"]
    assert provenance.layer == "env"
    assert provenance.env_var == "REFEED__CLASSIFIER__SIMILARITY_THRESHOLD"


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml", environ={})

    assert config.model_dump() == DEFAULT_CONFIG.model_dump()
    assert config._metadata.env_path is None
    assert config._metadata.provenance["window.days"].layer == "defaults"


def test_stop_words_from_comma_separated_env(tmp_path: Path) -> None:
    config = load_config(
        tmp_path / "config.toml",
        environ={"REFEED__NORMALIZER__EXTRA_STOP_WORDS": "Lexus, press"},
    )
    assert config.normalizer.extra_stop_words == ["lexus", "press"]


def test_stop_words_from_json_list_env(tmp_path: Path) -> None:
    config = load_config(
        tmp_path / "config.toml",
        environ={"REFEED__NORMALIZER__EXTRA_STOP_WORDS": '["Lexus"]'},
    )
    assert config.normalizer.extra_stop_words == ["lexus"]


def test_blank_log_path_is_unset(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text('[logging]\nfile_path = ""\nlevel = "debug"\n', encoding="utf-8")

    config = load_config(config_file, environ={})

    assert config.logging.file_path is None
    assert config.logging.level == "DEBUG"


def test_validation_errors_report_source(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[classifier]\nsimilarity_threshold = 1.5\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(config_file, environ={})

    assert "classifier.similarity_threshold" in str(excinfo.value)
    assert "file" in str(excinfo.value)


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[classifier]\ncosine_threshold = 0.9\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


def test_malformed_toml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[classifier\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


def test_validate_config_checks_worker_budget() -> None:
    data = DEFAULT_CONFIG.model_dump(mode="python")
    data["window"]["limit"] = 2
    data["engine"]["max_workers"] = 4

    with pytest.raises(ConfigError):
        validate_config(Config.model_validate(data))
    validate_config(DEFAULT_CONFIG)


def test_worker_override_is_checked_against_window_limit() -> None:
    with pytest.raises(ConfigError, match="window.limit"):
        check_worker_budget(DEFAULT_CONFIG, max_workers=DEFAULT_CONFIG.window.limit + 1)
    check_worker_budget(DEFAULT_CONFIG, max_workers=DEFAULT_CONFIG.window.limit)


def test_cli_validate_runs_consistency_checks(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[window]\nlimit = 2\n\n[engine]\nmax_workers = 3\n", encoding="utf-8")

    assert main(["--config", str(config_file), "--validate"]) == 1
    assert "engine.max_workers (3)" in capsys.readouterr().err


def test_schema_keys_cover_defaults() -> None:
    schema_keys = {
        entry["name"]
        for entry in iter_field_docs(DEFAULT_CONFIG)
        if not entry.get("is_nested")
    }
    default_keys = _flatten(DEFAULT_CONFIG.model_dump(mode="python"))
    assert schema_keys.issubset(default_keys)


@pytest.mark.parametrize(
    "path",
    [
        "classifier.similarity_threshold",
        "classifier.title_similarity_threshold",
        "classifier.time_proximity_hours",
        "normalizer.extra_stop_words",
        "window.days",
        "window.limit",
        "engine.max_workers",
        "logging.level",
    ],
)
def test_documented_keys_are_defined(path: str) -> None:
    schema_keys = {
        entry["name"]
        for entry in iter_field_docs(DEFAULT_CONFIG)
        if not entry.get("is_nested")
    }
    assert path in schema_keys


def test_cli_dump_defaults(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--dump-defaults"]) == 0
    output = capsys.readouterr().out
    assert "[classifier]" in output
    assert "similarity_threshold = 0.8" in output
    assert "extra_stop_words = []" in output


def test_cli_print_schema(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--print-schema"]) == 0
    output = capsys.readouterr().out
    assert "| classifier.similarity_threshold | float | 0.8 |" in output
    assert ">= 0.0, <= 1.0" in output


def test_cli_explain_reports_origin(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[window]\ndays = 3\n", encoding="utf-8")
    monkeypatch.delenv("REFEED__WINDOW__DAYS", raising=False)

    assert main(["--config", str(config_file), "--explain", "window.days"]) == 0
    output = capsys.readouterr().out
    assert "window.days = 3" in output
    assert f"file ({config_file})" in output


def test_cli_reports_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[window]\ndays = 0\n", encoding="utf-8")

    assert main(["--config", str(config_file), "--validate"]) == 1
    assert "window.days" in capsys.readouterr().err


def test_cli_unknown_explain_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(tmp_path / "config.toml"), "--explain", "window.nope"]) == 1
    assert "Unknown configuration key" in capsys.readouterr().err
