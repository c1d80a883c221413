"""End-to-end style tests for the ``refeed-dedup`` CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from refeed import cli
from refeed.dedup import detector as detector_module
from refeed.contracts import Record

WINDOW: List[Dict[str, Any]] = [
    {
        "title": "Toyota Unveils Electric Vehicle for 2025 Market",
        "link": "https://pressroom.toyota.com/ev-2025",
        "publishedAt": "2025-03-01T09:00:00Z",
        "source": "toyota-newsroom",
        "tags": ["electric"],
    },
    {
        "title": "Toyota Reports Strong Financial Results for Q2",
        "link": "https://pressroom.toyota.com/q2",
        "publishedAt": "2025-03-01T08:00:00Z",
        "source": "toyota-newsroom",
    },
]

CANDIDATE: Dict[str, Any] = {
    "title": "Toyota Launches New Electric Vehicle in 2025",
    "link": "https://pressroom.toyota.com/ev-2025?utm_source=rss",
    "publishedAt": "2025-03-01T10:30:00Z",
    "source": "autos-wire",
    "tags": ["electric", "battery"],
}


class NullModuleLogger:
    def info(self, payload: Dict[str, Any]) -> None:
        pass

    def debug(self, payload: Dict[str, Any]) -> None:
        pass


class NullLoggerFactory:
    def create_module_logger(self, _: str) -> NullModuleLogger:
        return NullModuleLogger()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep loguru sinks away from the captured streams."""

    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)
    monkeypatch.setattr(detector_module, "get_logger", NullLoggerFactory)


@pytest.fixture
def inputs(tmp_path: Path) -> Dict[str, Path]:
    window_path = tmp_path / "window.json"
    candidate_path = tmp_path / "candidate.json"
    window_path.write_text(json.dumps(WINDOW), encoding="utf-8")
    candidate_path.write_text(json.dumps(CANDIDATE), encoding="utf-8")
    return {
        "window": window_path,
        "candidate": candidate_path,
        "config": tmp_path / "config.toml",
    }


def _args(inputs: Dict[str, Path], *extra: str) -> List[str]:
    return [
        "--candidate",
        str(inputs["candidate"]),
        "--window",
        str(inputs["window"]),
        "--config",
        str(inputs["config"]),
        *extra,
    ]


def test_cli_prints_json_report(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(_args(inputs)) == 0

    report = json.loads(capsys.readouterr().out)
    expected_id = Record.model_validate(WINDOW[0]).id
    assert report == {
        "hasDuplicates": True,
        "count": 1,
        "details": [
            {"matchedId": expected_id, "similarityPercent": 50, "reasons": ["identical-url"]}
        ],
    }


def test_cli_text_summary(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(_args(inputs, "--text", "--workers", "2")) == 0

    output = capsys.readouterr().out.strip()
    assert output.startswith("1 duplicate(s): ")
    assert "identical-url" in output


def test_cli_resolve_prints_merged_record(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(_args(inputs, "--resolve")) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["action"] == "merged"
    assert payload["targetId"] == Record.model_validate(WINDOW[0]).id
    assert payload["record"]["tags"] == ["electric", "battery"]
    assert payload["record"]["sources"] == ["toyota-newsroom", "autos-wire"]
    assert payload["record"]["alternativeLinks"] == [CANDIDATE["link"]]
    assert payload["report"]["hasDuplicates"] is True


def test_cli_no_duplicates(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    inputs["window"].write_text(json.dumps({"records": WINDOW[1:]}), encoding="utf-8")

    assert cli.main(_args(inputs)) == 0
    assert json.loads(capsys.readouterr().out) == {"hasDuplicates": False}


def test_cli_recent_window_drops_old_records(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(_args(inputs, "--recent", "--text")) == 0
    assert capsys.readouterr().out.strip() == "No duplicates found"


def test_cli_reports_missing_input(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    inputs["candidate"].unlink()

    assert cli.main(_args(inputs)) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_cli_rejects_non_list_window(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    inputs["window"].write_text('"not records"', encoding="utf-8")

    assert cli.main(_args(inputs)) == 1
    assert "expected a JSON list" in capsys.readouterr().err


def test_cli_reports_invalid_config(inputs, capsys: pytest.CaptureFixture[str]) -> None:
    inputs["config"].write_text("[engine]\nmax_workers = 0\n", encoding="utf-8")

    assert cli.main(_args(inputs)) == 1
    assert "engine.max_workers" in capsys.readouterr().err


def test_cli_rejects_more_workers_than_window_slots(
    inputs, capsys: pytest.CaptureFixture[str]
) -> None:
    inputs["config"].write_text("[window]\nlimit = 4\n", encoding="utf-8")

    assert cli.main(_args(inputs, "--workers", "8")) == 1
    assert "must not exceed window.limit" in capsys.readouterr().err

    assert cli.main(_args(inputs, "--workers", "4", "--text")) == 0
