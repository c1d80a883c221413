"""
Command line entry point: check one candidate record against a window.

Usage:
    refeed-dedup --candidate item.json --window recent.json          # JSON report
    refeed-dedup --candidate item.json --window recent.json --text   # one-line summary
    refeed-dedup --candidate item.json --window recent.json --resolve
    refeed-dedup ... --recent --workers 4 --config config.toml

Record payloads accept snake_case or camelCase keys (``publishedAt``,
``alternativeLinks``...). File handling lives here only; the engine itself
works on in-memory values.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from refeed.config_manager import Config, ConfigError, load_config, validate_config
from refeed.contracts import ClassifierConfig, Record
from refeed.dedup import DuplicateDetector, select_window
from refeed.utils.logger import setup_logging
from refeed.utils.url_canonicalizer import configure_canonicalization_cache


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _load_window(path: Path) -> List[Record]:
    payload = _read_json(path)
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a JSON list of records")
    return [Record.model_validate(item) for item in payload]


def _build_detector(config: Config, workers: Optional[int]) -> DuplicateDetector:
    classifier_config = ClassifierConfig.from_settings(
        config.classifier.model_dump(mode="python"),
        config.normalizer.model_dump(mode="python"),
    )
    return DuplicateDetector(
        classifier_config,
        max_workers=workers if workers is not None else config.engine.max_workers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refeed-dedup",
        description="Classify a news record against a window of prior records",
    )
    parser.add_argument("--candidate", type=Path, required=True, help="JSON file with one record")
    parser.add_argument("--window", type=Path, required=True, help="JSON file with a list of records")
    parser.add_argument("--config", type=Path, help="Path to the TOML configuration file")
    parser.add_argument("--workers", type=int, help="Worker threads for the window scan")
    parser.add_argument(
        "--recent",
        action="store_true",
        help="Restrict the window to the configured trailing days/limit first",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--text", action="store_true", help="Print a one-line summary")
    output.add_argument(
        "--resolve",
        action="store_true",
        help="Print the ingest decision (new/updated/merged/unchanged) and resulting record",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        validate_config(config, max_workers=args.workers)
        setup_logging(
            {
                "level": "DEBUG" if args.verbose else config.logging.level,
                "file_path": str(config.logging.file_path) if config.logging.file_path else None,
                "max_file_size": f"{config.logging.max_file_size_mb} MB",
                "retention": f"{config.logging.retention_days} days",
            }
        )
        configure_canonicalization_cache(config.normalizer.url_cache_size)

        candidate = Record.model_validate(_read_json(args.candidate))
        window = _load_window(args.window)
        if args.recent:
            window = select_window(window, days=config.window.days, limit=config.window.limit)

        detector = _build_detector(config, args.workers)
        if args.resolve:
            decision = detector.resolve(candidate, window)
            payload = {
                "action": decision.action,
                "targetId": decision.target_id,
                "record": decision.record.to_dict(),
                "report": detector.build_report(list(decision.matches)).to_dict(),
            }
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            return 0

        report = detector.build_report(detector.find_duplicates(candidate, window))
        if args.text:
            print(report.summary())
        else:
            print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
