"""Atomic artifact writes and upstream table loading."""

from __future__ import annotations

import csv
import json
import os
import uuid
from collections.abc import Iterable, Mapping
from contextlib import suppress
from pathlib import Path
from typing import Any

import polars as pl

from prop_parlay.errors import InputFileError

SUPPORTED_INPUT_SUFFIXES = (".jsonl", ".json", ".csv", ".parquet")


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".tmp-{path.name}-{uuid.uuid4().hex}")
    try:
        with tmp_path.open("wb") as handle:
            handle.write(data)
        os.replace(tmp_path, path)
    except OSError:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
        raise


def atomic_write_text(path: Path, text: str) -> None:
    _atomic_write_bytes(path, text.encode("utf-8"))


def atomic_write_json(path: Path, payload: Any) -> None:
    text = json.dumps(payload, sort_keys=True, ensure_ascii=True, indent=2) + "\n"
    atomic_write_text(path, text)


def atomic_write_jsonl(path: Path, rows: Iterable[Mapping[str, Any]]) -> None:
    lines = [
        json.dumps(row, sort_keys=True, ensure_ascii=True, separators=(",", ":")) + "\n"
        for row in rows
    ]
    atomic_write_text(path, "".join(lines))


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load JSONL rows from disk, skipping blank lines and non-object rows."""
    rows: list[dict[str, Any]] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        row = json.loads(line)
        if isinstance(row, dict):
            rows.append(row)
    return rows


def _load_json_rows(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("rows", payload.get("data", []))
    if not isinstance(payload, list):
        raise InputFileError(f"expected a list of rows in {path}")
    return [row for row in payload if isinstance(row, dict)]


def _load_csv_rows(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return [dict(row) for row in csv.DictReader(handle)]


def load_rows(path: Path) -> list[dict[str, Any]]:
    """Load upstream rows from JSONL, JSON, CSV or Parquet."""
    if not path.exists():
        raise InputFileError(f"input file not found: {path}")
    suffix = path.suffix.lower()
    try:
        if suffix == ".jsonl":
            return load_jsonl(path)
        if suffix == ".json":
            return _load_json_rows(path)
        if suffix == ".csv":
            return _load_csv_rows(path)
        if suffix == ".parquet":
            return pl.read_parquet(path).to_dicts()
    except json.JSONDecodeError as exc:
        raise InputFileError(f"invalid JSON in {path}: {exc}") from exc
    supported = ", ".join(SUPPORTED_INPUT_SUFFIXES)
    raise InputFileError(f"unsupported input format {suffix or '(none)'}; use one of {supported}")
