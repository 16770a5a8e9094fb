from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import pytest
from typer.testing import CliRunner

from fit_archiver.core.errors import DecodeError
from fit_archiver.core.models import Metadata


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "config" / "missing.toml"
    monkeypatch.setenv("FIT_ARCHIVER_CONFIG_FILE", str(path))
    monkeypatch.delenv("FIT_ARCHIVER_DIRECTORY", raising=False)
    monkeypatch.delenv("FIT_ARCHIVER_TEMPLATE", raising=False)
    return path


@pytest.fixture()
def sample_metadata() -> Metadata:
    return Metadata(
        timestamp=datetime(2023, 6, 1, 7, 15, 30, tzinfo=timezone.utc),
        sport="running",
        sub_sport="trail",
        sport_name="trail_run",
        workout_name="temporun_8km",
    )


@pytest.fixture()
def write_source(tmp_path: Path):
    def _write(name: str, content: bytes = b"fit-data") -> Path:
        path = tmp_path / "inbox" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _write


class FakeExtractor:
    """Extractor returning canned metadata keyed by file name."""

    def __init__(self, by_name: Dict[str, Metadata]) -> None:
        self.by_name = by_name
        self.calls = []

    def extract(self, path: Path) -> Metadata:
        self.calls.append(path)
        if path.name not in self.by_name:
            raise DecodeError(f"Unable to parse '{path}'")
        return self.by_name[path.name]


@pytest.fixture()
def fake_extractor_cls():
    return FakeExtractor
