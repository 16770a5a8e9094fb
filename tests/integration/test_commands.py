from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from fit_archiver.__main__ import app
from fit_archiver.core.models import Metadata


@pytest.fixture()
def use_extractor(monkeypatch: pytest.MonkeyPatch, fake_extractor_cls):
    def _use(by_name, module: str = "archive"):
        extractor = fake_extractor_cls(by_name)
        monkeypatch.setattr(f"fit_archiver.commands.{module}.FitMetadataExtractor", lambda: extractor)
        return extractor

    return _use


def test_archive_plain_output_copies_file(runner, tmp_path: Path, write_source, sample_metadata, use_extractor) -> None:
    source = write_source("activity.fit")
    use_extractor({"activity.fit": sample_metadata})
    archive = tmp_path / "archive"

    result = runner.invoke(app, ["--plain", "archive", "-d", str(archive), str(source)])

    assert result.exit_code == 0
    destination = archive / "2023" / "06" / "2023-06-01-071530-running.fit"
    assert destination.exists()
    assert source.exists()
    assert f"copied\t{source}\t{destination}\t-" in result.stdout
    assert "Processed 1 files" in result.stdout


def test_archive_json_output(runner, tmp_path: Path, write_source, sample_metadata, use_extractor) -> None:
    source = write_source("activity.fit")
    use_extractor({"activity.fit": sample_metadata})

    result = runner.invoke(
        app,
        ["--json", "archive", "-d", str(tmp_path / "archive"), "-f", "$s/$S/$n-$w", "--move", str(source)],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["mode"] == "move"
    assert payload["summary"] == {"total": 1, "placed": 1, "skipped": 0, "failed": 0}
    [item] = payload["results"]
    assert item["status"] == "moved"
    assert item["destination"] == str(tmp_path / "archive" / "running" / "trail" / "trail_run-temporun_8km.fit")
    assert not source.exists()


def test_archive_dry_run_with_collision(runner, tmp_path: Path, write_source, sample_metadata, use_extractor) -> None:
    archive = tmp_path / "archive"
    archive.mkdir()
    (archive / "running.fit").write_bytes(b"already here")
    source = write_source("activity.fit", b"new")
    use_extractor({"activity.fit": sample_metadata})

    result = runner.invoke(app, ["--json", "archive", "-n", "-d", str(archive), "-f", "$s", str(source)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["dry_run"] is True
    assert payload["results"][0]["status"] == "would-copy"
    assert payload["results"][0]["destination"] == str(archive / "running-1.fit")
    assert sorted(path.name for path in archive.iterdir()) == ["running.fit"]


def test_archive_failures_set_exit_code_and_continue(
    runner, tmp_path: Path, write_source, sample_metadata, use_extractor
) -> None:
    broken = write_source("broken.fit")
    good = write_source("good.fit")
    use_extractor({"good.fit": sample_metadata})

    result = runner.invoke(app, ["--plain", "archive", "-d", str(tmp_path / "archive"), str(broken), str(good)])

    assert result.exit_code == 1
    assert f"failed\t{broken}\t-\tunreadable" in result.stdout
    assert "copied\t" in result.stdout
    assert "Processed 2 files with 1 errors." in result.stdout


def test_archive_invalid_template_is_fatal(runner, tmp_path: Path, write_source, use_extractor) -> None:
    source = write_source("activity.fit")
    extractor = use_extractor({})

    result = runner.invoke(app, ["archive", "-d", str(tmp_path), "-f", "%Y/$", str(source)])

    assert result.exit_code == 2
    assert "Invalid file template" in result.stdout
    assert extractor.calls == []


def test_archive_uses_config_file(runner, tmp_path: Path, write_source, sample_metadata, use_extractor) -> None:
    archive = tmp_path / "from-config"
    config = tmp_path / "config.toml"
    config.write_text(f'[archive]\ndirectory = "{archive.as_posix()}"\nfile_template = "%Y-$s"\n')
    source = write_source("activity.fit")
    use_extractor({"activity.fit": sample_metadata})

    result = runner.invoke(app, ["--config", str(config), "--plain", "archive", str(source)])

    assert result.exit_code == 0
    assert (archive / "2023-running.fit").exists()


def test_archive_copy_flag_overrides_config_move(
    runner, tmp_path: Path, write_source, sample_metadata, use_extractor
) -> None:
    archive = tmp_path / "archive"
    config = tmp_path / "config.toml"
    config.write_text(f'[archive]\ndirectory = "{archive.as_posix()}"\nfile_template = "$s"\nmove = true\n')
    source = write_source("activity.fit", b"data")
    use_extractor({"activity.fit": sample_metadata})

    result = runner.invoke(app, ["--config", str(config), "--plain", "archive", "--copy", str(source)])

    assert result.exit_code == 0
    assert result.stdout.startswith("copied\t")
    assert source.exists()
    assert (archive / "running.fit").read_bytes() == b"data"


def test_archive_empty_template_option_is_fatal(runner, tmp_path: Path, write_source, use_extractor) -> None:
    source = write_source("activity.fit")
    extractor = use_extractor({})

    result = runner.invoke(app, ["archive", "-d", str(tmp_path), "-f", "", str(source)])

    assert result.exit_code == 2
    assert "Invalid file template" in result.stdout
    assert extractor.calls == []


def test_archive_bad_config_value(runner, tmp_path: Path, write_source, use_extractor) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[archive]\nmax_collisions = -3\n")
    source = write_source("activity.fit")
    use_extractor({})

    result = runner.invoke(app, ["--config", str(config), "archive", str(source)])

    assert result.exit_code == 2
    assert "Config error" in result.stdout


def test_archive_pretty_output(runner, tmp_path: Path, write_source, sample_metadata, use_extractor) -> None:
    source = write_source("activity.fit")
    use_extractor({"activity.fit": sample_metadata})

    result = runner.invoke(app, ["archive", "-d", str(tmp_path / "archive"), str(source)])

    assert result.exit_code == 0
    assert "copied" in result.stdout
    assert "Processed 1 files" in result.stdout


def test_inspect_json_output(runner, write_source, use_extractor) -> None:
    good = write_source("good.fit")
    use_extractor({"good.fit": Metadata(timestamp=datetime(2023, 7, 26, 6, 22, 4), sport="running")}, module="inspect")

    result = runner.invoke(app, ["--json", "inspect", str(good)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["files"][0]["timestamp"] == "2023-07-26T06:22:04"
    assert payload["files"][0]["sport"] == "running"
    assert payload["files"][0]["workout_name"] == "unknown"


def test_inspect_plain_output_reports_unreadable(runner, write_source, sample_metadata, use_extractor) -> None:
    good = write_source("good.fit")
    broken = write_source("broken.fit")
    use_extractor({"good.fit": sample_metadata}, module="inspect")

    result = runner.invoke(app, ["--plain", "inspect", str(good), str(broken)])

    assert result.exit_code == 1
    assert "trail_run\ttemporun_8km" in result.stdout
    assert f"{broken}\terror" in result.stdout
