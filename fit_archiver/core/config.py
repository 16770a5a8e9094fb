"""Configuration loading and archive option resolution."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from fit_archiver.core.archiver import ArchiveOptions
from fit_archiver.core.constants import DEFAULT_DIRECTORY, DEFAULT_FILE_TEMPLATE, DEFAULT_MAX_COLLISIONS

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]


class ConfigError(RuntimeError):
    """Raised when config file parsing fails."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_path(path_str: str) -> Path:
    """Expand user/env vars and return absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_config_path() -> Path:
    """Get default config file path."""
    raw = os.getenv("FIT_ARCHIVER_CONFIG_FILE", "~/.config/fit-archiver/config.toml")
    return expand_path(raw)


def _default_config() -> Dict[str, Any]:
    return {
        "archive": {
            "directory": DEFAULT_DIRECTORY,
            "file_template": DEFAULT_FILE_TEMPLATE,
            "move": False,
            "max_collisions": DEFAULT_MAX_COLLISIONS,
        },
        "logging": {
            "level": "warning",
        },
    }


DEFAULT_CONFIG: Dict[str, Any] = _default_config()


def _read_config(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    try:
        if suffix in {".toml", ""}:
            loaded = tomllib.loads(text)
        else:
            loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except Exception as exc:
        if suffix in {".toml", ""}:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain an object/table at the root")
    return loaded


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from disk, merged with defaults."""
    cfg_path = path or default_config_path()
    cfg = _default_config()
    if cfg_path.exists():
        cfg = _deep_merge(cfg, _read_config(cfg_path))
    return cfg


def resolve_archive_options(
    config: Dict[str, Any],
    directory: Optional[Path] = None,
    file_template: Optional[str] = None,
    move: Optional[bool] = None,
    dry_run: bool = False,
    max_collisions: Optional[int] = None,
) -> ArchiveOptions:
    """Resolve archive options with CLI overrides first, then env, then config."""
    section = config.get("archive", {})

    if directory is not None:
        resolved_dir = directory.expanduser()
    else:
        raw_dir = os.getenv("FIT_ARCHIVER_DIRECTORY") or section.get("directory", DEFAULT_DIRECTORY)
        resolved_dir = Path(os.path.expandvars(str(raw_dir))).expanduser()

    if file_template is not None:
        template = file_template
    else:
        template = os.getenv("FIT_ARCHIVER_TEMPLATE") or section.get("file_template", DEFAULT_FILE_TEMPLATE)
    if not isinstance(template, str):
        raise ConfigError("archive.file_template must be a string")

    ceiling = max_collisions if max_collisions is not None else section.get("max_collisions", DEFAULT_MAX_COLLISIONS)
    try:
        ceiling = int(ceiling)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"archive.max_collisions must be an integer, got {ceiling!r}") from exc
    if ceiling < 0:
        raise ConfigError(f"archive.max_collisions must not be negative, got {ceiling}")

    if move is None:
        move = section.get("move", False)
    if not isinstance(move, bool):
        raise ConfigError(f"archive.move must be true or false, got {move!r}")

    return ArchiveOptions(
        directory=resolved_dir,
        file_template=template,
        move=move,
        dry_run=dry_run,
        max_collisions=ceiling,
    )


def resolve_log_level(config: Dict[str, Any], verbose: bool = False, quiet: bool = False) -> str:
    """Resolve log level name from CLI flags and config."""
    if verbose:
        return "debug"
    if quiet:
        return "error"
    return str(config.get("logging", {}).get("level", "warning")).lower()
