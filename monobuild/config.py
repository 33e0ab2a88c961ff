"""Configuration loading for monobuild (monobuild.yaml)."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import yaml

from .errors import ConfigError
from .models import BuildCommand, MonoBuildConfig, Target

DEFAULT_CONFIG_FILE = "monobuild.yaml"


def load_config(config_path: Path | str, root: Path | str | None = None) -> MonoBuildConfig:
    """Load and validate configuration from disk.

    Relative paths inside the document are resolved against ``root``, which
    defaults to the current working directory (the repository root when ``mb``
    is run as intended).
    """
    config_file = Path(config_path).expanduser()
    repo_root = Path(root).expanduser().resolve() if root is not None else Path.cwd()
    if not config_file.is_absolute():
        config_file = repo_root / config_file

    data = _read_config(config_file)
    return parse_config(data, repo_root)


def parse_config(data: Dict[str, Any], root: Path) -> MonoBuildConfig:
    """Build a validated config from an already-decoded mapping."""
    if not isinstance(data, dict):
        raise ConfigError("monobuild config must contain a mapping at the root")

    dep_source_dirs = tuple(
        _normalise_dep_dir(entry) for entry in _as_str_list(data.get("dep_source_dirs"), "dep_source_dirs")
    )
    _validate_dep_source_dirs(dep_source_dirs, root)

    raw_targets = data.get("targets")
    if raw_targets is None:
        raw_targets = []
    if not isinstance(raw_targets, list):
        raise ConfigError("targets must be a list")

    targets: List[Target] = []
    seen: Set[str] = set()
    for index, raw in enumerate(raw_targets):
        target = _parse_target(raw, index)
        if target.path in seen:
            raise ConfigError(f"target.path: {target.path} has been used more than once")
        _validate_target(target, root)
        seen.add(target.path)
        targets.append(target)

    return MonoBuildConfig(root=root, dep_source_dirs=dep_source_dirs, targets=tuple(targets))


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"config file {path} not found") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_target(raw: Any, index: int) -> Target:
    if not isinstance(raw, dict):
        raise ConfigError(f"targets[{index}] must be a mapping")
    path = _as_str(raw.get("path"))
    if not path:
        raise ConfigError(f"targets[{index}].path is required")
    path = _normalise_dir(path)

    watch_patterns = tuple(_as_str_list(raw.get("watch_pattern"), f"target {path} watch_pattern"))

    command_data = raw.get("build_command")
    if not isinstance(command_data, dict):
        raise ConfigError(f"target {path}: build_command must be a mapping")
    command = _as_str(command_data.get("command"))
    if not command:
        raise ConfigError(f"target {path}: build_command.command is required")
    args = tuple(_as_str_list(command_data.get("args"), f"target {path} build_command.args"))
    build_dir = _as_str(command_data.get("dir")) or None

    return Target(
        path=path,
        build_command=BuildCommand(command=command, args=args, dir=build_dir),
        watch_patterns=watch_patterns,
    )


def _validate_dep_source_dirs(dirs: Sequence[str], root: Path) -> None:
    for entry in dirs:
        location = root / entry
        if not location.exists():
            raise ConfigError(f"dep_source_dir: {entry} does not exist")
        if not location.is_dir():
            raise ConfigError(f"dep_source_dir: {entry} is not a directory")


def _validate_target(target: Target, root: Path) -> None:
    location = root / target.path
    if not location.exists():
        raise ConfigError(f"target.path: {target.path} does not exist")
    if not location.is_dir():
        raise ConfigError(f"target.path: {target.path} is not a directory")

    build_dir = target.build_command.dir
    if build_dir:
        location = root / build_dir
        if not location.is_dir():
            raise ConfigError(
                f"target {target.path}: build_command.dir {build_dir} is not an existing directory"
            )


def _normalise_dir(value: str) -> str:
    """Strip ``./`` and trailing slashes so entries compare against git's relative paths."""
    cleaned = posixpath.normpath(value.replace("\\", "/"))
    return "" if cleaned == "." else cleaned


def _normalise_dep_dir(value: str) -> str:
    """Drop a leading ``./`` only; the rest is used as a plain string prefix of changed paths."""
    cleaned = value.replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return cleaned or value


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any, label: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise ConfigError(f"{label} must be a list of strings")
    result: List[str] = []
    for item in value:
        text = _as_str(item)
        if text is None:
            raise ConfigError(f"{label} must only contain strings, got {item!r}")
        result.append(text)
    return tuple(result)


__all__ = ["DEFAULT_CONFIG_FILE", "load_config", "parse_config"]
