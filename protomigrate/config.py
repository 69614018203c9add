"""Configuration loading for protomigrate (.protomigrate.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .knowledge import NEVER_USE, USE_NO_LONGER, KnownDeprecation

_CONFIG_NAME = ".protomigrate.yml"
_POLICY_NAMES = {"never": NEVER_USE, "no-longer": USE_NO_LONGER}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProtomigrateConfig:
    """Represents the settings defined in .protomigrate.yml."""

    root: Path
    target_version: Optional[int] = None
    knowledge: List[KnownDeprecation] = field(default_factory=list)
    verbose: bool = False
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> ProtomigrateConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProtomigrateConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{_CONFIG_NAME} must contain a mapping at the root")

    target_version = None
    if data.get("target_version") is not None:
        target_version = _as_version(data.get("target_version"), "target_version")

    knowledge_data = data.get("knowledge")
    if knowledge_data is not None and not isinstance(knowledge_data, dict):
        raise ConfigError("knowledge must map qualified names to entries")
    knowledge = [
        _parse_entry(str(name), entry) for name, entry in (knowledge_data or {}).items()
    ]

    logging_data = data.get("logging")
    if logging_data is not None and not isinstance(logging_data, dict):
        raise ConfigError("logging must be a mapping")
    logging_data = logging_data or {}
    verbose = _as_bool(logging_data.get("verbose"), "logging.verbose")
    log_file = None
    if logging_data.get("file") is not None:
        log_file = (root / Path(str(logging_data["file"])).expanduser()).resolve()

    return ProtomigrateConfig(
        root=root,
        target_version=target_version,
        knowledge=knowledge,
        verbose=verbose,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / _CONFIG_NAME).resolve()
    if config_path.name != _CONFIG_NAME:
        return (config_path.parent / _CONFIG_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_entry(name: str, entry: Any) -> KnownDeprecation:
    if not isinstance(entry, dict):
        raise ConfigError(f"knowledge entry {name} must be a mapping")
    deprecated_since = _as_version(entry.get("deprecated_since"), f"{name}.deprecated_since")
    alternative = entry.get("alternative_since", deprecated_since)
    if isinstance(alternative, str) and alternative.strip().lower() in _POLICY_NAMES:
        alternative_version = _POLICY_NAMES[alternative.strip().lower()]
    else:
        alternative_version = _as_version(alternative, f"{name}.alternative_since")
    return KnownDeprecation.from_versions(name, deprecated_since, alternative_version)


def _as_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"{key} must be a boolean")


def _as_version(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a non-negative integer")
    if isinstance(value, int):
        version = value
    elif isinstance(value, str):
        try:
            version = int(value.strip())
        except ValueError:
            raise ConfigError(f"{key} must be a non-negative integer") from None
    else:
        raise ConfigError(f"{key} must be a non-negative integer")
    if version < 0:
        raise ConfigError(f"{key} must be a non-negative integer")
    return version


__all__ = ["ConfigError", "ProtomigrateConfig", "load_config"]
