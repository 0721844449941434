from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
import yaml
from pydantic import ValidationError

from connchk.errors import ConfigurationError
from connchk.models import Target, TargetList

YAML_SUFFIXES = {".yml", ".yaml"}


def read_document(path: Path) -> dict[str, Any]:
    """Read a TOML (default) or YAML target document into plain python data."""
    if not path.exists():
        raise ConfigurationError(f"Missing configuration file at {path}")

    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text) or {}
        else:
            data = tomllib.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping with a 'target' list")
    return data


def parse_targets(data: dict[str, Any]) -> list[Target]:
    try:
        reg = TargetList.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid target configuration: {exc}") from exc
    return list(reg.target)


def load_targets(path: Path) -> list[Target]:
    return parse_targets(read_document(Path(path)))
