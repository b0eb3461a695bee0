"""Configuration loading helpers for warc-urls."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import ExtractConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_ENV_VAR = "WARC_URLS_CONFIG"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _merge(base: dict, overrides: Mapping[str, Any]) -> dict:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif isinstance(value, Mapping):
            merged[key] = {k: v for k, v in value.items() if v is not None}
        else:
            merged[key] = value
    return merged


def resolve_config_path(path: Path | None) -> Path | None:
    """Return the explicit path, else the one named by ``WARC_URLS_CONFIG``."""

    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return None


def load_extract_config(
    path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> ExtractConfig:
    """Build an :class:`ExtractConfig` from an optional file plus overrides.

    ``None`` values in ``overrides`` are ignored so unset CLI options never
    mask values coming from the file.
    """

    payload: dict = {}
    config_path = resolve_config_path(path)
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if config_path.suffix not in CONFIG_EXTENSIONS:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")
        payload = _read_file(config_path)
    payload = _merge(payload, overrides or {})
    return ExtractConfig.model_validate(payload)


__all__ = ["CONFIG_ENV_VAR", "CONFIG_EXTENSIONS", "load_extract_config", "resolve_config_path"]
