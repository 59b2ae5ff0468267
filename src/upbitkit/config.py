from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .settings import Settings

ENV_PREFIX = "UPBITKIT_"

# Reserved variables that are not settings paths.
_RESERVED = {"CONFIG", "LOG_LEVEL", "ACCESS_KEY", "SECRET_KEY"}


def _deep_set(obj: dict[str, Any], path: list[str], value: Any) -> None:
    cur: dict[str, Any] = obj
    for key in path[:-1]:
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    cur[path[-1]] = value


def _parse_env_value(raw: str) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _apply_env_overrides(data: dict[str, Any], *, prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Apply ``UPBITKIT_<SECTION>__<KEY>`` overrides on top of file values.

    ``UPBITKIT_ACCESS_KEY`` and ``UPBITKIT_SECRET_KEY`` are shorthands for
    ``exchange.credentials.access_key`` and ``exchange.credentials.secret``.
    Credential values are kept as strings even when they look like numbers.
    """
    merged: dict[str, Any] = dict(data)

    for key, raw_value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        if remainder in _RESERVED:
            continue

        path = [p.lower() for p in remainder.split("__") if p]
        if not path:
            continue

        value = raw_value if "credentials" in path else _parse_env_value(raw_value)
        _deep_set(merged, path, value)

    access_key = os.environ.get(f"{prefix}ACCESS_KEY")
    secret = os.environ.get(f"{prefix}SECRET_KEY")
    if access_key:
        _deep_set(merged, ["exchange", "credentials", "access_key"], access_key)
    if secret:
        _deep_set(merged, ["exchange", "credentials", "secret"], secret)

    return merged


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from YAML (if the file exists) plus environment overrides.

    Raises:
        ValueError: If the file root is not a mapping or validation fails
    """
    if config_path is None:
        config_path = os.environ.get(f"{ENV_PREFIX}CONFIG", "config.yml")

    path = Path(config_path)
    if path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if loaded is None:
            data: dict[str, Any] = {}
        elif isinstance(loaded, dict):
            data = loaded
        else:
            raise ValueError(f"Config root must be a mapping, got: {type(loaded)!r}")
    else:
        data = {}

    data = _apply_env_overrides(data)

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
