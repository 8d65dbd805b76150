"""Configuration resolution for the GenAPI SDK."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.gen-api.ru"
DEFAULT_TIMEOUT = 100.0
DEFAULT_CONFIG_FILE = "configuration.json"


@dataclass(frozen=True)
class Config:
    url: str
    api_key: str | None
    timeout: float


def load_config_file(path: str | os.PathLike[str] | None = None) -> dict:
    """Read a JSON configuration file such as ``{"url": "..."}``.

    Without an explicit path, ``$GENAPI_CONFIG`` and then ``./configuration.json``
    are tried. A missing, unreadable or malformed file yields an empty dict.
    """
    if path is None:
        path = os.environ.get("GENAPI_CONFIG") or DEFAULT_CONFIG_FILE
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring configuration file %s: %s", config_path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring configuration file %s: expected a JSON object", config_path)
        return {}
    return data


def resolve_config(
    url: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    config_path: str | os.PathLike[str] | None = None,
) -> Config:
    """Resolve config from constructor args > env vars > config file > defaults."""
    file_url = None
    if not (url or os.environ.get("GENAPI_BASE_URL")):
        file_url = load_config_file(config_path).get("url")
    return Config(
        url=(url or os.environ.get("GENAPI_BASE_URL") or file_url or DEFAULT_BASE_URL).rstrip("/"),
        api_key=api_key or os.environ.get("GENAPI_API_KEY"),
        timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
    )
