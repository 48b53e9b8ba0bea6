from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .cache import CacheStore, DirectoryCacheStore, MemoryCacheStore
from .client import API_BASE_URL, DEFAULT_TIMEOUT
from .utils import env_text, load_yaml_file, validate_url


@dataclass
class Settings:
    """Connection and cache settings for TheTVDB client."""

    api_key: str
    base_url: str = API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    transport_retries: int = 2
    cache_dir: Optional[Path] = None
    language: Optional[str] = None


def _build_settings(data: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("'tvdb' must be provided as a mapping when specified")

    values: dict[str, Any] = {}
    if data.get("api_key") is not None:
        values["api_key"] = str(data["api_key"]).strip()
    if data.get("base_url") is not None:
        values["base_url"] = str(data["base_url"]).strip()
    if data.get("timeout") is not None:
        try:
            values["timeout"] = float(data["timeout"])
        except (TypeError, ValueError) as exc:
            raise ValueError("'tvdb.timeout' must be a number") from exc
    if data.get("transport_retries") is not None:
        try:
            values["transport_retries"] = int(data["transport_retries"])
        except (TypeError, ValueError) as exc:
            raise ValueError("'tvdb.transport_retries' must be an integer") from exc
    if data.get("cache_dir") is not None:
        values["cache_dir"] = Path(str(data["cache_dir"])).expanduser()
    if data.get("language") is not None:
        values["language"] = str(data["language"]).strip() or None
    return values


def _apply_env_overrides(values: dict[str, Any], env: Mapping[str, str]) -> None:
    api_key = env_text(env, "TVDB_API_KEY")
    if api_key:
        values["api_key"] = api_key
    base_url = env_text(env, "TVDB_BASE_URL")
    if base_url:
        values["base_url"] = base_url
    cache_dir = env_text(env, "TVDB_CACHE_DIR")
    if cache_dir:
        values["cache_dir"] = Path(cache_dir).expanduser()
    language = env_text(env, "TVDB_LANGUAGE")
    if language:
        values["language"] = language


def _validate(values: dict[str, Any]) -> None:
    if not values.get("api_key"):
        raise ValueError(
            "TheTVDB API key not found. Set 'tvdb.api_key' in the config file "
            "or the TVDB_API_KEY environment variable"
        )
    base_url = values.get("base_url", API_BASE_URL)
    if not validate_url(base_url):
        raise ValueError(f"'tvdb.base_url' must be a valid http/https URL, got: {base_url}")
    if values.get("timeout", DEFAULT_TIMEOUT) <= 0:
        raise ValueError("'tvdb.timeout' must be greater than 0")
    if values.get("transport_retries", 0) < 0:
        raise ValueError("'tvdb.transport_retries' must be greater than or equal to 0")


def load_settings(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from an optional YAML file, then apply environment overrides.

    The YAML file keeps its settings under a ``tvdb`` mapping; ``${VAR}``
    references are expanded. ``TVDB_API_KEY``, ``TVDB_BASE_URL``,
    ``TVDB_CACHE_DIR`` and ``TVDB_LANGUAGE`` take precedence over the file.

    Raises:
        ValueError: If the file is not valid YAML, a value is invalid or no API
            key is configured
    """
    environ = os.environ if env is None else env
    values: dict[str, Any] = {}
    if path is not None:
        try:
            data = load_yaml_file(path)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        values.update(_build_settings(data.get("tvdb", {}) or {}))
    _apply_env_overrides(values, environ)
    _validate(values)
    return Settings(**values)


def build_cache_store(settings: Settings) -> CacheStore:
    if settings.cache_dir is not None:
        return DirectoryCacheStore(settings.cache_dir)
    return MemoryCacheStore()
