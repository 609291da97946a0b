from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .dates import DateWindow
from .graphql import DEFAULT_GRAPHQL_URL, split_repository

DEFAULT_CACHE_DIR = ".issuewindow_cache"


class ConfigError(RuntimeError):
    pass


@dataclass
class ReportConfig:
    version: int
    repository: str | None
    graphql_url: str
    token: str | None
    window_start: str | None
    window_end: str | None
    cache_enabled: bool
    cache_dir: Path
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str
    # Environment authentication configuration
    env_auth_load_dotenv: bool
    env_auth_dotenv_path: str | None

    def window(self) -> DateWindow:
        if not self.window_start or not self.window_end:
            raise ConfigError("Both window start and end dates are required")
        try:
            return DateWindow.parse(self.window_start, self.window_end)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid report window: {exc}") from exc

    def require_repository(self) -> str:
        if not self.repository:
            raise ConfigError("No repository configured (github.repository or --repo)")
        try:
            split_repository(self.repository)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return self.repository


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:])
    return value


def _as_str(value: Any) -> str | None:
    # YAML turns bare 2018-01-01 into a date object.
    if value is None:
        return None
    return value.isoformat() if hasattr(value, 'isoformat') else str(value)


def default_config() -> ReportConfig:
    return build_config({}, Path.cwd())


def build_config(raw: dict[str, Any], base_dir: Path) -> ReportConfig:
    gh = cast(dict[str, Any], raw.get('github', {}) or {})
    window = cast(dict[str, Any], raw.get('window', {}) or {})
    cache = cast(dict[str, Any], raw.get('cache', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    cache_dir = Path(cache.get('directory', DEFAULT_CACHE_DIR))
    if not cache_dir.is_absolute():
        cache_dir = base_dir / cache_dir

    return ReportConfig(
        version=int(raw.get('version', 1)),
        repository=gh.get('repository'),
        graphql_url=gh.get('graphql_url', DEFAULT_GRAPHQL_URL),
        token=_resolve_env_var(gh.get('token')),
        window_start=_as_str(window.get('start')),
        window_end=_as_str(window.get('end')),
        cache_enabled=bool(cache.get('enabled', True)),
        cache_dir=cache_dir,
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
    )


def load_config(path: str | Path) -> ReportConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8'))
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f'Configuration root in {p} must be a mapping')
    return build_config(cast(dict[str, Any], loaded), p.parent)


__all__ = ["ConfigError", "ReportConfig", "build_config", "default_config", "load_config"]
