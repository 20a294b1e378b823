"""Configuration loading utilities."""

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8000"

DEFAULT_CONFIG = {
    "api": {
        "base_url": DEFAULT_API_URL,
        "timeout": None,
    },
    "search": {
        "min_query_length": 2,
        "debounce_ms": 300,
        "limit": 10,
        "cancel_superseded": True,
    },
    "session": {
        "max_age_seconds": 30 * 60,
    },
}


@dataclass(frozen=True)
class SearchSettings:
    """Tuning knobs for the incremental search selector."""

    min_query_length: int
    debounce: float
    """Quiet period in seconds."""
    limit: int
    cancel_superseded: bool


def load_config(config_path: str | None = None) -> dict:
    """Load configuration from config.json, falling back to defaults.

    The API base URL may be overridden with CV_TAILOR_API_URL.
    """
    if config_path is None:
        path = Path(__file__).parent / "config.json"
        user_config = _read_json(path) if path.exists() else {}
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        user_config = _read_json(path)

    config = _merge(copy.deepcopy(DEFAULT_CONFIG), user_config)

    env_url = os.environ.get("CV_TAILOR_API_URL")
    if env_url:
        config["api"]["base_url"] = env_url

    return config


def _read_json(path: Path) -> dict:
    with open(path) as f:
        return json.load(f)


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (override wins)."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def get_api_base_url(config: dict) -> str:
    """Get the backend base URL without a trailing slash."""
    url = config.get("api", {}).get("base_url") or DEFAULT_API_URL
    return url.rstrip("/")


def get_api_timeout(config: dict) -> float | None:
    """Get the request timeout in seconds, or None for the transport default."""
    return config.get("api", {}).get("timeout")


def get_search_settings(config: dict) -> SearchSettings:
    """Build SearchSettings from the "search" section.

    Examples:
        {"search": {"debounce_ms": 250}} -> debounce=0.25
    """
    search = {**DEFAULT_CONFIG["search"], **config.get("search", {})}

    min_length = int(search["min_query_length"])
    if min_length < 1:
        raise ValueError(f"search.min_query_length must be >= 1, got {min_length}")

    return SearchSettings(
        min_query_length=min_length,
        debounce=max(float(search["debounce_ms"]), 0.0) / 1000,
        limit=int(search["limit"]),
        cancel_superseded=bool(search["cancel_superseded"]),
    )


def get_session_max_age(config: dict) -> int:
    """Get session lifetime in seconds (matches backend token expiry)."""
    return int(config.get("session", {}).get("max_age_seconds", 30 * 60))
