"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY (Junior Developer Guide) ──────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  — versioned defaults: scoring weights, cache
#                            TTLs, batch size, upstream endpoints
#   2. .env file           — local developer overrides (not committed)
#   3. Environment vars    — set by the deployment
#
# Scoring weights live only in YAML: they are tuned by editing the file
# (or passing a different file via CONFIG_PATH), not via env vars.
# Everything the Settings class knows about is layered on top.
#
#   base      = {"cache": {"audio_ttl_seconds": 86400, "max_entries": 5000}}
#   overrides = {"cache": {"max_entries": 100}}
#   result    = {"cache": {"audio_ttl_seconds": 86400, "max_entries": 100}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge environment-based Settings on top.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            an empty base layer.
        settings: Pre-built settings; a fresh ``Settings()`` is read when
            omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "audio": {
            "base_url": settings.reccobeats_base_url,
            "request_spacing_ms": settings.audio_request_spacing_ms,
            "timeout_seconds": settings.audio_timeout_seconds,
            "configured": bool(settings.reccobeats_api_key),
        },
        "cache": {
            "audio_ttl_seconds": settings.audio_cache_ttl_seconds,
            "profile_ttl_seconds": settings.profile_cache_ttl_seconds,
            "score_ttl_seconds": settings.score_cache_ttl_seconds,
            "max_entries": settings.cache_max_entries,
        },
        "batch": {
            "size": settings.batch_size,
            "concurrency": settings.batch_concurrency,
            "enhancement_version": settings.enhancement_version,
        },
        "logging": {
            "level": settings.log_level,
            "json": settings.json_logs,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def load_yaml_list(path: str, key: str) -> list[dict]:
    """Read a top-level list of mappings (e.g. ``artists:``) from a YAML file.

    Used for catalog seed files.  Returns an empty list when the file or
    key is absent.
    """
    file_path = Path(path)
    if not file_path.exists():
        return []
    with open(file_path) as f:
        data = yaml.safe_load(f) or {}
    items = data.get(key, []) if isinstance(data, dict) else []
    return [item for item in items if isinstance(item, dict)]


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
