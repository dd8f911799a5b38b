"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK (Junior Developer Guide) ───────────────────────
#
# Values are read from, in priority order:
#
#   1. **Environment variables** — e.g. RECCOBEATS_API_KEY=abc123
#   2. **.env file** — key=value lines in the project root
#
# Field `reccobeats_api_key` maps to env var `RECCOBEATS_API_KEY`.
#
# An empty API key means "not configured".  The audio-feature service
# sees that once at startup and runs on the genre fallback table for the
# lifetime of the process; it does not retry a missing credential.
#
# Timeouts are in seconds, spacing in milliseconds, TTLs in seconds.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """sonarEDM application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Audio analysis (ReccoBeats) ===
    reccobeats_api_key: str = ""
    reccobeats_base_url: str = "https://api.reccobeats.com/v1"
    audio_request_spacing_ms: int = 200
    audio_timeout_seconds: float = 10.0

    # === Listening history (Spotify Web API) ===
    spotify_api_base_url: str = "https://api.spotify.com/v1"
    listening_timeout_seconds: float = 5.0

    # === Event listings (Ticketmaster Discovery) ===
    ticketmaster_api_key: str = ""
    ticketmaster_base_url: str = "https://app.ticketmaster.com/discovery/v2"
    event_source_timeout_seconds: float = 30.0

    # === Storage ===
    database_path: str = "data/sonar_edm.db"
    artist_catalog_path: str = ""  # YAML seed file; empty = read the catalog table in database_path

    # === Caching ===
    audio_cache_ttl_seconds: int = 24 * 60 * 60
    profile_cache_ttl_seconds: int = 30 * 60
    score_cache_ttl_seconds: int = 24 * 60 * 60
    cache_max_entries: int = 5000

    # === Batch enhancement ===
    batch_size: int = 25
    batch_concurrency: int = 1
    enhancement_version: str = "1.0.0"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    json_logs: bool = False
    config_path: str = "config/config.yaml"
    cors_origins: str = ""  # comma-separated; empty = allow every origin

    def get_configured_upstreams(self) -> list[str]:
        """Return the upstream services that have credentials configured."""
        upstreams: list[str] = []
        if self.reccobeats_api_key:
            upstreams.append("reccobeats")
        if self.ticketmaster_api_key:
            upstreams.append("ticketmaster")
        return upstreams

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
