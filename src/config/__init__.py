"""Configuration for sonarEDM.

- **settings** -- environment-driven ``Settings`` (API keys, storage paths,
  cache TTLs, batch size).
- **loader** -- ``config.yaml`` loading with settings layered on top, plus
  the YAML list reader used for catalog seeds.
- **domain_knowledge** -- static EDM tables: genre audio profiles, venue
  tiers, seasons and the music/non-music keyword lists.
"""

from src.config.domain_knowledge import edm_weight, lookup_genre_profile, season_for, venue_quality
from src.config.loader import load_config, load_yaml_list
from src.config.settings import Settings

__all__ = [
    "Settings",
    "edm_weight",
    "load_config",
    "load_yaml_list",
    "lookup_genre_profile",
    "season_for",
    "venue_quality",
]
