"""Artist catalog providers.

InMemoryArtistCatalog holds a list seeded from YAML or code (tests, small
deployments). SQLiteArtistCatalog reads the ``artists`` table populated by
the ingestion process.
"""

from src.providers.catalog.memory_catalog import InMemoryArtistCatalog
from src.providers.catalog.sqlite_catalog import SQLiteArtistCatalog

__all__ = ["InMemoryArtistCatalog", "SQLiteArtistCatalog"]
