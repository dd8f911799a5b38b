"""Static domain knowledge tables for EDM event scoring.

# ─── PURPOSE (Junior Developer Guide) ──────────────────────────────────
#
# Curated, hand-coded knowledge the pipeline falls back on when live data
# is missing or to interpret free text:
#
#   - what a "deep house" track typically sounds like (energy, tempo...)
#     when the audio-analysis API is unavailable,
#   - which venues in the home market are premium rooms,
#   - which track best represents a well-known artist,
#   - which genres people lean toward per season,
#   - which words mark a listing as music vs. museum tour.
#
# All helpers are **pure** (no I/O).  Tables are built once at import time.
# Genre keys are lowercase; artist keys are matching keys (see
# src.utils.text_normalizer.normalize_for_matching).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime

from src.utils.text_normalizer import normalize_for_matching


# ═════════════════════════════════════════════════════════════════════════
# 1. GENRE AUDIO-FEATURE FALLBACK TABLE
# ═════════════════════════════════════════════════════════════════════════
# Typical descriptor values per genre.  Confidence depends on how
# EDM-specific the genre is: a "tech house" label says far more about the
# sound than "pop" does.

EDM_SUBGENRE_CONFIDENCE = 0.75
BROAD_ELECTRONIC_CONFIDENCE = 0.60
NON_ELECTRONIC_CONFIDENCE = 0.55
UNKNOWN_CONFIDENCE = 0.30

_DEFAULT_ACOUSTICNESS = 0.1
_DEFAULT_INSTRUMENTALNESS = 0.5
_DEFAULT_SPEECHINESS = 0.1

# genre -> (energy, danceability, valence, tempo)
_EDM_SUBGENRES: dict[str, tuple[float, float, float, float]] = {
    "house": (0.80, 0.90, 0.70, 125.0),
    "techno": (0.90, 0.80, 0.60, 130.0),
    "trance": (0.80, 0.70, 0.80, 135.0),
    "dubstep": (0.95, 0.80, 0.50, 140.0),
    "progressive house": (0.75, 0.85, 0.75, 125.0),
    "deep house": (0.70, 0.90, 0.80, 120.0),
    "tech house": (0.85, 0.90, 0.70, 125.0),
    "electro house": (0.90, 0.90, 0.80, 128.0),
    "big room": (0.95, 0.85, 0.80, 130.0),
    "future house": (0.80, 0.90, 0.80, 125.0),
    "drum and bass": (0.90, 0.80, 0.60, 175.0),
    "dnb": (0.90, 0.80, 0.60, 175.0),
    "hardstyle": (0.95, 0.80, 0.70, 150.0),
    "trap": (0.80, 0.85, 0.60, 140.0),
}

_BROAD_ELECTRONIC: dict[str, tuple[float, float, float, float]] = {
    "electronic": (0.70, 0.80, 0.70, 120.0),
    "dance": (0.80, 0.90, 0.80, 125.0),
    "edm": (0.85, 0.85, 0.75, 128.0),
    "electro": (0.80, 0.80, 0.70, 125.0),
    "electronica": (0.60, 0.70, 0.60, 115.0),
    "ambient": (0.30, 0.40, 0.60, 90.0),
}

_NON_ELECTRONIC: dict[str, tuple[float, float, float, float]] = {
    "hip hop": (0.70, 0.80, 0.60, 95.0),
    "jazz": (0.40, 0.50, 0.70, 110.0),
    "rock": (0.80, 0.50, 0.60, 120.0),
    "pop": (0.70, 0.70, 0.80, 115.0),
    "country": (0.50, 0.60, 0.70, 100.0),
    "folk": (0.40, 0.50, 0.70, 95.0),
    "classical": (0.30, 0.20, 0.60, 80.0),
}


def _build_genre_table() -> dict[str, dict[str, float]]:
    table: dict[str, dict[str, float]] = {}
    for entries, confidence in (
        (_EDM_SUBGENRES, EDM_SUBGENRE_CONFIDENCE),
        (_BROAD_ELECTRONIC, BROAD_ELECTRONIC_CONFIDENCE),
        (_NON_ELECTRONIC, NON_ELECTRONIC_CONFIDENCE),
    ):
        for genre, (energy, danceability, valence, tempo) in entries.items():
            table[genre] = {
                "energy": energy,
                "danceability": danceability,
                "valence": valence,
                "tempo": tempo,
                "acousticness": _DEFAULT_ACOUSTICNESS,
                "instrumentalness": _DEFAULT_INSTRUMENTALNESS,
                "speechiness": _DEFAULT_SPEECHINESS,
                "confidence": confidence,
            }
    return table


GENRE_AUDIO_PROFILES: dict[str, dict[str, float]] = _build_genre_table()

# Longest keys first so "deep house" is tried before "house".
_GENRE_KEYS_BY_LENGTH: list[str] = sorted(GENRE_AUDIO_PROFILES, key=len, reverse=True)

UNKNOWN_AUDIO_PROFILE: dict[str, float] = {
    "energy": 0.5,
    "danceability": 0.5,
    "valence": 0.5,
    "tempo": 120.0,
    "acousticness": 0.3,
    "instrumentalness": 0.3,
    "speechiness": 0.1,
    "confidence": UNKNOWN_CONFIDENCE,
}


def lookup_genre_profile(genre: str) -> tuple[str, dict[str, float]] | None:
    """Find the fallback audio profile for a genre string.

    Case-insensitive substring match of table keys inside *genre*,
    longest key first ("Melodic Deep House" resolves to "deep house").

    Returns:
        ``(matched_key, profile)`` or ``None`` when nothing matches.
    """
    lowered = genre.lower().strip()
    if not lowered:
        return None
    if lowered in GENRE_AUDIO_PROFILES:
        return lowered, GENRE_AUDIO_PROFILES[lowered]
    for key in _GENRE_KEYS_BY_LENGTH:
        if key in lowered:
            return key, GENRE_AUDIO_PROFILES[key]
    return None


# ═════════════════════════════════════════════════════════════════════════
# 2. VENUE QUALITY
# ═════════════════════════════════════════════════════════════════════════
# Premium rooms are matched as case-insensitive substrings of the venue
# name, in table order.  Heuristic keywords apply only when no premium
# entry matched.

PREMIUM_VENUES: tuple[tuple[str, int], ...] = (
    ("coda", 95),
    ("rebel", 90),
    ("the opera house", 85),
    ("danforth music hall", 80),
    ("phoenix concert theatre", 75),
    ("the mod club", 70),
)

VENUE_KEYWORD_SCORES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("club",), 65),
    (("hall", "theatre", "theater"), 70),
    (("arena", "stadium"), 75),
)

DEFAULT_VENUE_SCORE = 60
MISSING_VENUE_SCORE = 50


def venue_quality(venue_name: str | None) -> int:
    """Score a venue name 0-100 from the premium table and keyword heuristics."""
    if not venue_name or not venue_name.strip():
        return MISSING_VENUE_SCORE
    lowered = venue_name.lower()
    for premium, score in PREMIUM_VENUES:
        if premium in lowered:
            return score
    for keywords, score in VENUE_KEYWORD_SCORES:
        if any(keyword in lowered for keyword in keywords):
            return score
    return DEFAULT_VENUE_SCORE


# ═════════════════════════════════════════════════════════════════════════
# 3. REPRESENTATIVE TRACKS
# ═════════════════════════════════════════════════════════════════════════
# One flagship track per well-known artist.  When the audio-analysis
# catalog returns an artist's track list, this track's features stand for
# the artist; otherwise the first returned track is used.

REPRESENTATIVE_TRACKS: dict[str, str] = {
    "charlotte de witte": "Sgadi Li Mi",
    "amelie lens": "Feel It",
    "adam beyer": "Your Mind",
    "carl cox": "I Want You (Forever)",
    "nina kraviz": "Ghetto Kraviz",
    "boris brejcha": "Gravity",
    "deadmau5": "Strobe",
    "eric prydz": "Opus",
    "above beyond": "Sun & Moon",
    "armin van buuren": "This Is What It Feels Like",
    "tiesto": "Adagio for Strings",
    "martin garrix": "Animals",
    "skrillex": "Scary Monsters and Nice Sprites",
    "dj snake": "Turn Down for What",
    "fisher": "Losing It",
    "chris lake": "Turn Off the Lights",
    "john summit": "Where You Are",
    "peggy gou": "It Goes Like Nanana",
    "kaskade": "Atmosphere",
    "rufus du sol": "Innerbloom",
}


def representative_track(artist_name: str) -> str | None:
    """Return the flagship track title for *artist_name*, if curated."""
    return REPRESENTATIVE_TRACKS.get(normalize_for_matching(artist_name))


# ═════════════════════════════════════════════════════════════════════════
# 4. SEASONS
# ═════════════════════════════════════════════════════════════════════════

SEASON_BY_MONTH: dict[int, str] = {
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "fall", 10: "fall", 11: "fall",
    12: "winter", 1: "winter", 2: "winter",
}

DEFAULT_SEASONAL_GENRES: dict[str, list[str]] = {
    "spring": ["house", "progressive house", "melodic house"],
    "summer": ["edm", "festival", "dance"],
    "fall": ["techno", "deep house"],
    "winter": ["trance", "ambient", "downtempo"],
}


def season_for(moment: datetime) -> str:
    """Meteorological season of *moment* (northern hemisphere month buckets)."""
    return SEASON_BY_MONTH[moment.month]


# ═════════════════════════════════════════════════════════════════════════
# 5. DEFAULT PROFILE & GENRE HOUSEKEEPING
# ═════════════════════════════════════════════════════════════════════════

# Served to users with no listening history at all.
DEFAULT_PROFILE_GENRES: dict[str, float] = {
    "electronic": 100.0,
    "house": 80.0,
    "techno": 80.0,
}

# Placeholder tags some ticketing sources emit instead of a real genre.
SENTINEL_GENRES: frozenset[str] = frozenset({"", "unknown", "other", "undefined", "n/a", "none"})

# Presence of any of these in an event's genres marks a broad-appeal event.
BROAD_APPEAL_GENRES: tuple[str, ...] = ("house", "pop", "electronic", "dance")


def edm_weight(genres: list[str]) -> int:
    """Popularity-style estimate used for ranking enhanced events (75 or 50)."""
    joined = " ".join(genre.lower() for genre in genres)
    return 75 if any(marker in joined for marker in BROAD_APPEAL_GENRES) else 50


# ═════════════════════════════════════════════════════════════════════════
# 6. KEYWORD LISTS
# ═════════════════════════════════════════════════════════════════════════
# Matched as lowercase substrings of the concatenated event text.

MUSIC_KEYWORDS: tuple[str, ...] = (
    "dj", "music", "concert", "festival", "electronic", "house", "techno",
    "edm", "dance", "bass", "club", "party", "live music", "band", "artist",
    "performance", "tour", "show", "live",
)

NON_MUSIC_KEYWORDS: tuple[str, ...] = (
    "admission", "general admission", "museum", "exhibition", "castle",
    "historic", "visit", "sightseeing", "gallery",
)

# Phrase that marks a listing as non-music when no music keyword is present.
GENERAL_ADMISSION_PHRASE = "general admission"

EDM_RELEVANCE_KEYWORDS: tuple[str, ...] = (
    "house", "techno", "electronic", "edm", "dance", "trance", "dubstep",
    "drum", "bass",
)
