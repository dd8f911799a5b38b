"""Text normalization utilities for artist names and event titles.

Three concerns live here:

1. **Matching keys** -- ``normalize_for_matching`` lowercases, strips
   punctuation and collapses whitespace so "Charlotte de Witte!" and
   "charlotte  de witte" compare equal.

2. **Title cleaning and splitting** -- ticketing sources list events as
   "DJ Snake & Skrillex Festival Tour 2025".  ``strip_title_suffix``
   removes the tour/venue/year tail; ``split_on_first_separator`` splits
   on the first separator kind found (only that kind is applied, so
   "A with B & C" yields ["A", "B & C"]).

3. **Similarity** -- ``name_similarity`` scores two matching keys: a
   substring containment scores shorter/longer length ratio, otherwise
   the normalized Levenshtein similarity (via rapidfuzz) is used.
"""

import re

from rapidfuzz.distance import Levenshtein

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

# " - Summer Tour", " - Live at Coda", " - @ Rebel"
_DASH_SUFFIX = re.compile(
    r"\s+[-–]\s+(?:.*\b(?:tour|live|concert|show|presents|at)\b|.*@).*$",
    re.IGNORECASE,
)
# " Festival Tour 2025", " Live", " presents ...", trailing year
_WORD_SUFFIX = re.compile(
    r"\s+(?:tour|live|concert|show|presents|festival|\d{4})\b.*$",
    re.IGNORECASE,
)

# Checked in this order; the first one present is the only one applied.
TITLE_SEPARATORS: tuple[str, ...] = (
    " with ",
    " & ",
    " and ",
    " + ",
    " feat. ",
    " ft. ",
    " vs. ",
    " x ",
)


def normalize_for_matching(name: str) -> str:
    """Return the comparison key for an artist name.

    Args:
        name: Raw artist name or title fragment.

    Returns:
        Lowercase string with punctuation removed and whitespace collapsed.
    """
    lowered = _PUNCTUATION.sub("", name.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def strip_title_suffix(title: str) -> str:
    """Remove tour, venue and year suffixes from an event title."""
    cleaned = _WHITESPACE.sub(" ", title).strip()
    cleaned = _DASH_SUFFIX.sub("", cleaned)
    cleaned = _WORD_SUFFIX.sub("", cleaned)
    return cleaned.strip()


def split_on_first_separator(text: str) -> list[str]:
    """Split *text* on the first separator from :data:`TITLE_SEPARATORS` it contains.

    Args:
        text: A cleaned event title or artist string.

    Returns:
        Non-empty stripped parts, or ``[text]`` when no separator occurs.
    """
    lowered = text.lower()
    for separator in TITLE_SEPARATORS:
        if separator in lowered:
            parts = re.split(re.escape(separator), text, flags=re.IGNORECASE)
            return [part.strip() for part in parts if part.strip()]
    stripped = text.strip()
    return [stripped] if stripped else []


def name_similarity(a: str, b: str) -> float:
    """Similarity between two matching keys in [0.0, 1.0].

    Containment scores ``len(shorter) / len(longer)``; otherwise
    ``1 - levenshtein(a, b) / max(len(a), len(b))``.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if shorter in longer:
        return len(shorter) / len(longer)

    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len(a), len(b))


def best_matches(
    query: str,
    candidates: dict[str, str],
    floor: float = 0.6,
    limit: int = 3,
) -> list[tuple[str, float]]:
    """Rank candidate names by :func:`name_similarity` to *query*.

    Args:
        query: Matching key of the name being resolved.
        candidates: Matching key -> canonical name.  Several keys may map
            to one canonical name (primary and original spellings).
        floor: Matches at or below this similarity are discarded.
        limit: Maximum number of canonical names returned.

    Returns:
        ``(canonical_name, score)`` pairs, best first, one per canonical
        name.
    """
    best_by_name: dict[str, float] = {}
    for key, canonical in candidates.items():
        score = name_similarity(query, key)
        if score > floor and score > best_by_name.get(canonical, 0.0):
            best_by_name[canonical] = score

    ranked = sorted(best_by_name.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]
