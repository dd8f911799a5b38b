"""Music/non-music gate for ticketing listings.

Ticketing sources mix concerts with museum entries, castle tours and
"general admission" day passes.  Those listings must never be scored as
music, so every event passes through this keyword classifier first.

Rules, applied to the lowercase name + description + venue name:

    1. Count MUSIC_KEYWORDS and NON_MUSIC_KEYWORDS present (substring match).
    2. "general admission" with zero music keywords -> non-music.
    3. Otherwise music iff music count > non-music count (ties are non-music).
"""

from __future__ import annotations

import structlog

from src.config.domain_knowledge import GENERAL_ADMISSION_PHRASE, MUSIC_KEYWORDS, NON_MUSIC_KEYWORDS
from src.models.enhancement import Classification
from src.models.event import Event
from src.utils.logging import get_logger


class MusicEventClassifier:
    """Keyword classifier deciding whether an event is a music event."""

    def __init__(
        self,
        music_keywords: tuple[str, ...] = MUSIC_KEYWORDS,
        non_music_keywords: tuple[str, ...] = NON_MUSIC_KEYWORDS,
    ) -> None:
        self._music_keywords = music_keywords
        self._non_music_keywords = non_music_keywords
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def classify(self, event: Event) -> Classification:
        """Classify *event* and return the keywords behind the decision."""
        text = event.text_blob()
        music = [keyword for keyword in self._music_keywords if keyword in text]
        non_music = [keyword for keyword in self._non_music_keywords if keyword in text]

        if not music and GENERAL_ADMISSION_PHRASE in text:
            result = Classification(
                is_music_event=False,
                music_keywords=music,
                non_music_keywords=non_music,
                general_admission_override=True,
            )
        else:
            result = Classification(
                is_music_event=len(music) > len(non_music),
                music_keywords=music,
                non_music_keywords=non_music,
            )

        self._logger.debug(
            "event_classified",
            event_id=event.id,
            is_music=result.is_music_event,
            music_hits=len(music),
            non_music_hits=len(non_music),
        )
        return result

    def is_music_event(self, event: Event) -> bool:
        return self.classify(event).is_music_event
