"""In-memory taste-signal provider.

Holds negative signals and seasonal preferences per user in plain dicts.
Users without entries get ``None`` ("no data"), which the profile service
turns into empty negative signals and the default seasonal table.
"""

from __future__ import annotations

import structlog

from src.interfaces.taste_signal_provider import ITasteSignalProvider
from src.models.taste_profile import NegativeSignals

logger = structlog.get_logger(logger_name=__name__)


class StaticTasteSignalProvider(ITasteSignalProvider):
    """Taste signals held in process memory."""

    def __init__(
        self,
        negative: dict[str, NegativeSignals] | None = None,
        seasonal: dict[str, dict[str, list[str]]] | None = None,
    ) -> None:
        self._negative = dict(negative or {})
        self._seasonal = dict(seasonal or {})

    def set_negative_signals(self, user_id: str, signals: NegativeSignals) -> None:
        self._negative[user_id] = signals
        logger.debug("negative_signals_set", user_id=user_id)

    def set_seasonal_preferences(self, user_id: str, seasonal: dict[str, list[str]]) -> None:
        self._seasonal[user_id] = {season.lower(): list(genres) for season, genres in seasonal.items()}
        logger.debug("seasonal_preferences_set", user_id=user_id, seasons=sorted(seasonal))

    async def get_negative_signals(self, user_id: str) -> NegativeSignals | None:
        return self._negative.get(user_id)

    async def get_seasonal_preferences(self, user_id: str) -> dict[str, list[str]] | None:
        return self._seasonal.get(user_id)

    def get_provider_name(self) -> str:
        return "static_signals"
