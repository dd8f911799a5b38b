"""Live audio-analysis providers.

ReccoBeatsAudioProvider wraps the ReccoBeats REST API (artist search,
artist tracks, track audio features). All three calls share one
RateLimiter so concurrent lookups cannot burst past the request spacing.
"""

from src.providers.audio.reccobeats_provider import ReccoBeatsAudioProvider

__all__ = ["ReccoBeatsAudioProvider"]
