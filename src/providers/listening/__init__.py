"""Listening-history providers.

SpotifyListeningHistoryProvider reads a user's top artists and tracks per
time range from the Spotify Web API, using an access token supplied by the
(out-of-scope) session layer.
"""

from src.providers.listening.spotify_history_provider import SpotifyListeningHistoryProvider

__all__ = ["SpotifyListeningHistoryProvider"]
