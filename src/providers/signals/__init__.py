"""Auxiliary taste-signal providers (negative signals, seasonal history)."""

from src.providers.signals.static_signal_provider import StaticTasteSignalProvider

__all__ = ["StaticTasteSignalProvider"]
