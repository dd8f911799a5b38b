"""Batch-run progress tracking with callback-based listener notification.

Tracks how far each enhancement run has got and broadcasts updates to
registered listener callbacks.  Listeners are keyed by run ID so several
runs (e.g. a CLI run and an API-triggered run) never see each other's
updates.

# ─── HOW PROGRESS TRACKING WORKS (Junior Developer Guide) ─────────────
#
# This implements the Observer pattern:
#
#   BatchEnhancer ──update()──→ ProgressTracker ──callback()──→ CLI printer
#                                                          ──→ (any other listener)
#
# Data flow:
#   1. The batch enhancer calls tracker.update(run_id, progress, msg, counts)
#      after every batch
#   2. ProgressTracker stores the snapshot and calls all registered listeners
#   3. Listeners render it however they like (log line, progress bar, ...)
#
# Key points:
#   - Listeners are keyed by run_id → no cross-talk between runs
#   - Listener errors are caught and logged → one broken listener cannot
#     stop the batch or the other listeners
#   - Both sync and async callbacks are supported (asyncio.iscoroutine check)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from src.utils.logging import get_logger


@dataclass
class _RunStatus:
    """Internal snapshot of a single run's progress."""

    progress: float = 0.0
    message: str = ""
    counts: dict[str, int] = field(default_factory=dict)


class ProgressTracker:
    """Tracks and broadcasts enhancement-run progress via callbacks.

    Each run is identified by a string ``run_id``.  Callbacks receive
    ``(run_id, progress, message, counts)`` where ``counts`` holds the
    running processed/enhanced/skipped/errors totals.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, _RunStatus] = {}
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update(
        self,
        run_id: str,
        progress: float,
        message: str,
        counts: dict[str, int] | None = None,
    ) -> None:
        """Record a progress update and notify all registered listeners.

        Parameters
        ----------
        run_id:
            The enhancement run to update.
        progress:
            Completion percentage (0.0 – 100.0).
        message:
            Human-readable status message.
        counts:
            Running totals so far.
        """
        progress = max(0.0, min(100.0, progress))
        snapshot = dict(counts or {})

        self._statuses[run_id] = _RunStatus(progress=progress, message=message, counts=snapshot)

        self._logger.debug(
            "progress_update",
            run_id=run_id,
            progress=round(progress, 1),
            message=message,
        )

        await self._notify_listeners(run_id, progress, message, snapshot)

    def register_listener(self, run_id: str, callback: Callable) -> None:
        """Register a callback to receive progress updates for a run.

        Parameters
        ----------
        run_id:
            The run to listen to.
        callback:
            An async or sync callable accepting
            ``(run_id, progress, message, counts)``.
        """
        listeners = self._listeners.setdefault(run_id, [])
        if callback not in listeners:
            listeners.append(callback)
            self._logger.debug("listener_registered", run_id=run_id, total_listeners=len(listeners))

    def unregister_listener(self, run_id: str, callback: Callable) -> None:
        listeners = self._listeners.get(run_id, [])
        if callback in listeners:
            listeners.remove(callback)
            self._logger.debug("listener_unregistered", run_id=run_id, remaining_listeners=len(listeners))

    def get_status(self, run_id: str) -> dict:
        """Return the latest progress snapshot for a run.

        Returns
        -------
        dict
            Keys: ``progress`` (:class:`float`), ``message`` (:class:`str`),
            ``counts`` (:class:`dict`).  Zeroed defaults for unknown runs.
        """
        status = self._statuses.get(run_id) or _RunStatus()
        return {
            "progress": status.progress,
            "message": status.message,
            "counts": dict(status.counts),
        }

    def clear(self, run_id: str) -> None:
        """Forget a finished run's snapshot and listeners."""
        self._statuses.pop(run_id, None)
        self._listeners.pop(run_id, None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(
        self,
        run_id: str,
        progress: float,
        message: str,
        counts: dict[str, int],
    ) -> None:
        """Invoke all registered listeners for a run.

        Listeners that raise are logged and skipped.
        """
        for callback in list(self._listeners.get(run_id, [])):
            try:
                result = callback(run_id, progress, message, dict(counts))
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    run_id=run_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
