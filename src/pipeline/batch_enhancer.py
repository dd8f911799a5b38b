"""Batch enhancement of stored events.

Walks every event that has not been enhanced at the current enhancement
version and fills in its user-independent derived fields:
``is_music_event``, ``artist_metadata``, ``enhanced_genres``,
``sound_characteristics`` and ``edm_weight``.  Personalized scores are
*not* produced here; they depend on a user and are computed at request
time by the scoring engine.

ARCHITECTURE NOTE (for junior developers):
    Per event the steps are strictly sequential because each one feeds
    the next:

        classify ──non-music──→ save (is_music_event=False)      "skipped"
           │
           └─music──→ resolve artists → audio features → save    "enhanced"

    Non-music events never reach the resolver or the audio service; they
    are saved as completed so a rerun does not look at them again.

    Fault isolation: an exception anywhere in one event's steps is caught
    at the event boundary, logged with the event id and counted under
    ``errors``.  The rest of the batch carries on.

    Every save is one ``save_enhancement`` call carrying all derived
    fields together, so a reader never sees a half-enhanced event.

    Idempotence: the pending id list is taken once at the start of the
    run and only contains events not completed at this version.  Running
    twice in a row enhances nothing the second time.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

import structlog

from src.config.domain_knowledge import edm_weight
from src.interfaces.event_store_provider import IEventStoreProvider
from src.models.enhancement import EnhancementSummary, EventEnhancement
from src.models.event import Event
from src.pipeline.progress_tracker import ProgressTracker
from src.services.artist_resolver import ArtistResolver
from src.services.audio_feature_service import AudioFeatureService
from src.services.music_event_classifier import MusicEventClassifier
from src.utils.concurrency import throttled_gather
from src.utils.errors import PipelineError
from src.utils.logging import get_logger

_ENHANCED = "enhanced"
_SKIPPED = "skipped"
_ERROR = "error"


class BatchEnhancer:
    """Enhances pending events batch by batch.

    Parameters
    ----------
    store:
        Event persistence.
    classifier:
        Music/non-music gate.
    resolver:
        Artist resolver used for music events.
    audio_service:
        Audio-feature service used for music events.
    progress_tracker:
        Optional tracker notified after each batch.
    version:
        Enhancement version written to every record.
    concurrency:
        Events processed at once within a batch.  1 (the default) is
        strictly sequential.
    clock:
        Wall-clock source for ``last_updated``.
    """

    def __init__(
        self,
        store: IEventStoreProvider,
        classifier: MusicEventClassifier,
        resolver: ArtistResolver,
        audio_service: AudioFeatureService,
        progress_tracker: ProgressTracker | None = None,
        version: str = "1.0.0",
        concurrency: int = 1,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._resolver = resolver
        self._audio = audio_service
        self._progress = progress_tracker
        self._version = version
        self._concurrency = max(1, concurrency)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def version(self) -> str:
        return self._version

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def enhance_all(
        self,
        batch_size: int = 25,
        limit: int | None = None,
        run_id: str | None = None,
    ) -> EnhancementSummary:
        """Enhance every pending event.

        Parameters
        ----------
        batch_size:
            Events loaded and processed per batch.
        limit:
            Maximum number of pending events to take on in this run.
        run_id:
            Identifier used for progress listeners; generated when omitted.

        Returns
        -------
        EnhancementSummary
            processed / enhanced / skipped / errors, plus timing.

        Raises
        ------
        PipelineError
            If *batch_size* or *limit* is invalid, or the pending id list
            cannot be read.
        """
        if batch_size < 1:
            raise PipelineError(f"batch_size must be at least 1, got {batch_size}")
        if limit is not None and limit < 0:
            raise PipelineError(f"limit must not be negative, got {limit}")

        run_id = run_id or uuid.uuid4().hex
        started = time.monotonic()
        try:
            pending = await self._store.list_pending_ids(self._version, limit)
        except Exception as exc:
            raise PipelineError(
                f"Could not list pending events: {exc}",
                provider_name=self._store.get_provider_name(),
            ) from exc

        self._logger.info(
            "batch_run_start",
            run_id=run_id,
            pending=len(pending),
            batch_size=batch_size,
            version=self._version,
            concurrency=self._concurrency,
        )

        counts = {"processed": 0, "enhanced": 0, "skipped": 0, "errors": 0}
        failed: list[str] = []
        batches = 0

        for start in range(0, len(pending), batch_size):
            batch_ids = pending[start:start + batch_size]
            batches += 1
            outcomes = await self._run_batch(batch_ids)

            for event_id, outcome in outcomes:
                counts["processed"] += 1
                if outcome == _ENHANCED:
                    counts["enhanced"] += 1
                elif outcome == _SKIPPED:
                    counts["skipped"] += 1
                else:
                    counts["errors"] += 1
                    failed.append(event_id)

            self._logger.info("batch_complete", run_id=run_id, batch=batches, **counts)
            if self._progress is not None:
                await self._progress.update(
                    run_id,
                    counts["processed"] / len(pending) * 100.0,
                    f"Batch {batches}: {counts['processed']}/{len(pending)} events",
                    counts,
                )

        summary = EnhancementSummary(
            processed=counts["processed"],
            enhanced=counts["enhanced"],
            skipped=counts["skipped"],
            errors=counts["errors"],
            batches=batches,
            version=self._version,
            duration_seconds=round(time.monotonic() - started, 3),
            failed_event_ids=failed,
        )
        self._logger.info(
            "batch_run_complete",
            run_id=run_id,
            processed=summary.processed,
            enhanced=summary.enhanced,
            skipped=summary.skipped,
            errors=summary.errors,
            success_rate=summary.success_rate,
            duration_seconds=summary.duration_seconds,
        )
        return summary

    async def enhance_event(self, event: Event) -> EventEnhancement:
        """Compute every derived field of *event* without saving it."""
        classification = self._classifier.classify(event)
        now = self._clock()

        if not classification.is_music_event:
            return EventEnhancement(
                event_id=event.id,
                is_music_event=False,
                enhanced_genres=event.usable_genres,
                version=self._version,
                last_updated=now,
            )

        if event.artists:
            identities = await self._resolver.resolve_many(event.artist_names)
        else:
            identities = await self._resolver.resolve(event.name)

        genres = list(event.usable_genres)
        for identity in identities:
            for genre in identity.genres:
                if genre not in genres:
                    genres.append(genre)

        enhanced = event.model_copy(update={"enhanced_genres": genres})
        sound = await self._audio.get_event_features(enhanced, identities)

        return EventEnhancement(
            event_id=event.id,
            is_music_event=True,
            artist_metadata=identities,
            enhanced_genres=genres,
            sound_characteristics=sound,
            edm_weight=edm_weight(genres),
            version=self._version,
            last_updated=now,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _run_batch(self, batch_ids: list[str]) -> list[tuple[str, str]]:
        loaded = await self._load_batch(batch_ids)

        if self._concurrency == 1:
            outcomes = []
            for event_id, event in loaded:
                outcomes.append((event_id, await self._process(event_id, event)))
            return outcomes

        results = await throttled_gather(
            [self._process(event_id, event) for event_id, event in loaded],
            limit=self._concurrency,
        )
        return [
            (event_id, result if isinstance(result, str) else _ERROR)
            for (event_id, _), result in zip(loaded, results)
        ]

    async def _load_batch(self, batch_ids: list[str]) -> list[tuple[str, Event | Exception]]:
        """Load a batch; if bulk loading fails, load record by record.

        A record that cannot be loaded (e.g. a malformed stored payload)
        comes back as its exception so it is counted as an error without
        taking its neighbours down with it.
        """
        try:
            events = await self._store.get_events(batch_ids)
        except Exception as exc:
            self._logger.warning("batch_load_failed", error=str(exc), batch_size=len(batch_ids))
        else:
            by_id = {event.id: event for event in events}
            return [
                (event_id, by_id.get(event_id) or LookupError(f"Event {event_id} disappeared"))
                for event_id in batch_ids
            ]

        loaded: list[tuple[str, Event | Exception]] = []
        for event_id in batch_ids:
            try:
                event = await self._store.get_event(event_id)
            except Exception as exc:
                loaded.append((event_id, exc))
                continue
            loaded.append((event_id, event if event is not None else LookupError(f"Event {event_id} disappeared")))
        return loaded

    async def _process(self, event_id: str, event: Event | Exception) -> str:
        """Enhance and save one event; returns its outcome, never raises."""
        try:
            if isinstance(event, Exception):
                raise event
            enhancement = await self.enhance_event(event)
            await self._store.save_enhancement(enhancement)
        except Exception as exc:
            self._logger.error(
                "event_enhancement_failed",
                event_id=event_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return _ERROR

        return _ENHANCED if enhancement.is_music_event else _SKIPPED
