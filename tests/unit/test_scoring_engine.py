"""Unit tests for the scoring engine factors and ScoringEngine."""

from __future__ import annotations

import pytest

from src.models.artist import ArtistIdentity, ResolutionSource
from src.models.event import Event
from src.models.scoring import ScoringWeights
from src.models.taste_profile import (
    ListeningWindow,
    NegativeSignals,
    PlaylistEntry,
    TasteProfile,
    TasteTrends,
    TemporalWindowProfile,
    TrackEntry,
    WeightedArtist,
)
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services.artist_resolver import ArtistResolver
from src.services.audio_feature_service import genre_vector
from src.services.music_event_classifier import MusicEventClassifier
from src.services.scoring_engine import (
    ScoringEngine,
    artist_match,
    edm_relevance,
    genre_affinity,
    genre_match,
    genre_overlap,
    negative_penalty,
    round_half_up,
    sound_compatibility,
    taste_evolution,
    time_weighted_preferences,
)
from src.utils.confidence import ConfidenceLevel
from tests.conftest import make_event, make_profile


@pytest.fixture
def engine(classifier: MusicEventClassifier, resolver: ArtistResolver, memory_cache: MemoryCacheProvider, fixed_clock):
    return ScoringEngine(classifier, cache=memory_cache, resolver=resolver, clock=fixed_clock)


# ======================================================================
# Factor functions
# ======================================================================


class TestGenreMatch:
    def test_exact_match_full_weight(self) -> None:
        score, matched = genre_match(["techno"], {"techno": 80.0, "house": 60.0})
        assert score == 55.0
        assert matched == ["techno"]

    def test_bonus_scaled_by_relative_weight(self) -> None:
        score, _ = genre_match(["house"], {"techno": 80.0, "house": 60.0})
        assert score == pytest.approx(30 + 25 * 0.75)

    def test_partial_match(self) -> None:
        score, matched = genre_match(["tech house"], {"house": 100.0})
        assert score == 45.0
        assert matched == ["tech house"]

    def test_no_overlap_is_base(self) -> None:
        assert genre_match(["techno"], {"country": 80.0})[0] == 30.0

    def test_empty_side_is_neutral(self) -> None:
        assert genre_match([], {"techno": 80.0})[0] == 50.0
        assert genre_match(["techno"], {})[0] == 50.0

    def test_capped_at_100(self) -> None:
        genres = ["techno", "house", "trance", "dubstep"]
        score, _ = genre_match(genres, {genre: 100.0 for genre in genres})
        assert score == 100.0

    def test_adding_overlapping_genre_never_decreases(self) -> None:
        user = {"techno": 80.0, "house": 60.0, "trance": 20.0}
        base, _ = genre_match(["techno"], user)
        more, _ = genre_match(["techno", "house"], user)
        most, _ = genre_match(["techno", "house", "trance"], user)
        assert base <= more <= most


class TestGenreAffinity:
    def test_top_genre_is_one(self) -> None:
        assert genre_affinity(["techno"], {"techno": 80.0, "house": 60.0}) == 1.0

    def test_partial_discounted(self) -> None:
        assert genre_affinity(["deep house"], {"house": 100.0}) == pytest.approx(0.6)

    def test_none_when_either_side_empty(self) -> None:
        assert genre_affinity([], {"techno": 1.0}) is None
        assert genre_affinity(["techno"], {}) is None


class TestOverlapAndPenalties:
    def test_genre_overlap_fraction(self) -> None:
        assert genre_overlap(["techno", "house", "pop"], ["tech house", "Techno"]) == pytest.approx(2 / 3)
        assert genre_overlap([], ["techno"]) == 0.0

    def test_no_negative_signals_no_penalty(self, techno_event: Event, techno_profile: TasteProfile) -> None:
        assert negative_penalty(techno_event, ["techno"], techno_profile) == 0.0

    def test_removed_track_genres(self, techno_event: Event) -> None:
        profile = make_profile(
            negative=NegativeSignals(removed_tracks=[TrackEntry(name="Track", genres=["techno"])]),
        )
        assert negative_penalty(techno_event, ["techno", "acid"], profile) == pytest.approx(25.0)

    def test_skipped_artist_and_cap(self, techno_event: Event) -> None:
        profile = make_profile(
            negative=NegativeSignals(
                removed_tracks=[TrackEntry(name="Track", genres=["techno"])],
                skipped_artists=["Charlotte de Witte"],
                abandoned_playlists=[PlaylistEntry(name="Old", genres=["techno"])],
            ),
        )
        assert negative_penalty(techno_event, ["techno"], profile) == 75.0

    def test_taste_evolution(self) -> None:
        profile = make_profile(
            trends=TasteTrends(trending_up=["techno"], trending_down=["techno"], new_discoveries=["techno"]),
        )
        assert taste_evolution(["techno"], profile) == pytest.approx(25.0)

    def test_taste_evolution_trending_down(self) -> None:
        profile = make_profile(trends=TasteTrends(trending_down=["techno"]))
        assert taste_evolution(["techno"], profile) == pytest.approx(-10.0)


class TestOtherFactors:
    def test_artist_match_base_without_top_artists(self, techno_event: Event, techno_profile: TasteProfile) -> None:
        assert artist_match(techno_event, techno_profile) == (30.0, [])

    def test_artist_match_by_popularity(self, techno_event: Event) -> None:
        profile = make_profile(top_artists=[WeightedArtist(name="Charlotte de Witte", weight=100.0, popularity=80)])
        score, matched = artist_match(techno_event, profile)
        assert score == pytest.approx(62.0)
        assert matched == ["Charlotte de Witte"]

    def test_edm_relevance_counts_keywords(self, techno_event: Event) -> None:
        assert edm_relevance(techno_event, ["techno"]) == 52.0
        assert edm_relevance(make_event(name="Quiet Night", artists=[], genres=[]), []) == 40.0

    def test_time_weighted_uses_window_genres(self) -> None:
        profile = make_profile(
            genres={"country": 100.0},
            temporal={ListeningWindow.RECENT: TemporalWindowProfile(genres=["techno"])},
        )
        # recent: 55, medium/long_term fall back to overall genres: 30
        assert time_weighted_preferences(["techno"], profile) == pytest.approx(0.6 * 55 + 0.4 * 30)

    def test_sound_compatibility(self) -> None:
        techno = genre_vector(["techno"])
        assert sound_compatibility(techno, techno) == pytest.approx(100.0)
        assert sound_compatibility(None, techno) is None

        far = genre_vector(["classical"])
        assert sound_compatibility(techno, far) < 60.0

    @pytest.mark.parametrize(("value", "expected"), [(2.5, 3), (64.49, 64), (64.5, 65), (0.0, 0)])
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


# ======================================================================
# ScoringEngine
# ======================================================================


class TestScoringEngine:
    @pytest.mark.asyncio
    async def test_genre_weight_sensitivity(
        self,
        engine: ScoringEngine,
        techno_event: Event,
        techno_profile: TasteProfile,
        country_profile: TasteProfile,
    ) -> None:
        techno = await engine.score(techno_event, techno_profile)
        country = await engine.score(techno_event, country_profile)

        assert techno.score >= 60
        assert country.score <= 30
        assert techno.breakdown.multiplier == pytest.approx(1.4)
        assert country.breakdown.multiplier == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_breakdown_values(self, engine: ScoringEngine, techno_event: Event, techno_profile: TasteProfile) -> None:
        result = await engine.score(techno_event, techno_profile)

        breakdown = result.breakdown
        assert breakdown.genre_matching == 55.0
        assert breakdown.artist_matching == 30.0
        assert breakdown.venue_quality == 50.0
        assert breakdown.edm_relevance == 52.0
        assert breakdown.time_weighted_preferences == 55.0
        assert breakdown.seasonal_context == 50.0
        assert breakdown.season == "fall"
        assert breakdown.raw_total == pytest.approx(45.95)
        assert result.score == 64
        assert result.confidence == ConfidenceLevel.HIGH
        assert breakdown.weights == engine.weights

    @pytest.mark.asyncio
    async def test_seasonal_genres_used(self, engine: ScoringEngine, techno_event: Event) -> None:
        profile = make_profile(seasonal={"fall": ["techno", "deep house"]})

        result = await engine.score(techno_event, profile)

        assert result.breakdown.seasonal_context == 55.0

    @pytest.mark.asyncio
    async def test_repeat_score_identical_and_cached(
        self, engine: ScoringEngine, techno_event: Event, techno_profile: TasteProfile
    ) -> None:
        first = await engine.score(techno_event, techno_profile)
        second = await engine.score(techno_event, techno_profile)

        assert first.score == second.score
        assert first.cached is False
        assert second.cached is True

    @pytest.mark.asyncio
    async def test_new_profile_version_not_served_from_cache(
        self, engine: ScoringEngine, techno_event: Event, techno_profile: TasteProfile
    ) -> None:
        await engine.score(techno_event, techno_profile)
        newer = techno_profile.model_copy(update={"last_updated": techno_profile.last_updated.replace(hour=19)})

        result = await engine.score(techno_event, newer)

        assert result.cached is False
        assert result.profile_version == newer.version

    @pytest.mark.asyncio
    async def test_non_music_event_gated(
        self, engine: ScoringEngine, non_music_event: Event, techno_profile: TasteProfile, memory_cache
    ) -> None:
        result = await engine.score(non_music_event, techno_profile)

        assert 5 <= result.score <= 15
        assert result.confidence == ConfidenceLevel.VERY_LOW
        assert result.breakdown.gated is True
        assert memory_cache.size() == 0
        assert (await engine.score(non_music_event, techno_profile)).score == result.score

    @pytest.mark.asyncio
    async def test_gate_ignores_artist_and_genre_inputs(self, engine: ScoringEngine, techno_profile: TasteProfile) -> None:
        event = make_event(
            source_id="gated",
            name="Castle Tour",
            artists=["Charlotte de Witte"],
            genres=["techno"],
            is_music_event=False,
        )

        result = await engine.score(event, techno_profile)

        assert 5 <= result.score <= 15
        assert result.breakdown.genre_matching == 0.0

    @pytest.mark.asyncio
    async def test_stored_music_flag_skips_classifier(self, engine: ScoringEngine, techno_profile: TasteProfile) -> None:
        event = make_event(name="Casa Loma General Admission", is_music_event=True)

        result = await engine.score(event, techno_profile)

        assert result.breakdown.gated is False

    @pytest.mark.asyncio
    async def test_scores_bounded(self, engine: ScoringEngine) -> None:
        profile = make_profile(
            genres={"techno": 100.0, "house": 100.0, "trance": 100.0},
            top_artists=[WeightedArtist(name="Charlotte de Witte", weight=100.0, popularity=100)],
            trends=TasteTrends(trending_up=["techno"], new_discoveries=["techno"]),
            seasonal={"fall": ["techno"]},
        )
        hater = make_profile(
            user_id="hater",
            negative=NegativeSignals(
                removed_tracks=[TrackEntry(name="x", genres=["techno"])],
                skipped_artists=["Charlotte de Witte"],
            ),
        )
        events = [
            make_event(genres=["techno", "house", "trance"], venue="Coda"),
            make_event(source_id="2", genres=[]),
            make_event(source_id="3", name="House Party", artists=[], genres=["house"]),
        ]
        for event in events:
            for candidate in (profile, hater):
                result = await engine.score(event, candidate)
                assert 0 <= result.score <= 99

    @pytest.mark.asyncio
    async def test_no_genres_multiplier_neutral(self, engine: ScoringEngine, techno_profile: TasteProfile) -> None:
        event = make_event(name="Saturday DJ Night", artists=[], genres=[])

        result = await engine.score(event, techno_profile)

        assert result.breakdown.multiplier == 1.0
        assert result.confidence == ConfidenceLevel.VERY_LOW

    @pytest.mark.asyncio
    async def test_confidence_from_artist_metadata(self, engine: ScoringEngine, techno_profile: TasteProfile) -> None:
        event = make_event(
            artists=["Charlotte de Witte", "Local Opener"],
            artist_metadata=[
                ArtistIdentity(name="Charlotte de Witte", confidence=1.0, source=ResolutionSource.EXACT),
                ArtistIdentity(name="Local Opener"),
            ],
        )

        result = await engine.score(event, techno_profile)

        assert result.confidence == ConfidenceLevel.MEDIUM

    @pytest.mark.asyncio
    async def test_neutral_affinity_gives_plain_weighted_sum(
        self, classifier: MusicEventClassifier, fixed_clock, techno_event, techno_profile
    ) -> None:
        engine = ScoringEngine(
            classifier,
            weights=ScoringWeights(genre_affinity_floor=1.0, genre_affinity_gain=0.0),
            clock=fixed_clock,
        )

        result = await engine.score(techno_event, techno_profile)

        assert result.breakdown.multiplier == 1.0
        assert result.score == round_half_up(max(0.0, min(99.0, result.breakdown.raw_total)))

    @pytest.mark.asyncio
    async def test_weights_change_cache_key(
        self, classifier: MusicEventClassifier, memory_cache: MemoryCacheProvider, fixed_clock, techno_event, techno_profile
    ) -> None:
        default_engine = ScoringEngine(classifier, cache=memory_cache, clock=fixed_clock)
        genre_heavy = ScoringEngine(
            classifier,
            cache=memory_cache,
            weights=ScoringWeights(genre_matching=0.6),
            clock=fixed_clock,
        )

        await default_engine.score(techno_event, techno_profile)
        result = await genre_heavy.score(techno_event, techno_profile)

        assert result.cached is False
        assert memory_cache.size() == 2

    @pytest.mark.asyncio
    async def test_score_many_sorted_best_first(
        self, engine: ScoringEngine, techno_profile: TasteProfile, non_music_event: Event
    ) -> None:
        events = [
            non_music_event,
            make_event(source_id="country", name="Country Live", artists=[], genres=["country"]),
            make_event(source_id="techno"),
        ]

        results = await engine.score_many(events, techno_profile)

        assert [result.event_id for result in results][0] == "test:techno"
        assert [result.score for result in results] == sorted((r.score for r in results), reverse=True)

    def test_invalid_band_rejected(self, classifier: MusicEventClassifier) -> None:
        with pytest.raises(ValueError):
            ScoringEngine(classifier, non_music_band=(20, 10))

    def test_unknown_weight_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            ScoringWeights(genre_matchng=0.3)
