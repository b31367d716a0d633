"""Tests for the replay discovery engine."""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from replay_studio.adapters.discovery.base import DiscoveryError, DiscoveryResponse
from replay_studio.adapters.discovery.stub import MockReplayGenerator
from replay_studio.domain.enums import DedupePolicy, RecordingMode, Tier
from replay_studio.domain.models import ReplayFilter, SystemStatus, kda_ratio, parse_kda
from replay_studio.services.discovery import DiscoveryEngine
from replay_studio.services.scheduler import TaskScheduler

RAW_REPLAYS = [
    {
        "id": "KR_100_0",
        "player": "Faker",
        "champion": "Azir",
        "tier": "Challenger",
        "kda": "12/2/8",
        "duration": "32:45",
        "win": True,
    },
    {
        "id": "KR_100_1",
        "player": "Zeus",
        "champion": "Jayce",
        "tier": "Challenger",
        "kda": "6/1/4",
        "duration": 1965,
        "win": True,
    },
]


def make_source(response=None, error=None) -> MagicMock:
    """Build a mocked discovery source."""
    source = MagicMock()
    source.name = "mock"
    if error is not None:
        source.fetch = AsyncMock(side_effect=error)
    else:
        source.fetch = AsyncMock(return_value=response)
    source.close = AsyncMock()
    return source


def make_engine(source, **kwargs) -> DiscoveryEngine:
    """Build an engine with its own status, replays and scheduler."""
    return DiscoveryEngine(
        source=source,
        status=SystemStatus(),
        replays=[],
        scheduler=TaskScheduler(),
        generator=MockReplayGenerator(rng=random.Random(7)),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_search_normalizes_records() -> None:
    """Test that formatted and raw-second durations both normalize."""
    engine = make_engine(make_source(DiscoveryResponse(replays=RAW_REPLAYS)))

    outcome = await engine.search(ReplayFilter())

    assert outcome.success is True
    assert outcome.fallback is False
    assert outcome.count == 2
    assert [r.duration for r in outcome.replays] == ["32:45", "32:45"]
    assert [r.duration_seconds for r in outcome.replays] == [1965, 1965]
    assert outcome.message == "Found 2 replays using random pro players configuration."
    assert engine.replays == outcome.replays
    assert engine.status.replays_discovered == 2
    assert engine.status.searches_completed == 1
    assert engine.status.last_activity is not None


@pytest.mark.asyncio
async def test_search_drops_invalid_and_filtered_records() -> None:
    """Test that malformed records and filter misses are counted as rejected."""
    records = [
        *RAW_REPLAYS,
        {"id": "KR_100_2", "player": "Oner"},  # no champion
        {"id": "KR_100_3", "player": "Keria", "champion": "Thresh", "kda": "0/5/1",
         "duration": 1900, "win": True},
        {"id": "KR_100_4", "player": "Doran", "champion": "Gnar", "kda": "5/1/5",
         "duration": 900, "win": True},
    ]
    engine = make_engine(make_source(DiscoveryResponse(replays=records)))

    outcome = await engine.search(ReplayFilter())

    assert [r.id for r in outcome.replays] == ["KR_100_0", "KR_100_1"]
    assert outcome.rejected == 3


@pytest.mark.asyncio
async def test_search_rejects_records_that_are_not_objects() -> None:
    """Test that a non-object record is rejected without failing the search."""
    engine = make_engine(make_source(DiscoveryResponse(replays=["garbage", RAW_REPLAYS[0]])))

    outcome = await engine.search(ReplayFilter())

    assert outcome.success is True
    assert outcome.rejected == 1
    assert [r.id for r in outcome.replays] == ["KR_100_0"]


def test_generator_keeps_exact_kda_ratio() -> None:
    """Test that generated ratios are not rounded before filtering."""
    generator = MockReplayGenerator(rng=random.Random(3))
    replay_filter = ReplayFilter(kda_threshold=2.86, only_winners=False)

    records = generator.generate(replay_filter)

    for raw in records:
        assert raw["kdaRatio"] == kda_ratio(*parse_kda(raw["kda"]))
        assert raw["kdaRatio"] >= 2.86


@pytest.mark.asyncio
async def test_search_failure_leaves_state_unchanged() -> None:
    """Test that an unreachable source yields an error and changes nothing."""
    engine = make_engine(make_source(error=DiscoveryError("connection refused")))

    outcome = await engine.search(ReplayFilter())

    assert outcome.success is False
    assert outcome.replays == []
    assert outcome.error == "Unable to fetch replays: connection refused"
    assert outcome.message == outcome.error
    assert engine.replays == []
    assert engine.status.replays_discovered == 0
    assert engine.status.searches_completed == 0
    assert engine.status.last_activity is None


@pytest.mark.asyncio
async def test_fallback_generates_replays_matching_filter() -> None:
    """Test that a not-configured answer falls back to generated replays."""
    engine = make_engine(make_source(DiscoveryResponse(error="not configured")))
    replay_filter = ReplayFilter(min_duration=30, kda_threshold=2.0, only_winners=False)

    outcome = await engine.search(replay_filter)

    assert outcome.success is True
    assert outcome.fallback is True
    assert outcome.error == "not configured"
    assert 0 < outcome.count <= 10
    for replay in outcome.replays:
        assert replay.duration_seconds >= 30 * 60
        assert replay.kda_ratio >= 2.0


@pytest.mark.asyncio
async def test_fallback_keeps_records_sent_by_source() -> None:
    """Test that fallback data supplied by the source is used as-is."""
    engine = make_engine(make_source(DiscoveryResponse(replays=RAW_REPLAYS, error="no key")))

    outcome = await engine.search(ReplayFilter())

    assert outcome.fallback is True
    assert [r.id for r in outcome.replays] == ["KR_100_0", "KR_100_1"]


@pytest.mark.asyncio
async def test_dedupe_allow_appends_duplicates() -> None:
    """Test that the default policy appends re-discovered replays."""
    engine = make_engine(make_source(DiscoveryResponse(replays=RAW_REPLAYS)))

    await engine.search(ReplayFilter())
    await engine.search(ReplayFilter())

    assert len(engine.replays) == 4
    assert engine.status.replays_discovered == 4


@pytest.mark.asyncio
async def test_dedupe_by_id_skips_known_replays() -> None:
    """Test that the by-id policy skips replays already known."""
    engine = make_engine(
        make_source(DiscoveryResponse(replays=RAW_REPLAYS)), dedupe_policy=DedupePolicy.BY_ID
    )

    await engine.search(ReplayFilter())
    second = await engine.search(ReplayFilter())

    assert second.count == 0
    assert len(engine.replays) == 2
    assert engine.status.replays_discovered == 2
    assert engine.status.searches_completed == 2


def test_generator_respects_mode() -> None:
    """Test that the generator steers player, champion and tier by mode."""
    generator = MockReplayGenerator(rng=random.Random(1))

    specific = generator.generate(
        ReplayFilter(
            recording_mode=RecordingMode.SPECIFIC_PRO,
            specific_player="Faker",
            kda_threshold=1.0,
            only_winners=False,
        )
    )
    assert specific
    assert {raw["player"] for raw in specific} == {"Faker"}

    champion = generator.generate(
        ReplayFilter(
            tier="master",
            recording_mode=RecordingMode.CHAMPION_TIER,
            specific_champion="Azir",
            selected_tier="Grandmaster",
            kda_threshold=1.0,
            only_winners=False,
        )
    )
    assert champion
    assert {raw["champion"] for raw in champion} == {"Azir"}
    assert {raw["tier"] for raw in champion} == {Tier.GRANDMASTER.label}


@pytest.mark.asyncio
async def test_continuous_search_reschedules() -> None:
    """Test that continuous mode keeps searching until stopped."""
    engine = make_engine(
        make_source(DiscoveryResponse(replays=RAW_REPLAYS)), continuous_interval=0.01
    )
    replay_filter = ReplayFilter(
        recording_mode=RecordingMode.CONTINUOUS_AUTO, continuous_recording=True
    )

    await engine.search(replay_filter)
    assert engine.continuous_active is True

    await asyncio.sleep(0.1)
    assert engine.status.searches_completed > 1

    assert engine.stop_continuous() is True
    assert engine.continuous_active is False

    await asyncio.sleep(0.02)
    searches = engine.status.searches_completed
    await asyncio.sleep(0.05)
    assert engine.status.searches_completed == searches
    assert engine.stop_continuous() is False


@pytest.mark.asyncio
async def test_non_continuous_search_schedules_nothing() -> None:
    """Test that continuous-auto without continuous recording runs once."""
    engine = make_engine(
        make_source(DiscoveryResponse(replays=RAW_REPLAYS)), continuous_interval=0.01
    )

    await engine.search(ReplayFilter(recording_mode=RecordingMode.CONTINUOUS_AUTO))

    assert engine.continuous_active is False
    assert engine.scheduler.active_keys() == []


@pytest.mark.asyncio
async def test_closing_scheduler_stops_continuous_search() -> None:
    """Test that no scheduled search outlives a closed session."""
    source = make_source(DiscoveryResponse(replays=RAW_REPLAYS))
    engine = make_engine(source, continuous_interval=0.01)
    replay_filter = ReplayFilter(
        recording_mode=RecordingMode.CONTINUOUS_AUTO, continuous_recording=True
    )

    await engine.search(replay_filter)
    await engine.scheduler.close()

    assert engine.continuous_active is False
    calls = source.fetch.await_count
    await asyncio.sleep(0.05)
    assert source.fetch.await_count == calls

    # A search after close still works but schedules nothing
    await engine.search(replay_filter)
    assert engine.continuous_active is False


@pytest.mark.asyncio
async def test_failed_continuous_search_ends_chain() -> None:
    """Test that a failing follow-up search does not reschedule."""
    source = make_source(DiscoveryResponse(replays=RAW_REPLAYS))
    engine = make_engine(source, continuous_interval=0.01)
    replay_filter = ReplayFilter(
        recording_mode=RecordingMode.CONTINUOUS_AUTO, continuous_recording=True
    )

    await engine.search(replay_filter)
    source.fetch.side_effect = DiscoveryError("rate limited")

    await engine.scheduler.join()

    assert engine.continuous_active is False
    assert engine.status.searches_completed == 1
