"""Tests for domain models."""

import pytest

from replay_studio.domain.enums import JobStatus, RecordingMode, Server, Tier
from replay_studio.domain.models import (
    InvalidFilterError,
    Job,
    Replay,
    ReplayFilter,
    SystemStatus,
    build_job_title,
    format_duration,
    format_file_size,
    kda_ratio,
    parse_duration,
)


def test_filter_defaults() -> None:
    """Test the default search filters."""
    replay_filter = ReplayFilter()

    assert replay_filter.server == Server.KR
    assert replay_filter.tier == Tier.CHALLENGER
    assert replay_filter.min_duration == 25
    assert replay_filter.kda_threshold == 2.0
    assert replay_filter.only_winners is True
    assert replay_filter.recording_mode == RecordingMode.RANDOM_PRO
    assert replay_filter.min_duration_seconds == 1500


def test_filter_parses_strings() -> None:
    """Test that tiers and servers are accepted case-insensitively."""
    replay_filter = ReplayFilter(server="EUW", tier="Grandmaster", recording_mode="all-tiers")

    assert replay_filter.server == Server.EUW
    assert replay_filter.tier == Tier.GRANDMASTER
    assert replay_filter.recording_mode == RecordingMode.ALL_TIERS


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_duration": 14},
        {"min_duration": 61},
        {"kda_threshold": 0.5},
        {"kda_threshold": 10.5},
        {"tier": "diamond"},
        {"server": "br"},
        {"recording_mode": "highlights"},
    ],
)
def test_filter_rejects_invalid_values(kwargs) -> None:
    """Test that out-of-range filters raise InvalidFilterError."""
    with pytest.raises(InvalidFilterError):
        ReplayFilter(**kwargs)


def test_invalid_filter_is_value_error() -> None:
    """Test that InvalidFilterError can be caught as a ValueError."""
    with pytest.raises(ValueError):
        ReplayFilter(min_duration=0)


def test_filter_mode_degrades_without_fields() -> None:
    """Test that modes missing their field fall back to a broader mode."""
    assert (
        ReplayFilter(recording_mode=RecordingMode.SPECIFIC_PRO).effective_mode
        == RecordingMode.RANDOM_PRO
    )
    assert (
        ReplayFilter(recording_mode=RecordingMode.CHAMPION_TIER).effective_mode
        == RecordingMode.SINGLE_TIER
    )
    assert (
        ReplayFilter(
            recording_mode=RecordingMode.SPECIFIC_PRO, specific_player="Faker"
        ).effective_mode
        == RecordingMode.SPECIFIC_PRO
    )


def test_filter_target_tier() -> None:
    """Test that the selected tier wins over the minimum tier when it parses."""
    assert ReplayFilter(tier="master", selected_tier="Grandmaster").target_tier == Tier.GRANDMASTER
    assert ReplayFilter(tier="master", selected_tier="bronze").target_tier == Tier.MASTER
    assert ReplayFilter(tier="master").target_tier == Tier.MASTER


def test_filter_continuous_requires_both_flags() -> None:
    """Test that only continuous-auto with continuous recording reschedules."""
    assert ReplayFilter(
        recording_mode=RecordingMode.CONTINUOUS_AUTO, continuous_recording=True
    ).is_continuous
    assert not ReplayFilter(recording_mode=RecordingMode.CONTINUOUS_AUTO).is_continuous
    assert not ReplayFilter(continuous_recording=True).is_continuous


def test_filter_describe() -> None:
    """Test mode descriptions."""
    assert ReplayFilter().describe() == "random pro players"
    assert (
        ReplayFilter(recording_mode=RecordingMode.SPECIFIC_PRO, specific_player="Faker").describe()
        == "Faker player"
    )
    assert (
        ReplayFilter(
            recording_mode=RecordingMode.CHAMPION_TIER,
            specific_champion="Azir",
            selected_tier="Master",
        ).describe()
        == "Azir in Master"
    )


def test_filter_payload_uses_wire_names() -> None:
    """Test the request body sent to discovery functions."""
    payload = ReplayFilter(kda_threshold=3.5, specific_player="Faker").to_payload()

    assert payload == {
        "filters": {
            "tier": "challenger",
            "duration": 25,
            "kda": 3.5,
            "server": "kr",
            "recordingMode": "random-pro",
            "onlyWinners": True,
            "specificPlayer": "Faker",
        }
    }


def test_filter_accepts(replay: Replay) -> None:
    """Test the numeric and outcome constraints."""
    assert ReplayFilter().accepts(replay)
    assert not ReplayFilter(min_duration=40).accepts(replay)
    low_kda = Replay.from_raw(
        {"id": "x", "player": "p", "champion": "c", "kda": "1/1/1", "duration": 1800}
    )
    assert not ReplayFilter(kda_threshold=3.0).accepts(low_kda)


def test_filter_rejects_losses_when_only_winners() -> None:
    """Test that lost games only pass when winners are not required."""
    raw = {"id": "x", "player": "p", "champion": "c", "kda": "9/1/9", "duration": 1800}
    lost = Replay.from_raw({**raw, "win": False})

    assert not ReplayFilter(only_winners=True).accepts(lost)
    assert ReplayFilter(only_winners=False).accepts(lost)


def test_filter_rejects_lower_tier() -> None:
    """Test that replays below the minimum tier are rejected."""
    raw = {"id": "x", "player": "p", "champion": "c", "kda": "9/1/9", "duration": 1800}
    master = Replay.from_raw({**raw, "tier": "Master"})

    assert not ReplayFilter(tier="grandmaster").accepts(master)
    assert ReplayFilter(tier="master").accepts(master)


def test_replay_from_raw_with_seconds() -> None:
    """Test normalizing a record whose duration is raw seconds."""
    replay = Replay.from_raw(
        {
            "id": "KR_1",
            "player": "Faker",
            "champion": "Azir",
            "tier": "Challenger",
            "rank": "I",
            "kda": "12/2/8",
            "duration": 1965,
            "teamId": 200,
        }
    )

    assert replay.duration == "32:45"
    assert replay.duration_seconds == 1965
    assert replay.kda_ratio == 10.0
    assert replay.rank == "Challenger I"
    assert replay.patch == "14.1"
    assert replay.game_mode == "Ranked Solo"
    assert replay.download_url == "#"
    assert replay.fog_of_war == "Red"


def test_replay_from_raw_with_formatted_duration() -> None:
    """Test normalizing a record whose duration is already "mm:ss"."""
    replay = Replay.from_raw(
        {"id": "KR_2", "player": "Zeus", "champion": "Jayce", "kda": "5/0/5", "duration": "32:45"}
    )

    assert replay.duration_seconds == 1965
    assert replay.duration == "32:45"
    assert replay.rank == "Unranked"
    assert replay.fog_of_war == "Auto"


def test_replay_from_raw_missing_field() -> None:
    """Test that records without a player are rejected."""
    with pytest.raises(ValueError):
        Replay.from_raw({"id": "x", "champion": "Azir"})


@pytest.mark.parametrize("raw", ["garbage", 42, None, ["KR_1"]])
def test_replay_from_raw_not_an_object(raw) -> None:
    """Test that records which are not objects raise ValueError."""
    with pytest.raises(ValueError, match="must be an object"):
        Replay.from_raw(raw)


def test_replay_display(replay: Replay) -> None:
    """Test the display helpers of a replay."""
    assert replay.kda_display == "12/2/8 (10.00 KDA)"
    assert replay.fog_of_war == "Blue"
    assert replay.recording_settings() == {
        "fog_of_war": "Blue",
        "team_color": "blue",
        "auto_record": True,
    }


def test_job_title() -> None:
    """Test the derived upload title."""
    assert build_job_title("Faker", "Azir", "12/2/8") == "FAKER AZIR 12/2/8 CHALLENGER GAMEPLAY"


def test_job_from_replay(replay: Replay) -> None:
    """Test creating a pending Job from a Replay."""
    job = Job.from_replay(replay)

    assert job.status == JobStatus.PENDING
    assert job.progress == 0
    assert job.title == "FAKER AZIR 12/2/8 CHALLENGER GAMEPLAY"
    assert job.duration == "32:45"
    assert job.file_size == "2.0 GB"
    assert job.estimated_time == "Queued"
    assert job.video_url is None
    assert job.replay is replay
    assert job.recording_settings["fog_of_war"] == "Blue"


def test_job_ids_are_unique(replay: Replay) -> None:
    """Test that enqueuing the same replay twice gives two jobs."""
    assert Job.from_replay(replay).id != Job.from_replay(replay).id


def test_job_status_terminal() -> None:
    """Test terminal statuses."""
    assert JobStatus.COMPLETED.is_terminal
    assert JobStatus.FAILED.is_terminal
    assert not JobStatus.PENDING.is_terminal
    assert not JobStatus.UPLOADING.is_terminal


def test_tier_ordering() -> None:
    """Test tier ranking and case-insensitive parsing."""
    assert Tier.parse("Challenger") == Tier.parse("challenger") == Tier.CHALLENGER
    assert Tier.CHALLENGER.at_least(Tier.MASTER)
    assert not Tier.MASTER.at_least(Tier.GRANDMASTER)
    assert Tier.GRANDMASTER.label == "Grandmaster"


def test_server_hosts() -> None:
    """Test Riot routing hosts per server."""
    assert Server.KR.platform_host == "kr"
    assert Server.NA.platform_host == "na1"
    assert Server.EUNE.platform_host == "eun1"
    assert Server.KR.regional_host == "asia"
    assert Server.EUW.regional_host == "europe"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1965, 1965), (1965.7, 1965), ("32:45", 1965), ("1:02:03", 3723), ("90", 90)],
)
def test_parse_duration(value, expected) -> None:
    """Test duration parsing."""
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["abc", "12:xx", "", True])
def test_parse_duration_invalid(value) -> None:
    """Test that unparseable durations raise."""
    with pytest.raises(ValueError):
        parse_duration(value)


def test_format_helpers() -> None:
    """Test duration, size and KDA formatting."""
    assert format_duration(0) == "0:00"
    assert format_duration(65) == "1:05"
    assert format_file_size(0) == "0 B"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(2 * 1024**3) == "2 GB"
    assert kda_ratio(3, 0, 3) == 6.0


def test_system_status_uptime() -> None:
    """Test that stopping folds the running time into the uptime."""
    status = SystemStatus(uptime_seconds=3 * 3600 + 25 * 60)
    assert status.uptime == "3h 25m"

    status.start()
    assert status.is_running
    assert status.current_task == "Searching for replays..."

    status.stop()
    assert not status.is_running
    assert status.current_task == "Idle"
    assert status.uptime == "3h 25m"
    assert status.last_activity is not None


def test_system_status_reset() -> None:
    """Test resetting the status to a fresh session."""
    status = SystemStatus(replays_found=3, videos_uploaded=2, is_running=True)
    status.reset()

    assert status == SystemStatus()
