"""Pytest configuration and fixtures."""

import os
import random
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PERSISTENCE_ENABLED"] = "false"
os.environ["DISCOVERY_PROVIDER"] = "stub"
os.environ["JOB_RUNNER_PROVIDER"] = "simulated"
os.environ["JOB_STEP_DELAY_SECONDS"] = "0"
os.environ["CONTINUOUS_SEARCH_INTERVAL_SECONDS"] = "0.01"
os.environ["LOG_LEVEL"] = "WARNING"


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from replay_studio.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def generator():
    """Get a seeded fallback replay generator."""
    from replay_studio.adapters.discovery.stub import MockReplayGenerator

    return MockReplayGenerator(rng=random.Random(42))


@pytest.fixture
def runner():
    """Get a simulated job runner with no delay between steps."""
    from replay_studio.adapters.runner.simulated import SimulatedJobRunner

    return SimulatedJobRunner(step_delay=0)


@pytest.fixture
def studio(generator, runner):
    """Get a fresh studio session backed by the stub source."""
    from replay_studio.adapters.discovery.stub import StubDiscoverySource
    from replay_studio.services.session import StudioSession

    return StudioSession(source=StubDiscoverySource(), runner=runner, generator=generator)


@pytest.fixture
def replay():
    """Get a sample replay."""
    from replay_studio.domain.models import Replay

    return Replay(
        id="KR_1_0",
        player="Faker",
        champion="Azir",
        rank="Challenger",
        kda="12/2/8",
        kda_ratio=10.0,
        duration_seconds=32 * 60 + 45,
        team_id=100,
        win=True,
        tier="Challenger",
    )
