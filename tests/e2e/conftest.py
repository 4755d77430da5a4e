"""
E2E test fixtures and configuration.

Part of HYG-24: End-to-end guided session

These fixtures provide:
- A JSON profile store in a temporary directory, seeded with one athlete
- Test Settings pointing at that store with a fast real clock
- A phase polling helper for tests driven by the asyncio clock
"""
import asyncio
import json

import pytest

from backend.settings import Settings
from tests.fakes import create_profile


# Seconds between clock ticks; plan durations are counted in ticks
FAST_TICK_SECONDS = 0.01


def pytest_collection_modifyitems(config, items):
    """Mark every test under tests/e2e as e2e."""
    for item in items:
        if "/e2e/" in str(item.fspath).replace("\\", "/"):
            item.add_marker(pytest.mark.e2e)


@pytest.fixture
def profiles_path(tmp_path):
    """profiles.json seeded with the default test athlete."""
    path = tmp_path / "profiles.json"
    path.write_text(
        json.dumps([create_profile().model_dump(mode="json")], indent=2),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def e2e_settings(profiles_path) -> Settings:
    return Settings(
        environment="test",
        profile_store_path=str(profiles_path),
        tick_interval_seconds=FAST_TICK_SECONDS,
        _env_file=None,
    )


async def wait_for_phase(controller, *phases, timeout: float = 5.0):
    """Poll the controller until it reaches one of `phases`."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while controller.phase not in phases:
        if loop.time() > deadline:
            raise AssertionError(f"Still in {controller.phase} after {timeout}s, expected {phases}")
        await asyncio.sleep(FAST_TICK_SECONDS)
    return controller.phase
