"""Shared fixtures for all tests."""

from collections.abc import Generator

import pytest


class SleepRecorder:
    """Stand-in for ``anyio.sleep`` that records durations and returns at once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear 123pan environment variables so tests never pick up real credentials."""
    for var in ("PAN123_CLIENT_ID", "PAN123_CLIENT_SECRET"):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def client_id() -> str:
    return "test_client_id_123456"


@pytest.fixture
def client_secret() -> str:
    return "test_client_secret_abcdef"


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(1_000.0)
