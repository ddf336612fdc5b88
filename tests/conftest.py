"""Shared test fixtures."""

from __future__ import annotations

import pytest

from gem_readme_mcp.cache import MemoryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> MemoryCache:
    """A fresh cache per test, driven by the fake clock."""
    return MemoryCache(clock=clock)
