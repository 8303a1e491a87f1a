"""Shared fakes for the OS collaborators."""

from typing import Callable, List, Optional, Tuple

import pytest

from errors import LoginItemError
from settings import MemorySettingsStore


class FakePowerSource:
    def __init__(self, capacity: Optional[int] = None) -> None:
        self.value = capacity
        self.calls = 0

    def capacity(self) -> Optional[int]:
        self.calls += 1
        return self.value


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.sent.append((title, message))


class FakeLoginRegistry:
    def __init__(self, enabled: bool = False, fail: bool = False) -> None:
        self.enabled = enabled
        self.fail = fail
        self.calls: List[str] = []

    def is_enabled(self) -> bool:
        return self.enabled

    def register(self) -> None:
        self.calls.append("register")
        if self.fail:
            raise LoginItemError("Operation not permitted")
        self.enabled = True

    def unregister(self) -> None:
        self.calls.append("unregister")
        if self.fail:
            raise LoginItemError("Operation not permitted")
        self.enabled = False


class ManualScheduler:
    """Collects scheduled callbacks; tests fire ticks by hand."""

    def __init__(self) -> None:
        self.jobs: List[Tuple[int, Callable[[], None]]] = []

    def every(self, interval: int, callback: Callable[[], None]) -> None:
        self.jobs.append((interval, callback))

    def tick(self, times: int = 1) -> None:
        for _ in range(times):
            for _, callback in self.jobs:
                callback()


@pytest.fixture
def power_source():
    return FakePowerSource()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def settings():
    return MemorySettingsStore()


@pytest.fixture
def scheduler():
    return ManualScheduler()
