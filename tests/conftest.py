"""Shared fixtures for eventpipe tests."""

from __future__ import annotations

import pytest

from eventpipe import set_error_sink


class MockEvent:
    """add_listener/remove_listener source that fires on demand."""

    def __init__(self) -> None:
        self.listeners: list = []
        self.removed: list = []

    def add_listener(self, callback, *args) -> None:
        self.listeners.append(callback)

    def remove_listener(self, callback) -> None:
        self.removed.append(callback)
        self.listeners = [cb for cb in self.listeners if cb is not callback]

    def fire(self, *args) -> list:
        return [cb(*args) for cb in list(self.listeners)]

    def attach(self, callback):
        self.add_listener(callback)
        return lambda: self.remove_listener(callback)


@pytest.fixture
def source() -> MockEvent:
    return MockEvent()


@pytest.fixture
def errors():
    """Collect uncaught (error, payload) pairs through the global sink."""
    seen: list = []
    set_error_sink(lambda error, payload: seen.append((error, payload)))
    try:
        yield seen
    finally:
        set_error_sink(None)
