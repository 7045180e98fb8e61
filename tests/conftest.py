"""Pytest configuration and fixtures for breaktime tests."""

import os
import tempfile

os.environ.setdefault("BREAKTIME_LOG_DIR", tempfile.mkdtemp(prefix="breaktime-logs-"))

import pytest
from loguru import logger
from PySide6.QtCore import QCoreApplication

from core.settings import BreakSettings


@pytest.fixture(scope="session")
def qapp():
    """Provide a Qt application object so timers can be created."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def log_messages():
    """Collect messages logged through loguru while the test runs."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def settings():
    """Settings with a 15 second break duration."""
    return BreakSettings(natural_breaks=True, break_duration_ms=15000, morning_hour=6)


class ScriptedIdle:
    """Idle time provider returning a fixed sequence of readings."""

    def __init__(self, readings=()):
        self.readings = list(readings)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.readings.pop(0)

    def push(self, *readings):
        self.readings.extend(readings)


@pytest.fixture
def scripted_idle():
    return ScriptedIdle()


class Recorder:
    """Records emissions of Qt signals."""

    def __init__(self):
        self.events = []

    def slot(self, name):
        def _record(*args):
            self.events.append((name, *args))

        return _record

    def names(self):
        return [event[0] for event in self.events]


@pytest.fixture
def recorder():
    return Recorder()
