import time
from datetime import datetime, timedelta
from typing import Callable, List

import pytest

from errors import AudioInitError, ClipDecodeError, NoLiveSessionError
from messages import SessionType, SplitTime, Timing
from provider import QueueProvider

SESSION_START = datetime(2024, 5, 26, 13, 0, 0)


def make_timing(number: int, position: int, **overrides) -> Timing:
    """Timing for one car with plausible defaults, overridable per field."""
    sectors = overrides.pop("sectors", None)
    timing = Timing(number=number, position=position, short_name=overrides.pop("short_name", f"D{number:02d}"))
    if sectors is not None:
        timing.sectors = [SplitTime(time=timedelta(seconds=value)) for value in sectors]
    for name, value in overrides.items():
        setattr(timing, name, value)
    return timing


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class RecordingClipPlayer:
    """Clip player that records payloads instead of touching audio hardware."""

    def __init__(self, fail_init: bool = False, playing_polls: int = 0):
        self.fail_init = fail_init
        self.playing_polls = playing_polls
        self.played: List[bytes] = []
        self.initialised = False
        self.closed = False
        self._remaining_polls = 0
        self.on_poll: Callable[[], None] = lambda: None

    def init(self) -> None:
        if self.fail_init:
            raise AudioInitError("no audio device")
        self.initialised = True

    def play(self, payload: bytes) -> None:
        if payload == b"corrupt":
            raise ClipDecodeError("invalid frame header")
        self.played.append(payload)
        self._remaining_polls = self.playing_polls

    def is_playing(self) -> bool:
        self.on_poll()
        if self._remaining_polls > 0:
            self._remaining_polls -= 1
            return True
        return False

    def stop(self) -> None:
        self._remaining_polls = 0

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def race_provider() -> QueueProvider:
    return QueueProvider("Monaco Grand Prix", SessionType.RACE, SESSION_START, "Europe/Monaco")


@pytest.fixture
def qualifying_provider() -> QueueProvider:
    return QueueProvider("Monaco Grand Prix", SessionType.QUALIFYING, SESSION_START, "Europe/Monaco")


@pytest.fixture
def clip_player() -> RecordingClipPlayer:
    return RecordingClipPlayer()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_polls(monkeypatch):
    import config

    monkeypatch.setattr(config, "RADIO_POLL_SECONDS", 0.01)
    monkeypatch.setattr(config, "AGGREGATOR_POLL_SECONDS", 0.01)


def no_live_session(live: bool = True):
    return None


def no_live_session_error(live: bool = True):
    raise NoLiveSessionError("nothing on track")
