# provider.py
"""
Boundary to the telemetry provider.

A provider owns the connection to a live feed or a replay and hands the
dashboard six message streams plus a small control surface. Nothing in this
package parses the wire protocol; adapters implement ``SessionProvider``
and are plugged in through ``config.PROVIDER_FACTORY``.
"""
import abc
import importlib
import logging
import queue
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

import pytz

import config
from errors import ProviderLoadError
from messages import Clock, Event, RaceControlMessage, Radio, SessionType, Timing, Weather

logger = logging.getLogger("F1Dash.Provider")

STREAM_NAMES = ("timing", "event", "clock", "race_control_messages", "radio", "weather")


class SessionProvider(abc.ABC):
    """Streams and controls of one session, live or replayed."""

    # --- Streams ---

    @abc.abstractmethod
    def timing(self) -> "queue.Queue[Timing]":
        ...

    @abc.abstractmethod
    def event(self) -> "queue.Queue[Event]":
        ...

    @abc.abstractmethod
    def clock(self) -> "queue.Queue[Clock]":
        ...

    @abc.abstractmethod
    def race_control_messages(self) -> "queue.Queue[RaceControlMessage]":
        ...

    @abc.abstractmethod
    def radio(self) -> "queue.Queue[Radio]":
        ...

    @abc.abstractmethod
    def weather(self) -> "queue.Queue[Weather]":
        ...

    # --- Controls ---

    @abc.abstractmethod
    def toggle_pause(self) -> None:
        ...

    @abc.abstractmethod
    def is_paused(self) -> bool:
        ...

    @abc.abstractmethod
    def increment_time(self, duration: timedelta) -> None:
        ...

    @abc.abstractmethod
    def increment_lap(self) -> None:
        ...

    @abc.abstractmethod
    def skip_to_session_start(self) -> None:
        ...

    # --- Session metadata ---

    @abc.abstractmethod
    def session_start(self) -> datetime:
        ...

    @abc.abstractmethod
    def session(self) -> SessionType:
        ...

    @abc.abstractmethod
    def name(self) -> str:
        ...

    @abc.abstractmethod
    def circuit_timezone(self) -> pytz.BaseTzInfo:
        ...

    def streams(self) -> List[Tuple[str, "queue.Queue"]]:
        """(name, queue) pairs for every stream, in a fixed order."""
        return [(name, getattr(self, name)()) for name in STREAM_NAMES]


class QueueProvider(SessionProvider):
    """
    In-process provider fed through ``publish``.

    Used to embed the dashboard behind an adapter that already produces typed
    messages, and by the test suite. Like a live feed waiting for its start
    delay it begins paused. Control calls are recorded in ``control_log``.
    """

    def __init__(self, name: str, session_type: SessionType, session_start: datetime,
                 timezone_name: str = config.DEFAULT_CIRCUIT_TIMEZONE, paused: bool = True):
        self._name = name
        self._session_type = session_type
        self._session_start = session_start
        self._timezone = pytz.timezone(timezone_name)
        self._queues = {stream: queue.Queue() for stream in STREAM_NAMES}
        self._lock = threading.Lock()
        self._paused = paused
        self.control_log: List[Tuple[str, object]] = []

    def publish(self, message) -> None:
        """Route a typed message onto the stream for its type."""
        if isinstance(message, Timing):
            stream = "timing"
        elif isinstance(message, Event):
            stream = "event"
        elif isinstance(message, Clock):
            stream = "clock"
        elif isinstance(message, RaceControlMessage):
            stream = "race_control_messages"
        elif isinstance(message, Radio):
            stream = "radio"
        elif isinstance(message, Weather):
            stream = "weather"
        else:
            raise TypeError(f"Cannot publish message of type {type(message).__name__}")
        self._queues[stream].put(message)

    def timing(self):
        return self._queues["timing"]

    def event(self):
        return self._queues["event"]

    def clock(self):
        return self._queues["clock"]

    def race_control_messages(self):
        return self._queues["race_control_messages"]

    def radio(self):
        return self._queues["radio"]

    def weather(self):
        return self._queues["weather"]

    def toggle_pause(self) -> None:
        with self._lock:
            self._paused = not self._paused
            self.control_log.append(("toggle_pause", self._paused))

    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    def increment_time(self, duration: timedelta) -> None:
        with self._lock:
            self.control_log.append(("increment_time", duration))

    def increment_lap(self) -> None:
        with self._lock:
            self.control_log.append(("increment_lap", None))

    def skip_to_session_start(self) -> None:
        with self._lock:
            self.control_log.append(("skip_to_session_start", None))

    def session_start(self) -> datetime:
        return self._session_start

    def session(self) -> SessionType:
        return self._session_type

    def name(self) -> str:
        return self._name

    def circuit_timezone(self):
        return self._timezone

    def controls(self, action: str) -> list:
        """Arguments of every recorded call of ``action``."""
        with self._lock:
            return [arg for name, arg in self.control_log if name == action]


def load_provider_factory(path: str) -> Callable[..., Optional[SessionProvider]]:
    """Resolve a ``"package.module:callable"`` reference to the provider factory."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ProviderLoadError(f"Provider factory must look like 'module:callable', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ProviderLoadError(f"Could not import provider module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ProviderLoadError(f"{path!r} does not name a callable")
    logger.info(f"Loaded provider factory {path}")
    return factory
