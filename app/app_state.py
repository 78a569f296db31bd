# app_state.py
"""
Shared state of the session being displayed.

Each domain (timing, event, clock, race control, radio, weather, gap
trends, rendered HTML, playing radio name) has its own lock so that, for
example, a timing update never waits behind an HTML mirror read. No lock covers
the whole snapshot.
"""
import collections
import logging
import threading
import uuid
from copy import deepcopy
from typing import Deque, Dict, List, Optional

from messages import Clock, Event, RaceControlMessage, Radio, Timing, Weather
from session_stats import GapTrend, SessionBests, update_gap_trends

# Logger for this module
logger = logging.getLogger("F1Dash.AppState")

# --- Constants for Initializing Session State ---
INITIAL_EVENT: Event = Event()
INITIAL_CLOCK: Clock = Clock()
INITIAL_WEATHER: Weather = Weather()


class SessionState:
    def __init__(self, session_id: Optional[str] = None):
        self.session_id: str = session_id or str(uuid.uuid4())
        self.stop_event: threading.Event = threading.Event()

        self.timing_lock: threading.Lock = threading.Lock()
        self.timing_state: Dict[int, Timing] = {}

        self.event_lock: threading.Lock = threading.Lock()
        self.event: Event = deepcopy(INITIAL_EVENT)

        self.clock_lock: threading.Lock = threading.Lock()
        self.clock: Clock = deepcopy(INITIAL_CLOCK)

        self.race_control_lock: threading.Lock = threading.Lock()
        # Unbounded; only the most recent messages are ever rendered
        self.race_control_log: List[RaceControlMessage] = []

        self.radio_lock: threading.Lock = threading.Lock()
        self.radio_queue: Deque[Radio] = collections.deque()

        self.weather_lock: threading.Lock = threading.Lock()
        self.weather: Weather = deepcopy(INITIAL_WEATHER)

        self.gap_trend_lock: threading.Lock = threading.Lock()
        self.gap_trends: Dict[int, GapTrend] = {}

        self.radio_name_lock: threading.Lock = threading.Lock()
        self.radio_name: str = ""

        self.html_lock: threading.Lock = threading.Lock()
        self.html: str = ""

        # Owned by the render loop, never touched by the background threads
        self.session_bests: SessionBests = SessionBests()

        self.data_processing_thread: Optional[threading.Thread] = None
        self.radio_thread: Optional[threading.Thread] = None

        logger.info(f"Initialized new SessionState for session_id: {self.session_id}")

    # --- Timing ---

    def update_timing(self, timing: Timing) -> None:
        with self.timing_lock:
            self.timing_state[timing.number] = timing

    def timing_snapshot(self) -> List[Timing]:
        """Copy of every car's timing, ordered by position. Sorting happens outside the lock."""
        with self.timing_lock:
            cars = list(self.timing_state.values())
        cars.sort(key=lambda car: car.position)
        return cars

    def refresh_gap_trends(self) -> None:
        cars = self.timing_snapshot()
        with self.gap_trend_lock:
            update_gap_trends(self.gap_trends, cars)

    def gap_slopes(self) -> Dict[int, int]:
        with self.gap_trend_lock:
            return {number: trend.slope for number, trend in self.gap_trends.items()}

    # --- Event / Clock / Weather ---

    def set_event(self, event: Event) -> None:
        with self.event_lock:
            self.event = event

    def get_event(self) -> Event:
        with self.event_lock:
            return self.event

    def set_clock(self, clock: Clock) -> None:
        with self.clock_lock:
            self.clock = clock

    def get_clock(self) -> Clock:
        with self.clock_lock:
            return self.clock

    def set_weather(self, weather: Weather) -> None:
        with self.weather_lock:
            self.weather = weather

    def get_weather(self) -> Weather:
        with self.weather_lock:
            return self.weather

    # --- Race control ---

    def append_race_control(self, message: RaceControlMessage) -> None:
        with self.race_control_lock:
            self.race_control_log.append(message)

    def recent_race_control(self, count: int) -> List[RaceControlMessage]:
        """Up to ``count`` most recent messages, newest first."""
        if count <= 0:
            return []
        with self.race_control_lock:
            recent = self.race_control_log[-count:]
        recent.reverse()
        return recent

    # --- Team radio ---

    def enqueue_radio(self, clip: Radio) -> None:
        with self.radio_lock:
            self.radio_queue.append(clip)

    def pop_radio(self) -> Optional[Radio]:
        with self.radio_lock:
            if not self.radio_queue:
                return None
            return self.radio_queue.popleft()

    def set_radio_name(self, name: str) -> None:
        with self.radio_name_lock:
            self.radio_name = name

    def get_radio_name(self) -> str:
        with self.radio_name_lock:
            return self.radio_name

    # --- Rendered HTML ---

    def set_html(self, html: str) -> None:
        with self.html_lock:
            self.html = html

    def get_html(self) -> str:
        with self.html_lock:
            return self.html

    # --- Resets ---

    def reset_derived_state(self) -> None:
        """Clear session bests and gap trends, as done when entering a session."""
        self.session_bests = SessionBests()
        with self.gap_trend_lock:
            self.gap_trends = {}

    def reset_state_variables(self) -> None:
        with self.timing_lock:
            self.timing_state = {}
        with self.event_lock:
            self.event = deepcopy(INITIAL_EVENT)
        with self.clock_lock:
            self.clock = deepcopy(INITIAL_CLOCK)
        with self.race_control_lock:
            self.race_control_log = []
        with self.radio_lock:
            self.radio_queue.clear()
        with self.weather_lock:
            self.weather = deepcopy(INITIAL_WEATHER)
        with self.radio_name_lock:
            self.radio_name = ""
        with self.html_lock:
            self.html = ""
        self.reset_derived_state()
        logger.info(f"Session {self.session_id[:8]}: State variables have been reset to defaults.")
