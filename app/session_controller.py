# session_controller.py
"""
Lifecycle of the session on screen: Idle -> Entering -> Active -> Leaving -> Idle.

Entering starts the data processing and radio threads and arms the live
start delay. The delay is not timed by a background thread; the render path
notices that it has elapsed and unpauses the provider exactly once.
"""
import logging
import threading
import time
from datetime import timedelta
from enum import Enum
from typing import Callable, Optional

import app_state
import config
import data_processing
import formatters
import renderer
import team_radio
from errors import AudioInitError
from provider import SessionProvider

logger = logging.getLogger("F1Dash.Session")


class LifecycleState(Enum):
    IDLE = "Idle"
    ENTERING = "Entering"
    ACTIVE = "Active"
    LEAVING = "Leaving"


class SessionController:
    def __init__(self, session_state: Optional[app_state.SessionState] = None, clip_player=None,
                 live_delay: float = config.LIVE_DELAY_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 theme: Optional[formatters.Theme] = None):
        self.session_state = session_state or app_state.SessionState()
        self.clip_player = clip_player or team_radio.PygameClipPlayer()
        self.live_delay = live_delay
        self.theme = theme or formatters.build_theme()
        self.console_formatter = formatters.ConsoleFormatter()
        self.html_formatter = formatters.HtmlFormatter()
        self._clock = clock

        self.lifecycle = LifecycleState.IDLE
        self.provider: Optional[SessionProvider] = None
        self.muted = False
        self.gap_to_car_ahead = False
        self._start_at = 0.0
        self._delay_expired = False

    @property
    def delay_expired(self) -> bool:
        return self._delay_expired

    def enter(self, provider: SessionProvider, is_live: bool) -> None:
        if self.lifecycle != LifecycleState.IDLE:
            raise RuntimeError(f"Cannot enter a session while {self.lifecycle.value}")

        state = self.session_state
        sess_id_log = state.session_id[:8]
        self.lifecycle = LifecycleState.ENTERING
        logger.info(f"Session {sess_id_log}: Entering '{provider.name()}' (live={is_live})")

        state.reset_derived_state()
        state.stop_event.clear()

        try:
            self.clip_player.init()
        except AudioInitError:
            logger.error(f"Session {sess_id_log}: Audio output unavailable, cannot enter session.", exc_info=True)
            self.lifecycle = LifecycleState.IDLE
            raise

        self.provider = provider
        self.gap_to_car_ahead = provider.session().is_race

        state.data_processing_thread = threading.Thread(
            target=data_processing.data_processing_loop_session,
            args=(state, provider),
            name=f"DataProcessing_{sess_id_log}",
            daemon=True)
        state.radio_thread = threading.Thread(
            target=team_radio.radio_playback_loop,
            args=(state, self.clip_player, lambda: self.muted),
            name=f"TeamRadio_{sess_id_log}",
            daemon=True)
        state.data_processing_thread.start()
        state.radio_thread.start()

        now = self._clock()
        if is_live:
            self._start_at = now + self.live_delay
            self._delay_expired = False
            if self.live_delay <= 0:
                self._finish_live_delay()
        else:
            self._start_at = now
            self._delay_expired = True

        self.lifecycle = LifecycleState.ACTIVE

    def _finish_live_delay(self) -> None:
        self._delay_expired = True
        if self.provider.is_paused():
            self.provider.toggle_pause()
        logger.info(f"Session {self.session_state.session_id[:8]}: Live delay elapsed, feed unpaused.")

    def leave(self) -> None:
        if self.lifecycle != LifecycleState.ACTIVE:
            return

        state = self.session_state
        sess_id_log = state.session_id[:8]
        self.lifecycle = LifecycleState.LEAVING
        logger.info(f"Session {sess_id_log}: Leaving session.")

        state.stop_event.set()
        # No state mutation may happen after leave returns, so wait for the aggregator
        if state.data_processing_thread is not None:
            state.data_processing_thread.join()
        if state.radio_thread is not None:
            state.radio_thread.join(timeout=config.THREAD_JOIN_TIMEOUT_SECONDS)
            if state.radio_thread.is_alive():
                logger.warning(f"Session {sess_id_log}: Radio thread did not stop in time.")
        self.clip_player.close()

        state.reset_state_variables()
        state.data_processing_thread = None
        state.radio_thread = None
        self.provider = None
        self._delay_expired = False
        self.lifecycle = LifecycleState.IDLE

    # --- Rendering ---

    def snapshot(self) -> renderer.RenderSnapshot:
        state = self.session_state
        provider = self.provider
        timing = state.timing_snapshot()
        event = state.get_event()
        state.session_bests.update(event.status, timing)
        return renderer.RenderSnapshot(
            session_type=provider.session(),
            name=provider.name(),
            timezone=provider.circuit_timezone(),
            session_start=provider.session_start(),
            paused=provider.is_paused(),
            timing=timing,
            event=event,
            clock=state.get_clock(),
            race_control=state.recent_race_control(max(config.RC_MESSAGES_CONSOLE, config.RC_MESSAGES_HTML)),
            weather=state.get_weather(),
            gap_slopes=state.gap_slopes(),
            bests=state.session_bests,
            radio_name=state.get_radio_name(),
        )

    def render_console(self) -> str:
        """
        One render pass. Returns the console text and refreshes the HTML
        mirror cache from the same snapshot.
        """
        if self.lifecycle != LifecycleState.ACTIVE:
            return config.TEXT_NO_SESSION

        if not self._delay_expired:
            remaining = self._start_at - self._clock()
            if remaining > 0:
                return config.TEXT_DELAYING_START.format(seconds=remaining)
            self._finish_live_delay()

        snapshot = self.snapshot()
        console_text = renderer.render_view(
            snapshot, self.console_formatter,
            renderer.ViewOptions(self.muted, self.gap_to_car_ahead, config.RC_MESSAGES_CONSOLE),
            self.theme)
        html_text = renderer.render_view(
            snapshot, self.html_formatter,
            renderer.ViewOptions(self.muted, self.gap_to_car_ahead, config.RC_MESSAGES_HTML),
            self.theme)
        self.session_state.set_html(html_text)
        return console_text

    def html(self) -> str:
        return self.session_state.get_html()

    # --- User controls ---

    def toggle_pause(self) -> None:
        self.provider.toggle_pause()

    def toggle_mute(self) -> None:
        self.muted = not self.muted

    def toggle_gap_mode(self) -> None:
        self.gap_to_car_ahead = not self.gap_to_car_ahead

    def increment_lap(self) -> None:
        self.provider.increment_lap()

    def advance_minute(self) -> None:
        self.provider.increment_time(timedelta(minutes=1))

    def advance_five_seconds(self) -> None:
        self.provider.increment_time(timedelta(seconds=5))

    def skip_to_session_start(self) -> None:
        self.provider.skip_to_session_start()
