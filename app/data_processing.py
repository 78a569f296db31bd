# data_processing.py
"""
Fan-in of the provider's six streams into the shared SessionState.

One background thread drains whichever stream has a message waiting. Each
message replaces or appends to its own part of the state under that part's
lock; no handler publishes anything further.
"""
import logging
import queue
import time

import app_state
import config
from messages import Clock, Event, RaceControlMessage, Radio, Timing, Weather
from provider import SessionProvider

logger = logging.getLogger("F1Dash.DataProcessing")


def _process_timing(session_state: app_state.SessionState, provider: SessionProvider, timing: Timing):
    session_state.update_timing(timing)
    # Gap to the car ahead is relative, so every car's trend is refreshed
    if provider.session().is_race:
        session_state.refresh_gap_trends()


def _process_event(session_state: app_state.SessionState, provider: SessionProvider, event: Event):
    session_state.set_event(event)


def _process_clock(session_state: app_state.SessionState, provider: SessionProvider, clock: Clock):
    session_state.set_clock(clock)


def _process_race_control(session_state: app_state.SessionState, provider: SessionProvider,
                          message: RaceControlMessage):
    session_state.append_race_control(message)


def _process_radio(session_state: app_state.SessionState, provider: SessionProvider, clip: Radio):
    session_state.enqueue_radio(clip)


def _process_weather(session_state: app_state.SessionState, provider: SessionProvider, weather: Weather):
    session_state.set_weather(weather)


STREAM_HANDLERS = {
    "timing": _process_timing,
    "event": _process_event,
    "clock": _process_clock,
    "race_control_messages": _process_race_control,
    "radio": _process_radio,
    "weather": _process_weather,
}


def process_next_message(session_state: app_state.SessionState, provider: SessionProvider,
                         streams, start: int = 0) -> bool:
    """
    Handle at most one waiting message, scanning the streams from ``start``.

    Returns False when every stream was empty.
    """
    sess_id_log = session_state.session_id[:8]
    count = len(streams)
    for offset in range(count):
        stream_name, stream = streams[(start + offset) % count]
        try:
            item = stream.get_nowait()
        except queue.Empty:
            continue

        try:
            STREAM_HANDLERS[stream_name](session_state, provider, item)
        except Exception as e:
            logger.error(f"Session {sess_id_log}: Error processing '{stream_name}' message: {e}", exc_info=True)
        return True
    return False


def data_processing_loop_session(session_state: app_state.SessionState, provider: SessionProvider):
    sess_id_log = session_state.session_id[:8]
    logger.info(f"Data processing thread started for session: {sess_id_log}")

    streams = provider.streams()
    processed_count = 0
    next_start = 0
    last_log_time = time.monotonic()

    while not session_state.stop_event.is_set():
        handled = process_next_message(session_state, provider, streams, next_start)
        # Rotate the scan origin so no stream is always read first
        next_start = (next_start + 1) % len(streams)
        if handled:
            processed_count += 1
        else:
            session_state.stop_event.wait(config.AGGREGATOR_POLL_SECONDS)

        if time.monotonic() - last_log_time > 60:
            logger.debug(f"Session {sess_id_log}: Processed {processed_count} messages in the last minute.")
            processed_count = 0
            last_log_time = time.monotonic()

    logger.info(f"Data processing thread finished cleanly for session: {sess_id_log}")
