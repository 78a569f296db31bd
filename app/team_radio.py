# team_radio.py
"""
Sequential playback of team radio clips.

Clips are taken from the SessionState radio queue strictly in arrival
order, one at a time. Muting drops clips as they are dequeued rather than
holding them back.
"""
import io
import logging
import os
from typing import Callable

# Keep pygame's banner off the console view
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

import app_state  # noqa: E402
import config  # noqa: E402
from errors import AudioInitError, ClipDecodeError  # noqa: E402

logger = logging.getLogger("F1Dash.TeamRadio")


class PygameClipPlayer:
    """Decode-and-play primitive on top of ``pygame.mixer``."""

    def __init__(self, sample_rate: int = config.AUDIO_SAMPLE_RATE, channels: int = config.AUDIO_CHANNELS,
                 clip_format: str = config.AUDIO_CLIP_FORMAT):
        self.sample_rate = sample_rate
        self.channels = channels
        self.clip_format = clip_format

    def init(self) -> None:
        try:
            pygame.mixer.init(frequency=self.sample_rate, channels=self.channels)
        except pygame.error as e:
            raise AudioInitError(f"Could not open audio output: {e}") from e
        logger.info(f"Audio output opened at {self.sample_rate} Hz, {self.channels} channel(s)")

    def play(self, payload: bytes) -> None:
        try:
            pygame.mixer.music.load(io.BytesIO(payload), self.clip_format)
            pygame.mixer.music.play()
        except pygame.error as e:
            raise ClipDecodeError(str(e)) from e

    def is_playing(self) -> bool:
        return bool(pygame.mixer.music.get_busy())

    def stop(self) -> None:
        if pygame.mixer.get_init():
            pygame.mixer.music.stop()

    def close(self) -> None:
        if pygame.mixer.get_init():
            pygame.mixer.music.stop()
            pygame.mixer.quit()
            logger.info("Audio output closed")


def play_next_clip(session_state: app_state.SessionState, player, is_muted: Callable[[], bool]) -> bool:
    """
    Dequeue the head clip and, unless muted, play it to completion.

    Returns False if the queue was empty. A clip that cannot be decoded is
    logged and skipped.
    """
    sess_id_log = session_state.session_id[:8]
    clip = session_state.pop_radio()
    if clip is None:
        return False

    if is_muted():
        logger.debug(f"Session {sess_id_log}: Radio muted, dropping clip from {clip.driver}")
        return True

    try:
        player.play(clip.audio)
    except ClipDecodeError as e:
        logger.warning(f"Session {sess_id_log}: Skipping undecodable radio clip from {clip.driver}: {e}")
        return True

    session_state.set_radio_name(clip.driver)
    try:
        while player.is_playing():
            if session_state.stop_event.wait(config.RADIO_POLL_SECONDS):
                player.stop()
                break
    finally:
        session_state.set_radio_name("")
    return True


def radio_playback_loop(session_state: app_state.SessionState, player, is_muted: Callable[[], bool]):
    sess_id_log = session_state.session_id[:8]
    logger.info(f"Radio playback thread started for session: {sess_id_log}")

    while not session_state.stop_event.is_set():
        if not play_next_clip(session_state, player, is_muted):
            session_state.stop_event.wait(config.RADIO_POLL_SECONDS)

    logger.info(f"Radio playback thread finished cleanly for session: {sess_id_log}")
