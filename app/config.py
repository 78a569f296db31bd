# config.py
"""
Configuration constants for the F1 live timing dashboard.
"""

import os
from datetime import timedelta

# --- Core Application & Web Mirror ---
APP_TITLE = "F1 Live Timing"
# Empty host means: serve on localhost and every local IPv4 address
WEB_HOST = os.environ.get("F1DASH_HOST", "")
WEB_PORT = int(os.environ.get("F1DASH_PORT", "8000"))
WEB_MIRROR_REFRESH_MS = 1000

# --- Session Provider ---
# "package.module:callable", called as factory(live=True) and returning a SessionProvider
PROVIDER_FACTORY = os.environ.get("F1DASH_PROVIDER", "")
DEFAULT_CIRCUIT_TIMEZONE = "UTC"

# --- Session Lifecycle ---
LIVE_DELAY_SECONDS = int(os.environ.get("F1DASH_LIVE_DELAY", "0"))
THREAD_JOIN_TIMEOUT_SECONDS = 5.0

# --- Loop Cadences ---
UI_REFRESH_SECONDS = 0.5
AGGREGATOR_POLL_SECONDS = 0.05
RADIO_POLL_SECONDS = 1.0

# --- Audio Output ---
AUDIO_SAMPLE_RATE = 48000
AUDIO_CHANNELS = 2
AUDIO_CLIP_FORMAT = "mp3"

# --- Derived Statistics ---
GAP_TREND_SIZE = 10
# ms per sample; slopes beyond this colour the gap cell
GAP_TREND_ALERT_MS = 10
DRS_WINDOW = timedelta(seconds=1)

# --- Presentation ---
RC_MESSAGES_CONSOLE = 5
RC_MESSAGES_HTML = 19

# Index in the position-sorted list from which cars are in the drop zone
QUALIFYING_DROP_ZONE_INDEX = {
    "Qualifying 1": 15,
    "Qualifying 2": 10,
}

TIME_COLUMN_WIDTH = 11
SEGMENT_COLUMN_MIN_SEGMENTS = len("Segment")

RACE_COLUMNS = [
    ("position", "Pos", 5),
    ("driver", "Driver", 8),
    ("segments", "Segment", None),
    ("fastest_lap", "Fastest", TIME_COLUMN_WIDTH),
    ("gap", "Gap", TIME_COLUMN_WIDTH),
    ("sector1", "S1", TIME_COLUMN_WIDTH),
    ("sector2", "S2", TIME_COLUMN_WIDTH),
    ("sector3", "S3", TIME_COLUMN_WIDTH),
    ("last_lap", "Last Lap", TIME_COLUMN_WIDTH),
    ("drs", "DRS", 8),
    ("tire", "Tire", 10),
    ("tire_laps", "Lap", 5),
    ("pitstops", "Pitstops", 10),
    ("speed_trap", "Speed Trap", 12),
    ("location", "Location", 13),
]

QUALIFYING_COLUMNS = [
    column for column in RACE_COLUMNS if column[0] not in ("drs", "pitstops")
]

# --- Colours ---
COLOR_DEFAULT = "#FFFFFF"
COLOR_PERSONAL_BEST = "#00FF00"
COLOR_OVERALL_BEST = "#D500D5"
COLOR_SESSION_BEST = "#D500D5"
COLOR_GAP_CLOSING = "#00FF00"
COLOR_GAP_OPENING = "#FF0000"
COLOR_DRS_WINDOW = "#00FF00"
COLOR_RAIN = "#009DD3"
COLOR_COUNTDOWN = "#00FF00"
COLOR_OUT_BACKGROUND = "#4545E4"
COLOR_DROP_ZONE_BACKGROUND = "#53544E"

SEGMENT_FLAG_COLORS = {
    "Green": "#00FF00",
    "Yellow": "#FFFF00",
    "Double Yellow": "#FBFF00",
    "Red": "#FF0000",
}

SEGMENT_STATUS_COLORS = {
    "Completed": "#FFFF00",
    "Personal Best": "#00FF00",
    "Overall Best": "#D500D5",
    "Stopped": "#FF0000",
    "Pitlane": "#0000FF",
}

TIRE_COLORS = {
    "Soft": "#FF0000",
    "Medium": "#FFFF00",
    "Hard": "#FFFFFF",
    "Inter": "#00FF00",
    "Wet": "#0000FF",
    "Test": "#808080",
}

LOCATION_COLORS = {
    "Pitlane": "#FFFF00",
    "Pit Exit": "#FFA500",
    "Out Lap": "#00FFFF",
    "On Track": "#00FF00",
    "Stopped": "#FF0000",
    "Retired": "#808080",
}

TRACK_STATUS_COLORS = {
    "All Clear": "#00FF00",
    "Yellow": "#FFFF00",
    "SC Deployed": "#FFA500",
    "VSC Deployed": "#FFA500",
    "VSC Ending": "#FFFF00",
    "Red": "#FF0000",
}

SAFETY_CAR_COLORS = {
    "Clear": "#00FF00",
    "VSC Deployed": "#FFA500",
    "VSC Ending": "#FFFF00",
    "SC Deployed": "#FFA500",
    "SC Ending": "#FFFF00",
}

SESSION_STATUS_COLORS = {
    "Inactive": "#808080",
    "Started": "#00FF00",
    "Aborted": "#FF0000",
    "Finished": "#FFFFFF",
    "Finalised": "#FFFFFF",
    "Ended": "#FFFFFF",
}

# (glyph, colour) parts of the prefix shown before a race control message
RACE_CONTROL_PREFIXES = {
    "Chequered": [("🏁", None)],
    "Green": [("⚑", "#00FF00")],
    "Yellow": [("⚑", "#FFFF00")],
    "Double Yellow": [("⚑⚑", "#FFFF00")],
    "Blue": [("⚑", "#0000FF")],
    "Red": [("⚑", "#FF0000")],
    "Black And White": [("⚑", "#000000"), ("⚑", "#FFFFFF")],
}
# Messages starting with these phrases are about the start lights, not a flag
RACE_CONTROL_LIGHT_PREFIXES = {
    "Green": "GREEN LIGHT",
    "Red": "RED LIGHT",
}
GLYPH_FLAG = "⚑"
GLYPH_LIGHT = "●"
GLYPH_SEGMENT = "■"
GLYPH_CHEQUERED = "🏁"

# --- UI Constants: Text & Messages ---
TEXT_NO_LIVE_SESSION = "There is no live session currently happening."
TEXT_DELAYING_START = "Delaying start, {seconds:.1f} seconds..."
TEXT_NO_SESSION = "No session active."
TEXT_NO_TRACK_TIME = "-"
TEXT_PAUSED = "** PAUSED **"
TEXT_OUT = "Out"
TEXT_DRS_OPEN = "Open"
TEXT_DRS_CLOSED = "Closed"
TEXT_RAINING = "Raining"
TEXT_RADIO_ON = "Team Radio: On"
TEXT_RADIO_OFF = "Team Radio: Off"
TEXT_TRACK_STATUS_LABEL = "Track Status:"
TRACK_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
RACE_CONTROL_TIME_FORMAT = "%d-%m-%Y %H:%M:%S"

# --- Logging Configuration ---
LOG_FILE = os.environ.get("F1DASH_LOG_FILE", "")
LOG_LEVEL = os.environ.get("F1DASH_LOG_LEVEL", "INFO")
LOG_FORMAT_DEFAULT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
