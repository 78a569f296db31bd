# messages.py
"""
Typed messages delivered by a session provider on its six streams
(Timing, Event, Clock, RaceControlMessages, Radio, Weather), plus the
enumerations they carry.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional


class SessionType(Enum):
    UNKNOWN = "Unknown"
    PRACTICE_1 = "Practice 1"
    PRACTICE_2 = "Practice 2"
    PRACTICE_3 = "Practice 3"
    QUALIFYING = "Qualifying"
    SPRINT_QUALIFYING = "Sprint Qualifying"
    SPRINT = "Sprint"
    RACE = "Race"
    PRE_SEASON = "Pre-Season Test"

    @property
    def is_race(self) -> bool:
        """Race and Sprint sessions share the race layout and gap trends."""
        return self in (SessionType.RACE, SessionType.SPRINT)


class EventType(Enum):
    UNKNOWN = "Unknown"
    PRACTICE_1 = "Practice 1"
    PRACTICE_2 = "Practice 2"
    PRACTICE_3 = "Practice 3"
    QUALIFYING_1 = "Qualifying 1"
    QUALIFYING_2 = "Qualifying 2"
    QUALIFYING_3 = "Qualifying 3"
    SPRINT_QUALIFYING_1 = "Sprint Qualifying 1"
    SPRINT_QUALIFYING_2 = "Sprint Qualifying 2"
    SPRINT_QUALIFYING_3 = "Sprint Qualifying 3"
    SPRINT = "Sprint"
    RACE = "Race"


class SessionStatus(Enum):
    INACTIVE = "Inactive"
    STARTED = "Started"
    ABORTED = "Aborted"
    FINISHED = "Finished"
    FINALISED = "Finalised"
    ENDED = "Ended"


class TrackStatus(Enum):
    UNKNOWN = "Unknown"
    ALL_CLEAR = "All Clear"
    YELLOW = "Yellow"
    SC_DEPLOYED = "SC Deployed"
    VSC_DEPLOYED = "VSC Deployed"
    VSC_ENDING = "VSC Ending"
    RED = "Red"


class SafetyCarState(Enum):
    CLEAR = "Clear"
    VSC_DEPLOYED = "VSC Deployed"
    VSC_ENDING = "VSC Ending"
    SC_DEPLOYED = "SC Deployed"
    SC_ENDING = "SC Ending"


class SegmentFlag(Enum):
    """Flag currently shown in a marshal segment of the track."""
    NONE = "None"
    GREEN = "Green"
    YELLOW = "Yellow"
    DOUBLE_YELLOW = "Double Yellow"
    RED = "Red"


class SegmentStatus(Enum):
    """Result of a car's pass through one mini-sector."""
    NONE = "None"
    COMPLETED = "Completed"
    PERSONAL_BEST = "Personal Best"
    OVERALL_BEST = "Overall Best"
    STOPPED = "Stopped"
    PITLANE = "Pitlane"


class CarLocation(Enum):
    NO_LOCATION = ""
    PITLANE = "Pitlane"
    PIT_OUT = "Pit Exit"
    OUT_LAP = "Out Lap"
    ON_TRACK = "On Track"
    STOPPED = "Stopped"
    RETIRED = "Retired"


class TireCompound(Enum):
    UNKNOWN = ""
    SOFT = "Soft"
    MEDIUM = "Medium"
    HARD = "Hard"
    INTERMEDIATE = "Inter"
    WET = "Wet"
    TEST = "Test"


class RaceControlFlag(Enum):
    NONE = "None"
    CHEQUERED = "Chequered"
    GREEN = "Green"
    YELLOW = "Yellow"
    DOUBLE_YELLOW = "Double Yellow"
    BLUE = "Blue"
    RED = "Red"
    BLACK_AND_WHITE = "Black And White"
    CLEAR = "Clear"


@dataclass
class SplitTime:
    """A sector or lap time with its personal/overall fastest markers."""
    time: timedelta = timedelta(0)
    personal_fastest: bool = False
    overall_fastest: bool = False


def _three_sectors() -> List[SplitTime]:
    return [SplitTime(), SplitTime(), SplitTime()]


@dataclass
class Timing:
    number: int
    position: int = 0
    short_name: str = ""
    color: str = "#FFFFFF"
    segments: List[SegmentStatus] = field(default_factory=list)
    fastest_lap: timedelta = timedelta(0)
    overall_fastest_lap: bool = False
    gap_to_leader: timedelta = timedelta(0)
    time_diff_to_position_ahead: timedelta = timedelta(0)
    time_diff_to_fastest: timedelta = timedelta(0)
    sectors: List[SplitTime] = field(default_factory=_three_sectors)
    last_lap: SplitTime = field(default_factory=SplitTime)
    drs_open: bool = False
    tire: TireCompound = TireCompound.UNKNOWN
    laps_on_tire: int = 0
    pitstops: int = 0
    speed_trap: int = 0
    speed_trap_personal_fastest: bool = False
    speed_trap_overall_fastest: bool = False
    location: CarLocation = CarLocation.NO_LOCATION
    chequered_flag: bool = False
    knocked_out_of_qualifying: bool = False


@dataclass
class Event:
    type: EventType = EventType.UNKNOWN
    status: SessionStatus = SessionStatus.INACTIVE
    track_status: TrackStatus = TrackStatus.UNKNOWN
    drs_enabled: bool = False
    safety_car: SafetyCarState = SafetyCarState.CLEAR
    current_lap: int = 0
    total_laps: int = 0
    total_segments: int = 0
    sector1_segments: int = 0
    sector2_segments: int = 0
    sector3_segments: int = 0
    segment_flags: List[SegmentFlag] = field(default_factory=list)


@dataclass
class Clock:
    timestamp: Optional[datetime] = None
    remaining: timedelta = timedelta(0)


@dataclass
class RaceControlMessage:
    timestamp: datetime
    flag: RaceControlFlag = RaceControlFlag.NONE
    message: str = ""


@dataclass
class Radio:
    driver: str
    audio: bytes = b""
    timestamp: Optional[datetime] = None


@dataclass
class Weather:
    air_temp: float = 0.0
    track_temp: float = 0.0
    rainfall: bool = False
