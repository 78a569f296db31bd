# renderer.py
"""
Layout of the timing screen.

``render_view`` is a pure function of a ``RenderSnapshot`` and the view
options. The same traversal produces the console text and the HTML mirror;
only the ``CellFormatter`` passed in differs.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytz

import config
from formatters import CellFormatter, Theme
from messages import (CarLocation, Clock, Event, RaceControlMessage, SegmentFlag, SegmentStatus,
                      SessionType, SplitTime, Timing, TireCompound, Weather)
from session_stats import SessionBests


@dataclass
class ViewOptions:
    muted: bool = False
    gap_to_car_ahead: bool = False
    max_messages: int = config.RC_MESSAGES_CONSOLE


@dataclass
class RenderSnapshot:
    """Everything one render pass reads, copied out of the shared state."""
    session_type: SessionType = SessionType.UNKNOWN
    name: str = ""
    timezone: pytz.BaseTzInfo = pytz.utc
    session_start: Optional[datetime] = None
    paused: bool = False
    timing: List[Timing] = field(default_factory=list)
    event: Event = field(default_factory=Event)
    clock: Clock = field(default_factory=Clock)
    race_control: List[RaceControlMessage] = field(default_factory=list)
    weather: Weather = field(default_factory=Weather)
    gap_slopes: Dict[int, int] = field(default_factory=dict)
    bests: SessionBests = field(default_factory=SessionBests)
    radio_name: str = ""


# --- Value formatting ---

def fmt_duration(value: timedelta) -> str:
    """Lap/sector style duration: ``m:ss.fff`` or ``s.fff``; zero renders empty."""
    if value == timedelta(0):
        return ""
    sign = "-" if value < timedelta(0) else ""
    total_ms = abs(value) // timedelta(milliseconds=1)
    minutes, remainder = divmod(total_ms, 60_000)
    seconds, millis = divmod(remainder, 1000)
    if minutes:
        return f"{sign}{minutes}:{seconds:02d}.{millis:03d}"
    return f"{sign}{seconds}.{millis:03d}"


def fmt_clock(value: timedelta) -> str:
    """Whole-second ``H:MM:SS``."""
    total = max(int(value.total_seconds()), 0)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value


def _local_time(value: datetime, timezone: pytz.BaseTzInfo) -> datetime:
    return _as_utc(value).astimezone(timezone)


def _split_color(split: SplitTime, theme: Theme) -> str:
    if split.overall_fastest:
        return theme.overall_best
    if split.personal_fastest:
        return theme.personal_best
    return theme.default


def _columns_for(session_type: SessionType):
    return config.RACE_COLUMNS if session_type.is_race else config.QUALIFYING_COLUMNS


def _segment_slots(event: Event) -> int:
    return max(event.total_segments, 0)


def _column_widths(snapshot: RenderSnapshot) -> Dict[str, int]:
    widths = {}
    for key, title, width in _columns_for(snapshot.session_type):
        if width is None:
            # Room for every segment plus the two sector separators
            width = max(_segment_slots(snapshot.event) + 2, config.SEGMENT_COLUMN_MIN_SEGMENTS) + 2
        widths[key] = width
    return widths


# --- Line builders ---

def _title_line(snapshot: RenderSnapshot, fmt: CellFormatter, theme: Theme) -> str:
    event = snapshot.event
    clock = snapshot.clock
    if clock.timestamp is not None:
        track_time = _local_time(clock.timestamp, snapshot.timezone).strftime(config.TRACK_TIME_FORMAT)
    else:
        track_time = config.TEXT_NO_TRACK_TIME

    parts = [
        (f"{snapshot.name}: {event.type.value}, Track Time: {track_time}, "
         f"Remaining: {fmt_clock(clock.remaining)}, ", None),
    ]
    drs = "Enabled" if event.drs_enabled else "Disabled"
    if snapshot.session_type.is_race:
        parts += [
            ("Track Status: ", None),
            (event.track_status.value, theme.track_statuses.get(event.track_status.value)),
            (f", DRS: {drs}, Safety Car: ", None),
            (event.safety_car.value, theme.safety_car.get(event.safety_car.value)),
            (f", Lap: {event.current_lap}/{event.total_laps} ", None),
        ]
    else:
        parts += [
            ("Status: ", None),
            (event.status.value, theme.session_statuses.get(event.status.value)),
            (f", DRS: {drs} ", None),
        ]
    parts.append((config.GLYPH_FLAG, theme.track_statuses.get(event.track_status.value, theme.default)))
    return fmt.fragments(parts)


def _header_line(snapshot: RenderSnapshot, fmt: CellFormatter, widths: Dict[str, int]) -> str:
    return "".join(fmt.cell(title, widths[key]) for key, title, _ in _columns_for(snapshot.session_type))


def _separator(widths: Dict[str, int]) -> str:
    return "-" * sum(widths.values())


def _sector_boundaries(event: Event):
    """Segment counts after which a ``|`` marks the end of sector 1 and sector 2."""
    return {event.sector1_segments, event.sector1_segments + event.sector2_segments} - {0}


def _segment_strip(glyph_colors: List[Optional[str]], event: Event):
    """One segment glyph per entry (blank for None) with sector separators between them."""
    boundaries = _sector_boundaries(event)
    parts = []
    for index, color in enumerate(glyph_colors):
        parts.append((" ", None) if color is None else (config.GLYPH_SEGMENT, color))
        if index + 1 in boundaries and index + 1 < len(glyph_colors):
            parts.append(("|", None))
    return parts


def _segment_parts(car: Timing, event: Event, theme: Theme):
    return _segment_strip(
        [None if status == SegmentStatus.NONE else theme.segment_statuses.get(status.value, theme.default)
         for status in car.segments],
        event)


def _gap_cell(car: Timing, snapshot: RenderSnapshot, options: ViewOptions, theme: Theme):
    if not snapshot.session_type.is_race:
        gap = car.time_diff_to_position_ahead if options.gap_to_car_ahead else car.time_diff_to_fastest
        return fmt_duration(gap), None
    gap = car.time_diff_to_position_ahead if options.gap_to_car_ahead else car.gap_to_leader
    slope = snapshot.gap_slopes.get(car.number, 0)
    color = None
    if slope > config.GAP_TREND_ALERT_MS:
        color = theme.gap_opening
    elif slope < -config.GAP_TREND_ALERT_MS:
        color = theme.gap_closing
    return fmt_duration(gap), color


def _car_cells(car: Timing, snapshot: RenderSnapshot, options: ViewOptions, theme: Theme) -> Dict[str, list]:
    """Styled fragments for every column of one car, keyed by column."""
    gap_text, gap_color = _gap_cell(car, snapshot, options, theme)
    drs_color = None
    if timedelta(0) < car.time_diff_to_position_ahead < config.DRS_WINDOW:
        drs_color = theme.drs_window
    if car.speed_trap_overall_fastest:
        speed_color = theme.overall_best
    elif car.speed_trap_personal_fastest:
        speed_color = theme.personal_best
    else:
        speed_color = None

    return {
        "position": [(str(car.position), None)],
        "driver": [(car.short_name, car.color)],
        "segments": _segment_parts(car, snapshot.event, theme),
        "fastest_lap": [(fmt_duration(car.fastest_lap), theme.overall_best if car.overall_fastest_lap else None)],
        "gap": [(gap_text, gap_color)],
        "sector1": [(fmt_duration(car.sectors[0].time), _split_color(car.sectors[0], theme))],
        "sector2": [(fmt_duration(car.sectors[1].time), _split_color(car.sectors[1], theme))],
        "sector3": [(fmt_duration(car.sectors[2].time), _split_color(car.sectors[2], theme))],
        "last_lap": [(fmt_duration(car.last_lap.time), _split_color(car.last_lap, theme))],
        "drs": [(config.TEXT_DRS_OPEN if car.drs_open else config.TEXT_DRS_CLOSED, drs_color)],
        "tire": [(car.tire.value, theme.tires.get(car.tire.value))],
        "tire_laps": [(str(car.laps_on_tire) if car.tire != TireCompound.UNKNOWN else "", None)],
        "pitstops": [(str(car.pitstops), None)],
        "speed_trap": [(str(car.speed_trap) if car.speed_trap > 0 else "", speed_color)],
        "location": [(car.location.value, theme.locations.get(car.location.value))],
    }


def _driver_line(car: Timing, index: int, snapshot: RenderSnapshot, fmt: CellFormatter,
                 options: ViewOptions, theme: Theme, widths: Dict[str, int]) -> str:
    cells = _car_cells(car, snapshot, options, theme)
    background = None

    if snapshot.session_type.is_race:
        if car.location == CarLocation.STOPPED:
            kept = ("position", "driver", "fastest_lap", "location")
            cells = {key: (parts if key in kept else []) for key, parts in cells.items()}
    else:
        if car.knocked_out_of_qualifying:
            kept = ("position", "driver", "fastest_lap")
            cells = {key: (parts if key in kept else []) for key, parts in cells.items()}
            cells["location"] = [(config.TEXT_OUT, None)]
            background = theme.out_background
        else:
            cutoff = config.QUALIFYING_DROP_ZONE_INDEX.get(snapshot.event.type.value)
            if cutoff is not None and index >= cutoff:
                background = theme.drop_zone_background

    line = "".join(
        fmt.parts_cell(cells[key], widths[key], background)
        for key, _, _ in _columns_for(snapshot.session_type)
    )
    if car.chequered_flag:
        line += fmt.text(" " + config.GLYPH_CHEQUERED, None, background)
    return fmt.row(line, background)


def _track_status_line(snapshot: RenderSnapshot, fmt: CellFormatter, theme: Theme,
                       widths: Dict[str, int]) -> str:
    event = snapshot.event
    bests = snapshot.bests

    segment_parts = _segment_strip(
        [None if flag == SegmentFlag.NONE else theme.segment_flags.get(flag.value, theme.default)
         for flag in event.segment_flags],
        event)

    best_cells = {
        "segments": segment_parts,
        "sector1": [(fmt_duration(bests.sector1), theme.session_best)],
        "sector2": [(fmt_duration(bests.sector2), theme.session_best)],
        "sector3": [(fmt_duration(bests.sector3), theme.session_best)],
        "last_lap": [(fmt_duration(bests.theoretical_lap), theme.session_best)],
        "speed_trap": [(str(bests.speed_trap) if bests.speed_trap > 0 else "", theme.session_best)],
    }

    line = fmt.cell(config.TEXT_TRACK_STATUS_LABEL, widths["position"] + widths["driver"])
    for key, _, _ in _columns_for(snapshot.session_type):
        if key in ("position", "driver"):
            continue
        line += fmt.parts_cell(best_cells.get(key, []), widths[key])
    return line


def _race_control_prefix(message: RaceControlMessage, theme: Theme):
    flag = message.flag.value
    light_phrase = config.RACE_CONTROL_LIGHT_PREFIXES.get(flag)
    if light_phrase and message.message.upper().startswith(light_phrase):
        color = theme.race_control_prefixes[flag][0][1]
        return [(config.GLYPH_LIGHT, color), (" ", None)]
    parts = theme.race_control_prefixes.get(flag)
    if not parts:
        return []
    return list(parts) + [(" ", None)]


def _race_control_lines(snapshot: RenderSnapshot, fmt: CellFormatter, options: ViewOptions,
                        theme: Theme) -> List[str]:
    lines = []
    for message in snapshot.race_control[:options.max_messages]:
        stamp = _local_time(message.timestamp, snapshot.timezone).strftime(config.RACE_CONTROL_TIME_FORMAT)
        parts = [(f"{stamp} - ", None)] + _race_control_prefix(message, theme) + [(message.message, None)]
        lines.append(fmt.fragments(parts))
    return lines


def _countdown(snapshot: RenderSnapshot) -> Optional[timedelta]:
    clock = snapshot.clock
    if not snapshot.session_type.is_race or snapshot.session_start is None:
        return None
    if clock.remaining != timedelta(0) or clock.timestamp is None:
        return None
    remaining = _as_utc(snapshot.session_start) - _as_utc(clock.timestamp)
    if remaining <= timedelta(0):
        return None
    return remaining


def _status_line(snapshot: RenderSnapshot, fmt: CellFormatter, options: ViewOptions, theme: Theme) -> str:
    weather = snapshot.weather
    parts = [(f"Air Temp: {weather.air_temp:.2f}°C, Track Temp: {weather.track_temp:.2f}°C", None)]
    if weather.rainfall:
        parts += [(", ", None), (config.TEXT_RAINING, theme.rain)]
    parts.append((", " + (config.TEXT_RADIO_OFF if options.muted else config.TEXT_RADIO_ON), None))
    if snapshot.radio_name:
        parts.append((f", Radio: {snapshot.radio_name}", None))
    countdown = _countdown(snapshot)
    if countdown is not None:
        parts += [(", ", None), (f"Session Starts in: {fmt_clock(countdown)}", theme.countdown)]
    if snapshot.paused:
        parts.append((", " + config.TEXT_PAUSED, None))
    return fmt.fragments(parts)


def render_view(snapshot: RenderSnapshot, fmt: CellFormatter, options: ViewOptions, theme: Theme) -> str:
    """Render the whole screen. Total over an empty snapshot."""
    widths = _column_widths(snapshot)
    separator = _separator(widths)

    lines = [
        _title_line(snapshot, fmt, theme),
        "",
        _header_line(snapshot, fmt, widths),
        separator,
    ]
    for index, car in enumerate(snapshot.timing):
        lines.append(_driver_line(car, index, snapshot, fmt, options, theme, widths))

    lines.append(separator)
    lines.append(_track_status_line(snapshot, fmt, theme, widths))
    lines.append(separator)
    lines.extend(_race_control_lines(snapshot, fmt, options, theme))
    lines.append(separator)
    lines.append(_status_line(snapshot, fmt, options, theme))
    return "\n".join(lines) + "\n"
