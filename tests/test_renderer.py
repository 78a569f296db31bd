from datetime import datetime, timedelta

import pytest
import pytz

import config
from conftest import make_timing
from formatters import ConsoleFormatter, HtmlFormatter, build_theme
from messages import (CarLocation, Clock, Event, EventType, RaceControlFlag, RaceControlMessage, SegmentStatus,
                      SessionType, SplitTime, Weather)
from renderer import RenderSnapshot, ViewOptions, _segment_parts, fmt_clock, fmt_duration, render_view


@pytest.fixture
def theme():
    return build_theme()


def _race_snapshot(**overrides) -> RenderSnapshot:
    snapshot = RenderSnapshot(
        session_type=SessionType.RACE,
        name="Monaco Grand Prix",
        timezone=pytz.timezone("Europe/Monaco"),
        session_start=datetime(2024, 5, 26, 13, 0),
        event=Event(type=EventType.RACE, total_segments=20, sector1_segments=7, sector2_segments=6),
    )
    for name, value in overrides.items():
        setattr(snapshot, name, value)
    return snapshot


def test_fmt_duration() -> None:
    assert fmt_duration(timedelta(0)) == ""
    assert fmt_duration(timedelta(seconds=91.5)) == "1:31.500"
    assert fmt_duration(timedelta(seconds=5.123)) == "5.123"
    assert fmt_duration(timedelta(seconds=-0.25)) == "-0.250"


def test_fmt_clock() -> None:
    assert fmt_clock(timedelta(hours=1, minutes=2, seconds=3)) == "1:02:03"
    assert fmt_clock(timedelta(0)) == "0:00:00"


def test_empty_snapshot_renders_without_rows(theme) -> None:
    output = render_view(RenderSnapshot(), ConsoleFormatter(), ViewOptions(), theme)
    lines = output.splitlines()
    separator = lines[3]

    assert set(separator) == {"-"}
    assert lines[4] == separator
    assert lines[-1].startswith("Air Temp: 0.00°C, Track Temp: 0.00°C")
    assert config.TEXT_NO_TRACK_TIME in lines[0]


def test_header_and_separator_share_width(theme) -> None:
    lines = render_view(_race_snapshot(), ConsoleFormatter(), ViewOptions(), theme).splitlines()

    assert len(lines[2]) == len(lines[3])
    assert "Pitstops" in lines[2]


def test_qualifying_header_has_no_race_only_columns(theme) -> None:
    snapshot = _race_snapshot(session_type=SessionType.QUALIFYING)
    header = render_view(snapshot, ConsoleFormatter(), ViewOptions(), theme).splitlines()[2]

    assert "DRS" not in header
    assert "Pitstops" not in header


def test_rows_follow_position_order(theme) -> None:
    cars = [make_timing(1, 1, short_name="VER"), make_timing(16, 2, short_name="LEC")]
    output = render_view(_race_snapshot(timing=cars), HtmlFormatter(), ViewOptions(), theme)

    assert output.index("VER") < output.index("LEC")


def test_stopped_car_keeps_position_name_fastest_lap_and_location(theme) -> None:
    car = make_timing(
        20, 5, short_name="MAG", sectors=(30.5, 0, 0), fastest_lap=timedelta(seconds=91),
        location=CarLocation.STOPPED, pitstops=1)
    output = render_view(_race_snapshot(timing=[car]), HtmlFormatter(), ViewOptions(), theme)
    row = next(line for line in output.splitlines() if "MAG" in line)

    assert row.lstrip().startswith("5 ")
    assert "1:31.000" in output
    assert "Stopped" in output
    assert "30.500" not in output
    assert config.TEXT_DRS_CLOSED not in output


def test_gap_colour_follows_trend(theme) -> None:
    opening = make_timing(16, 2, short_name="LEC", time_diff_to_position_ahead=timedelta(seconds=1.2))
    closing = make_timing(55, 3, short_name="SAI", time_diff_to_position_ahead=timedelta(seconds=2.4))
    snapshot = _race_snapshot(timing=[opening, closing], gap_slopes={16: 50, 55: -50})

    output = render_view(snapshot, HtmlFormatter(), ViewOptions(gap_to_car_ahead=True), theme)

    assert f'<font color="{config.COLOR_GAP_OPENING}">1.200</font>' in output
    assert f'<font color="{config.COLOR_GAP_CLOSING}">2.400</font>' in output


def test_gap_to_leader_coloured_by_trend(theme) -> None:
    car = make_timing(16, 2, short_name="LEC", gap_to_leader=timedelta(seconds=12.5))
    snapshot = _race_snapshot(timing=[car], gap_slopes={16: 50})

    output = render_view(snapshot, HtmlFormatter(), ViewOptions(), theme)

    assert f'<font color="{config.COLOR_GAP_OPENING}">12.500</font>' in output


def test_gap_to_leader_mode(theme) -> None:
    car = make_timing(16, 2, gap_to_leader=timedelta(seconds=12.5), time_diff_to_position_ahead=timedelta(seconds=3))
    output = render_view(_race_snapshot(timing=[car]), HtmlFormatter(), ViewOptions(), theme)

    assert "12.500" in output
    assert "3.000" not in output


@pytest.mark.parametrize("gap_to_car_ahead, shown, hidden", [(False, "0.500", "0.123"), (True, "0.123", "0.500")])
def test_qualifying_gap_toggle(theme, gap_to_car_ahead, shown, hidden) -> None:
    car = make_timing(4, 3, time_diff_to_fastest=timedelta(seconds=0.5),
                      time_diff_to_position_ahead=timedelta(milliseconds=123))
    snapshot = _race_snapshot(session_type=SessionType.QUALIFYING, event=Event(type=EventType.QUALIFYING_1),
                              timing=[car])

    output = render_view(snapshot, HtmlFormatter(), ViewOptions(gap_to_car_ahead=gap_to_car_ahead), theme)

    assert shown in output
    assert hidden not in output


def test_car_segments_carry_sector_separators(theme) -> None:
    car = make_timing(1, 1, segments=[SegmentStatus.COMPLETED] * 20)
    parts = _segment_parts(car, _race_snapshot().event, theme)

    glyph = config.GLYPH_SEGMENT
    assert "".join(text for text, _ in parts) == glyph * 7 + "|" + glyph * 6 + "|" + glyph * 7


def test_drs_window_highlight(theme) -> None:
    car = make_timing(16, 2, time_diff_to_position_ahead=timedelta(seconds=0.6))
    output = render_view(_race_snapshot(timing=[car]), HtmlFormatter(), ViewOptions(), theme)

    assert f'<font color="{config.COLOR_DRS_WINDOW}">{config.TEXT_DRS_CLOSED}</font>' in output


def test_sector_colours(theme) -> None:
    car = make_timing(1, 1)
    car.sectors = [
        SplitTime(timedelta(seconds=20.1), personal_fastest=True),
        SplitTime(timedelta(seconds=35.2), personal_fastest=True, overall_fastest=True),
        SplitTime(timedelta(seconds=19.3)),
    ]
    output = render_view(_race_snapshot(timing=[car]), HtmlFormatter(), ViewOptions(), theme)

    assert f'<font color="{config.COLOR_PERSONAL_BEST}">20.100</font>' in output
    assert f'<font color="{config.COLOR_OVERALL_BEST}">35.200</font>' in output
    assert f'<font color="{config.COLOR_DEFAULT}">19.300</font>' in output


def test_qualifying_drop_zone_by_sorted_index(theme) -> None:
    cars = [make_timing(number, number) for number in range(1, 17)]
    snapshot = _race_snapshot(
        session_type=SessionType.QUALIFYING,
        event=Event(type=EventType.QUALIFYING_1),
        timing=cars,
    )

    output = render_view(snapshot, HtmlFormatter(), ViewOptions(), theme)

    assert output.count(f"background-color: {config.COLOR_DROP_ZONE_BACKGROUND}") == 1
    assert output.index("D16") > output.index(f"background-color: {config.COLOR_DROP_ZONE_BACKGROUND}")


def test_knocked_out_car_renders_out_row(theme) -> None:
    car = make_timing(2, 17, short_name="SAR", sectors=(30.1, 0, 0), knocked_out_of_qualifying=True)
    snapshot = _race_snapshot(session_type=SessionType.QUALIFYING, event=Event(type=EventType.QUALIFYING_2),
                              timing=[car])

    output = render_view(snapshot, HtmlFormatter(), ViewOptions(), theme)

    assert f"background-color: {config.COLOR_OUT_BACKGROUND}" in output
    assert config.TEXT_OUT in output
    row = next(line for line in output.splitlines() if "SAR" in line)
    assert row.replace("</span>", "").rstrip().endswith(config.TEXT_OUT)
    assert "30.100" not in output
    assert config.COLOR_DROP_ZONE_BACKGROUND not in output


def test_race_control_counts_and_order(theme) -> None:
    base = datetime(2024, 5, 26, 13, 0)
    messages = [RaceControlMessage(base + timedelta(minutes=index), message=f"MSG {index:02d}")
                for index in reversed(range(25))]
    snapshot = _race_snapshot(race_control=messages)

    console = render_view(snapshot, ConsoleFormatter(), ViewOptions(max_messages=config.RC_MESSAGES_CONSOLE), theme)
    html = render_view(snapshot, HtmlFormatter(), ViewOptions(max_messages=config.RC_MESSAGES_HTML), theme)

    assert "MSG 20" in console and "MSG 19" not in console
    assert console.index("MSG 24") < console.index("MSG 20")
    assert "MSG 06" in html and "MSG 05" not in html


def test_race_control_timestamp_in_circuit_timezone(theme) -> None:
    message = RaceControlMessage(datetime(2024, 5, 26, 13, 3, 4), message="DRS ENABLED")
    output = render_view(_race_snapshot(race_control=[message]), ConsoleFormatter(), ViewOptions(), theme)

    assert "26-05-2024 15:03:04 - DRS ENABLED" in output


def test_race_control_prefixes(theme) -> None:
    stamp = datetime(2024, 5, 26, 13, 0)
    messages = [
        RaceControlMessage(stamp, RaceControlFlag.GREEN, "GREEN LIGHT - PIT EXIT OPEN"),
        RaceControlMessage(stamp, RaceControlFlag.DOUBLE_YELLOW, "DOUBLE YELLOW IN TRACK SECTOR 4"),
        RaceControlMessage(stamp, RaceControlFlag.CHEQUERED, "CHEQUERED FLAG"),
    ]
    output = render_view(_race_snapshot(race_control=messages), HtmlFormatter(),
                         ViewOptions(max_messages=19), theme)

    assert f'<font color="#00FF00">{config.GLYPH_LIGHT}</font> GREEN LIGHT' in output
    assert f'<font color="#FFFF00">⚑⚑</font> DOUBLE YELLOW' in output
    assert f"{config.GLYPH_CHEQUERED} CHEQUERED FLAG" in output


def test_status_line_details(theme) -> None:
    snapshot = _race_snapshot(
        weather=Weather(air_temp=21.457, track_temp=38.2, rainfall=True),
        radio_name="HAM",
        paused=True,
    )
    status = render_view(snapshot, ConsoleFormatter(), ViewOptions(muted=True), theme).splitlines()[-1]

    assert status.startswith("Air Temp: 21.46°C, Track Temp: 38.20°C")
    assert config.TEXT_RAINING in status
    assert config.TEXT_RADIO_OFF in status
    assert "Radio: HAM" in status
    assert config.TEXT_PAUSED in status


def test_countdown_before_race_start(theme) -> None:
    clock = Clock(timestamp=datetime(2024, 5, 26, 12, 50), remaining=timedelta(0))
    output = render_view(_race_snapshot(clock=clock), ConsoleFormatter(), ViewOptions(), theme)

    assert "Session Starts in: 0:10:00" in output


def test_no_countdown_once_clock_runs(theme) -> None:
    clock = Clock(timestamp=datetime(2024, 5, 26, 12, 50), remaining=timedelta(hours=2))
    output = render_view(_race_snapshot(clock=clock), ConsoleFormatter(), ViewOptions(), theme)

    assert "Session Starts in" not in output


def test_html_escapes_text(theme) -> None:
    car = make_timing(1, 1, short_name="<A&B>")
    output = render_view(_race_snapshot(timing=[car]), HtmlFormatter(), ViewOptions(), theme)

    assert "&lt;A&amp;B&gt;" in output
    assert "<A&B>" not in output


def test_console_and_html_carry_same_text(theme) -> None:
    car = make_timing(44, 1, short_name="HAM", fastest_lap=timedelta(seconds=74.321))
    snapshot = _race_snapshot(timing=[car])

    console = render_view(snapshot, ConsoleFormatter(), ViewOptions(), theme)
    html = render_view(snapshot, HtmlFormatter(), ViewOptions(), theme)

    for text in ("HAM", "1:14.321", "Track Status:"):
        assert text in console
        assert text in html
