# formatters.py
"""
Cell formatters for the two display surfaces, and the immutable colour theme
they draw with.

The layout code in renderer.py only ever asks for cells, styled text
fragments and rows. ``ConsoleFormatter`` turns those into ANSI true-colour
escape sequences; ``HtmlFormatter`` turns them into escaped ``<font>``
markup for the mirror's ``<pre>`` block.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from markupsafe import escape

import config

RESET = "\033[0m"
CLEAR_SCREEN = "\033[2J\033[H"

Fragment = Tuple[str, Optional[str]]


@dataclass(frozen=True)
class Theme:
    default: str
    personal_best: str
    overall_best: str
    session_best: str
    gap_closing: str
    gap_opening: str
    drs_window: str
    rain: str
    countdown: str
    out_background: str
    drop_zone_background: str
    segment_flags: Mapping[str, str]
    segment_statuses: Mapping[str, str]
    tires: Mapping[str, str]
    locations: Mapping[str, str]
    track_statuses: Mapping[str, str]
    safety_car: Mapping[str, str]
    session_statuses: Mapping[str, str]
    race_control_prefixes: Mapping[str, Tuple[Fragment, ...]]


def build_theme() -> Theme:
    """Snapshot the colour tables in config into a read-only Theme."""
    return Theme(
        default=config.COLOR_DEFAULT,
        personal_best=config.COLOR_PERSONAL_BEST,
        overall_best=config.COLOR_OVERALL_BEST,
        session_best=config.COLOR_SESSION_BEST,
        gap_closing=config.COLOR_GAP_CLOSING,
        gap_opening=config.COLOR_GAP_OPENING,
        drs_window=config.COLOR_DRS_WINDOW,
        rain=config.COLOR_RAIN,
        countdown=config.COLOR_COUNTDOWN,
        out_background=config.COLOR_OUT_BACKGROUND,
        drop_zone_background=config.COLOR_DROP_ZONE_BACKGROUND,
        segment_flags=MappingProxyType(dict(config.SEGMENT_FLAG_COLORS)),
        segment_statuses=MappingProxyType(dict(config.SEGMENT_STATUS_COLORS)),
        tires=MappingProxyType(dict(config.TIRE_COLORS)),
        locations=MappingProxyType(dict(config.LOCATION_COLORS)),
        track_statuses=MappingProxyType(dict(config.TRACK_STATUS_COLORS)),
        safety_car=MappingProxyType(dict(config.SAFETY_CAR_COLORS)),
        session_statuses=MappingProxyType(dict(config.SESSION_STATUS_COLORS)),
        race_control_prefixes=MappingProxyType({
            flag: tuple(parts) for flag, parts in config.RACE_CONTROL_PREFIXES.items()
        }),
    )


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


class CellFormatter:
    """Shared padding logic; subclasses only decide how a fragment is styled."""

    def text(self, text: str, color: Optional[str] = None, background: Optional[str] = None) -> str:
        raise NotImplementedError

    def row(self, line: str, background: Optional[str] = None) -> str:
        raise NotImplementedError

    def fragments(self, parts: Iterable[Fragment], background: Optional[str] = None) -> str:
        return "".join(self.text(text, color, background) for text, color in parts)

    def parts_cell(self, parts: Iterable[Fragment], width: int, background: Optional[str] = None) -> str:
        """Centre the styled fragments in ``width`` visible characters."""
        parts = list(parts)
        visible = sum(len(text) for text, _ in parts)
        padding = max(width - visible, 0)
        left = padding // 2
        return (self.text(" " * left, None, background)
                + self.fragments(parts, background)
                + self.text(" " * (padding - left), None, background))

    def cell(self, text: str, width: int, color: Optional[str] = None, background: Optional[str] = None) -> str:
        return self.parts_cell([(text, color)], width, background)


class ConsoleFormatter(CellFormatter):
    def text(self, text, color=None, background=None):
        if not text:
            return ""
        codes = ""
        if color:
            codes += "\033[38;2;%d;%d;%dm" % _hex_to_rgb(color)
        if background:
            codes += "\033[48;2;%d;%d;%dm" % _hex_to_rgb(background)
        if not codes:
            return text
        return f"{codes}{text}{RESET}"

    def row(self, line, background=None):
        # Cells already carry the row background
        return line


class HtmlFormatter(CellFormatter):
    def text(self, text, color=None, background=None):
        if not text:
            return ""
        if color:
            return f'<font color="{color}">{escape(text)}</font>'
        return str(escape(text))

    def row(self, line, background=None):
        if not background:
            return line
        return f'<span style="background-color: {background}">{line}</span>'
