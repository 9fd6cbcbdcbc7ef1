"""Audiogram as an ordered list of drawing commands.

Coordinates are canvas pixels with the origin at the top-left corner. The
horizontal axis is linear in the *position* of a frequency in ``FREQS`` (not
logarithmic in Hz); the vertical axis is linear in dB with low values at the
top. Backends (Qt painter, matplotlib raster) only replay the commands.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from audiometry.analysis import Derivation, derive, summary_line
from audiometry.report import DB_MAX, DB_MIN, FREQS, Report

Color = Tuple[float, float, float, float]
Point = Tuple[float, float]


def rgba(r: int, g: int, b: int, a: float = 1.0) -> Color:
    return (r / 255.0, g / 255.0, b / 255.0, a)


BACKGROUND = rgba(8, 17, 13)
PLOT_FILL = rgba(255, 255, 255, 0.02)
GRID_MAJOR = rgba(255, 255, 255, 0.20)
GRID_MINOR = rgba(255, 255, 255, 0.12)
FREQ_MAJOR = rgba(255, 255, 255, 0.16)
FREQ_MINOR = rgba(255, 255, 255, 0.10)
FRAME = rgba(255, 255, 255, 0.22)
AXIS_TEXT = rgba(233, 255, 245, 0.80)
LABEL_TEXT = rgba(233, 255, 245, 0.85)
SERIES_COLORS = {"right": rgba(255, 91, 91), "left": rgba(77, 163, 255)}

FONT_SIZE = 14
SERIES_WIDTH = 3.0
MARKER_SIZE = 9.0
DB_GRID_STEP = 10
DB_GRID_MAJOR = 20
MAJOR_FREQS = (1000, 2000, 4000, 8000)


@dataclass(frozen=True)
class Padding:
    left: float = 66
    right: float = 18
    top: float = 28
    bottom: float = 62


@dataclass(frozen=True)
class PlotGeometry:
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def for_canvas(cls, width: float, height: float, pad: Padding = Padding()) -> "PlotGeometry":
        return cls(
            x=pad.left,
            y=pad.top,
            w=max(1.0, width - pad.left - pad.right),
            h=max(1.0, height - pad.top - pad.bottom),
        )

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    w: float
    h: float
    color: Color


@dataclass(frozen=True)
class StrokeRect:
    x: float
    y: float
    w: float
    h: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class CircleMarker:
    cx: float
    cy: float
    radius: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class CrossMarker:
    cx: float
    cy: float
    half: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class Text:
    """``y`` is the text baseline; ``align`` is ``left`` or ``center``."""

    x: float
    y: float
    text: str
    size: float
    color: Color
    align: str = "left"


Command = Union[FillRect, StrokeRect, Line, Polyline, CircleMarker, CrossMarker, Text]


def idx_to_x(i: int, plot: PlotGeometry, count: int = len(FREQS)) -> float:
    t = i / (count - 1) if count > 1 else 0.0
    return plot.x + t * plot.w


def db_to_y(db: float, plot: PlotGeometry) -> float:
    t = (db - DB_MIN) / (DB_MAX - DB_MIN)
    return plot.y + t * plot.h


def freq_label(freq: int) -> str:
    if freq >= 1000:
        return f"{freq / 1000:g}k"
    return str(freq)


def grid_commands(plot: PlotGeometry, width: float, height: float) -> List[Command]:
    cmds: List[Command] = [
        FillRect(0, 0, width, height, BACKGROUND),
        FillRect(plot.x, plot.y, plot.w, plot.h, PLOT_FILL),
    ]
    for db in range(0, DB_MAX + 1, DB_GRID_STEP):
        y = db_to_y(db, plot)
        major = db % DB_GRID_MAJOR == 0
        cmds.append(Line(plot.x, y, plot.x + plot.w, y,
                         GRID_MAJOR if major else GRID_MINOR, 1.6 if major else 1.0))
        cmds.append(Text(plot.x - 36, y + 5, str(db), FONT_SIZE, AXIS_TEXT))
    for i, freq in enumerate(FREQS):
        x = idx_to_x(i, plot)
        major = freq in MAJOR_FREQS
        cmds.append(Line(x, plot.y, x, plot.bottom,
                         FREQ_MAJOR if major else FREQ_MINOR, 1.4 if major else 1.0))
        cmds.append(Text(x, plot.bottom + 24, freq_label(freq), FONT_SIZE, LABEL_TEXT, align="center"))
    cmds.append(StrokeRect(plot.x, plot.y, plot.w, plot.h, FRAME, 1.2))
    cmds.append(Text(14, 22, "dB HL", FONT_SIZE, LABEL_TEXT))
    return cmds


def series_points(readings: Dict[int, Optional[float]], plot: PlotGeometry) -> List[Point]:
    """Defined readings only, in frequency order; unset ones are skipped, not zero."""
    points: List[Point] = []
    for i, freq in enumerate(FREQS):
        value = readings.get(freq)
        if value is not None:
            points.append((idx_to_x(i, plot), db_to_y(value, plot)))
    return points


def series_commands(ear: str, readings: Dict[int, Optional[float]], plot: PlotGeometry) -> List[Command]:
    points = series_points(readings, plot)
    if not points:
        return []
    color = SERIES_COLORS[ear]
    cmds: List[Command] = [Polyline(tuple(points), color, SERIES_WIDTH)]
    for x, y in points:
        if ear == "right":
            cmds.append(CircleMarker(x, y, MARKER_SIZE, color, SERIES_WIDTH))
        else:
            cmds.append(CrossMarker(x, y, MARKER_SIZE, color, SERIES_WIDTH))
    return cmds


def build_audiogram(
    report: Report,
    width: float,
    height: float,
    derivation: Optional[Derivation] = None,
    pad: Padding = Padding(),
) -> List[Command]:
    """Full redraw for a canvas of ``width`` x ``height``; same input, same commands."""
    plot = PlotGeometry.for_canvas(width, height, pad)
    derivation = derivation or derive(report)
    cmds = grid_commands(plot, width, height)
    cmds.extend(series_commands("right", report.right, plot))
    cmds.extend(series_commands("left", report.left, plot))
    cmds.append(Text(14, height - 12, summary_line(derivation), FONT_SIZE, LABEL_TEXT))
    return cmds


def commands_of(cmds: Sequence[Command], kind: type) -> List[Command]:
    return [c for c in cmds if isinstance(c, kind)]
