from __future__ import annotations
from typing import Sequence
import io

from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle

from plotting.audiogram import (
    CircleMarker,
    Command,
    CrossMarker,
    FillRect,
    Line,
    Polyline,
    StrokeRect,
    Text,
)


def render_figure(cmds: Sequence[Command], width: int, height: int, dpi: int = 100) -> Figure:
    """Replay drawing commands on a matplotlib figure sized 1 data unit = 1 pixel."""
    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.axis('off')
    pt = 72.0 / dpi  # pixel line widths and font sizes -> points

    # explicit zorder keeps the command order across artist types
    for z, cmd in enumerate(cmds):
        if isinstance(cmd, FillRect):
            ax.add_patch(Rectangle((cmd.x, cmd.y), cmd.w, cmd.h, facecolor=cmd.color,
                                   edgecolor='none', linewidth=0, zorder=z))
        elif isinstance(cmd, StrokeRect):
            ax.add_patch(Rectangle((cmd.x, cmd.y), cmd.w, cmd.h, fill=False, edgecolor=cmd.color,
                                   linewidth=cmd.width * pt, zorder=z))
        elif isinstance(cmd, Line):
            ax.plot([cmd.x1, cmd.x2], [cmd.y1, cmd.y2], color=cmd.color,
                    linewidth=cmd.width * pt, solid_capstyle='butt', zorder=z)
        elif isinstance(cmd, Polyline):
            xs = [p[0] for p in cmd.points]
            ys = [p[1] for p in cmd.points]
            ax.plot(xs, ys, color=cmd.color, linewidth=cmd.width * pt,
                    solid_joinstyle='round', zorder=z)
        elif isinstance(cmd, CircleMarker):
            ax.add_patch(Circle((cmd.cx, cmd.cy), cmd.radius, fill=False, edgecolor=cmd.color,
                                linewidth=cmd.width * pt, zorder=z))
        elif isinstance(cmd, CrossMarker):
            h = cmd.half
            for x1, y1, x2, y2 in ((-h, -h, h, h), (h, -h, -h, h)):
                ax.plot([cmd.cx + x1, cmd.cx + x2], [cmd.cy + y1, cmd.cy + y2], color=cmd.color,
                        linewidth=cmd.width * pt, zorder=z)
        elif isinstance(cmd, Text):
            ax.text(cmd.x, cmd.y, cmd.text, fontsize=cmd.size * pt, color=cmd.color,
                    ha=cmd.align, va='baseline', zorder=z)
    return fig


def render_png(cmds: Sequence[Command], width: int, height: int, dpi: int = 100) -> bytes:
    fig = render_figure(cmds, width, height, dpi=dpi)
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=dpi)
    return buf.getvalue()
