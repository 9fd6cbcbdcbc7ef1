from __future__ import annotations
from typing import Callable, List, Optional

from PySide6.QtCore import QPointF, QRectF, QSize, Qt
from PySide6.QtGui import QColor, QFont, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QSizePolicy, QWidget

from plotting.audiogram import (
    CircleMarker,
    Color,
    Command,
    CrossMarker,
    FillRect,
    Line,
    Polyline,
    StrokeRect,
    Text,
)

CommandSource = Callable[[float, float], List[Command]]


def _qcolor(color: Color) -> QColor:
    return QColor.fromRgbF(*color)


class AudiogramView(QWidget):
    """Replays the audiogram drawing commands on every paint, resizes included."""

    def __init__(self, source: CommandSource, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._source = source
        self.setMinimumSize(480, 260)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def sizeHint(self) -> QSize:
        return QSize(1050, 450)

    def refresh(self) -> None:
        # deferred to the next paint
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        try:
            for cmd in self._source(float(self.width()), float(self.height())):
                self._paint(painter, cmd)
        finally:
            painter.end()

    def _pen(self, color: Color, width: float) -> QPen:
        pen = QPen(_qcolor(color))
        pen.setWidthF(width)
        return pen

    def _paint(self, painter: QPainter, cmd: Command) -> None:
        if isinstance(cmd, FillRect):
            painter.fillRect(QRectF(cmd.x, cmd.y, cmd.w, cmd.h), _qcolor(cmd.color))
        elif isinstance(cmd, StrokeRect):
            painter.setPen(self._pen(cmd.color, cmd.width))
            painter.setBrush(Qt.NoBrush)
            painter.drawRect(QRectF(cmd.x, cmd.y, cmd.w, cmd.h))
        elif isinstance(cmd, Line):
            painter.setPen(self._pen(cmd.color, cmd.width))
            painter.drawLine(QPointF(cmd.x1, cmd.y1), QPointF(cmd.x2, cmd.y2))
        elif isinstance(cmd, Polyline):
            painter.setPen(self._pen(cmd.color, cmd.width))
            painter.drawPolyline(QPolygonF([QPointF(x, y) for x, y in cmd.points]))
        elif isinstance(cmd, CircleMarker):
            painter.setPen(self._pen(cmd.color, cmd.width))
            painter.setBrush(Qt.NoBrush)
            painter.drawEllipse(QPointF(cmd.cx, cmd.cy), cmd.radius, cmd.radius)
        elif isinstance(cmd, CrossMarker):
            painter.setPen(self._pen(cmd.color, cmd.width))
            h = cmd.half
            painter.drawLine(QPointF(cmd.cx - h, cmd.cy - h), QPointF(cmd.cx + h, cmd.cy + h))
            painter.drawLine(QPointF(cmd.cx + h, cmd.cy - h), QPointF(cmd.cx - h, cmd.cy + h))
        elif isinstance(cmd, Text):
            font = QFont(painter.font())
            font.setPixelSize(max(1, int(round(cmd.size))))
            painter.setFont(font)
            painter.setPen(_qcolor(cmd.color))
            x = cmd.x
            if cmd.align == "center":
                x -= painter.fontMetrics().horizontalAdvance(cmd.text) / 2.0
            painter.drawText(QPointF(x, cmd.y), cmd.text)
