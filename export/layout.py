"""Top-down A4 page writer on a reportlab canvas, in millimetres.

Positions are measured from the top-left corner of the page, so layouts read
like a printed form. The writer counts pages and stamps the footer on each.
"""

from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional
import io
import logging
import os

_REPORTLAB_AVAILABLE = True

try:
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.units import mm
    from reportlab.lib.utils import ImageReader, simpleSplit
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont
    from reportlab.pdfgen import canvas
except ImportError:  # pragma: no cover - optional backend
    _REPORTLAB_AVAILABLE = False

from errors import ExportUnavailableError

logger = logging.getLogger(__name__)

CORE_FONTS = {"sans": "Helvetica", "sans-bold": "Helvetica-Bold", "mono": "Courier"}
TTF_FONTS = {"sans": "DejaVuSans", "sans-bold": "DejaVuSans-Bold", "mono": "DejaVuSansMono"}

_fonts: Optional[Dict[str, str]] = None


def ensure_reportlab() -> None:
    if not _REPORTLAB_AVAILABLE:
        raise ExportUnavailableError("PDF export unavailable: install the 'reportlab' package.")


def _resolve_fonts() -> Dict[str, str]:
    """DejaVu (shipped with matplotlib) covers accents, dashes and symbols; core fonts otherwise."""
    global _fonts
    if _fonts is not None:
        return _fonts
    try:
        import matplotlib
        ttf_dir = Path(matplotlib.get_data_path()) / "fonts" / "ttf"
        for name in TTF_FONTS.values():
            if name not in pdfmetrics.getRegisteredFontNames():
                pdfmetrics.registerFont(TTFont(name, str(ttf_dir / f"{name}.ttf")))
        _fonts = dict(TTF_FONTS)
    except Exception as exc:
        logger.info("DejaVu fonts not available for PDF, using core fonts: %s", exc)
        _fonts = dict(CORE_FONTS)
    return _fonts


def _break_word(word: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Cut a token wider than ``max_width`` into pieces that fit."""
    if pdfmetrics.stringWidth(word, font_name, font_size) <= max_width:
        return [word]
    pieces: List[str] = []
    current = ""
    for ch in word:
        if current and pdfmetrics.stringWidth(current + ch, font_name, font_size) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    if current:
        pieces.append(current)
    return pieces


def wrap_text(value: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Word-wrap ``value`` to ``max_width`` points, one entry per drawn line.

    Line breaks in the input are kept; an empty paragraph gives an empty line.
    """
    lines: List[str] = []
    for paragraph in value.replace("\r\n", "\n").split("\n"):
        words = [
            piece
            for word in paragraph.split()
            for piece in _break_word(word, font_name, font_size, max_width)
        ]
        if not words:
            lines.append("")
            continue
        lines.extend(simpleSplit(" ".join(words), font_name, font_size, max_width))
    return lines


@contextmanager
def atomic_output(out_path: str | os.PathLike[str]) -> Iterator[str]:
    """Yield a temporary sibling path and move it onto ``out_path`` only on success."""
    target = Path(out_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(target.name + ".part")
    try:
        yield str(tmp_path)
        os.replace(tmp_path, target)
    except BaseException:
        try:
            tmp_path.unlink()
        except OSError:
            pass
        raise


class PageWriter:
    def __init__(
        self,
        path: str,
        top_margin: float = 20,
        footer: Optional[str] = None,
        footer_y: float = 290,
        footer_size: float = 9,
        left: float = 14,
    ) -> None:
        ensure_reportlab()
        self._fonts = _resolve_fonts()
        self.canvas = canvas.Canvas(path, pagesize=A4)
        self.page_width, self.page_height = A4
        self.top_margin = top_margin
        self.footer = footer
        self.footer_y = footer_y
        self.footer_size = footer_size
        self.left = left
        self.y: float = top_margin
        self.pages = 1
        self._font = ("sans", 11.0)
        self.set_font("sans", 11)

    def set_font(self, face: str, size: float) -> None:
        self._font = (face, float(size))
        self.canvas.setFont(self._fonts[face], size)

    @property
    def font_name(self) -> str:
        return self._fonts[self._font[0]]

    @property
    def font_size(self) -> float:
        return self._font[1]

    def text(self, x: float, y: float, value: str) -> None:
        self.canvas.drawString(x * mm, self.page_height - y * mm, value)

    def image_png(self, png: bytes, x: float, y: float, w: float, h: float) -> None:
        self.canvas.drawImage(ImageReader(io.BytesIO(png)), x * mm, self.page_height - (y + h) * mm, w * mm, h * mm)

    def split(self, value: str, width: float) -> List[str]:
        return wrap_text(value, self.font_name, self.font_size, width * mm)

    def _draw_footer(self) -> None:
        if not self.footer:
            return
        face, size = self._font
        self.set_font("sans", self.footer_size)
        self.text(self.left, self.footer_y, self.footer)
        self.set_font(face, size)

    def new_page(self) -> None:
        self._draw_footer()
        self.canvas.showPage()
        self.pages += 1
        self.y = self.top_margin
        # reportlab resets the font state on a new page
        self.set_font(*self._font)

    def break_if_past(self, threshold: float) -> bool:
        if self.y > threshold:
            self.new_page()
            return True
        return False

    def finish(self) -> int:
        self._draw_footer()
        self.canvas.showPage()
        self.canvas.save()
        return self.pages
