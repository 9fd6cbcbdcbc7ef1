from __future__ import annotations
from typing import Optional
import logging
import math
import re

from audiometry.analysis import Derivation, derive, pta_sentence
from audiometry.report import FREQS, Report
from export.layout import PageWriter, atomic_output, ensure_reportlab

TITLE = "BTX AudioLaudo — Tonal Audiometry Report"
FOOTER = "BTX AudioLaudo — technology in favour of hearing"
PATIENT_PLACEHOLDER = "______________________________"
DATE_PLACEHOLDER = "____/____/______"
DEFAULT_FILENAME_STEM = "Patient"
MISSING = "—"

CONTENT_WIDTH = 182  # mm
TABLE_BREAK_Y = 260  # mm from the top
LINE_STEP = 6
TEXT_STEP = 5

logger = logging.getLogger(__name__)


def safe_name(name: str, default: str = DEFAULT_FILENAME_STEM) -> str:
    """Filename-safe form of a patient name: ``"João/Silva!"`` -> ``"João_Silva"``.

    Characters other than letters, digits, ``_`` and ``-`` break words; runs of
    whitespace become one underscore.
    """
    cleaned = re.sub(r"[^\w\s-]+", " ", name or "").strip()
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned or default


def report_filename(patient: str) -> str:
    return f"BTX_AudioLaudo_{safe_name(patient)}.pdf"


def _cell(value: Optional[float]) -> str:
    return MISSING if value is None else str(int(math.floor(value + 0.5)))


def table_line(freq: int, right: Optional[float], left: Optional[float]) -> str:
    return f"{str(freq):<5} | RE {_cell(right):<4} | LE {_cell(left):<4}"


def build_report_pdf(
    report: Report,
    chart_png: bytes,
    out_pdf_path: str,
    derivation: Optional[Derivation] = None,
) -> str:
    """Write the A4 report and return its path; nothing is left behind on failure."""
    ensure_reportlab()
    derivation = derivation or derive(report)
    interpretation = (report.interpretation or "").strip() or MISSING

    with atomic_output(out_pdf_path) as tmp_path:
        w = PageWriter(tmp_path, footer=FOOTER)

        w.set_font("sans-bold", 16)
        w.text(14, 16, TITLE)

        w.set_font("sans", 11)
        w.text(14, 26, f"Patient: {report.patient or PATIENT_PLACEHOLDER}")
        w.text(160, 26, f"Date: {report.date or DATE_PLACEHOLDER}")

        w.set_font("sans-bold", 11)
        w.text(14, 36, "Summary")
        w.set_font("sans", 11)
        w.text(14, 43, pta_sentence(derivation, "right"))
        w.text(14, 50, pta_sentence(derivation, "left"))

        w.set_font("sans-bold", 11)
        w.text(14, 62, "Audiogram")
        w.image_png(chart_png, 14, 66, CONTENT_WIDTH, 78)

        w.y = 150
        w.text(14, w.y, "Thresholds by frequency (dB HL)")
        w.y += 7

        w.set_font("mono", 10)
        w.text(14, w.y, "Hz    | RE     | LE")
        w.y += LINE_STEP
        for freq in FREQS:
            w.text(14, w.y, table_line(freq, report.right.get(freq), report.left.get(freq)))
            w.y += LINE_STEP
            w.break_if_past(TABLE_BREAK_Y)

        w.y += 4
        w.set_font("sans-bold", 11)
        w.text(14, w.y, "Interpretation")
        w.y += LINE_STEP

        w.set_font("sans", 10)
        for line in w.split(interpretation, CONTENT_WIDTH):
            w.break_if_past(TABLE_BREAK_Y)
            w.text(14, w.y, line)
            w.y += TEXT_STEP

        pages = w.finish()
    logger.info("Report PDF written: %s (%d pages)", out_pdf_path, pages)
    return out_pdf_path
