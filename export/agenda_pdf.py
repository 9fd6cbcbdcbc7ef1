from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from agenda.model import Appointment, format_date_display
from export.layout import PageWriter, atomic_output, ensure_reportlab

TITLE = "BTX AudioLaudo — Day Schedule"
FOOTER = "Generated offline — BTX AudioLaudo"
EMPTY_DAY = "No appointments on this day."

ROW_BREAK_Y = 280
PATIENT_CHARS = 40
TYPE_CHARS = 20
NOTE_CHARS = 100
COL_TIME, COL_PATIENT, COL_TYPE = 14, 40, 140

logger = logging.getLogger(__name__)


def agenda_filename(date_iso: str) -> str:
    return f"BTX_Agenda_{date_iso}.pdf"


@dataclass(frozen=True)
class AgendaRow:
    time: str
    patient: str
    type: str
    note: Optional[str] = None


def agenda_rows(items: Sequence[Appointment]) -> List[AgendaRow]:
    """Cell text for each appointment, truncated to the column widths."""
    return [
        AgendaRow(
            time=it.time or "--:--",
            patient=(it.patient or "—")[:PATIENT_CHARS],
            type=(it.type or "—")[:TYPE_CHARS],
            note=f"Note: {it.note[:NOTE_CHARS]}" if it.note else None,
        )
        for it in items
    ]


def build_agenda_pdf(date_iso: str, items: Sequence[Appointment], out_pdf_path: str) -> str:
    """``items`` must already be the day's list in display order."""
    ensure_reportlab()
    with atomic_output(out_pdf_path) as tmp_path:
        w = PageWriter(tmp_path, footer=FOOTER)
        w.set_font("sans-bold", 16)
        w.text(14, 16, TITLE)

        w.set_font("sans", 11)
        w.text(14, 26, f"Date: {format_date_display(date_iso)}")
        w.text(160, 26, f"Total: {len(items)}")

        w.y = 38
        w.set_font("sans-bold", 11)
        w.text(COL_TIME, w.y, "Time")
        w.text(COL_PATIENT, w.y, "Patient")
        w.text(COL_TYPE, w.y, "Type")
        w.y += 6

        w.set_font("sans", 10)
        if not items:
            w.text(14, w.y, EMPTY_DAY)
        for row in agenda_rows(items):
            w.break_if_past(ROW_BREAK_Y)
            w.text(COL_TIME, w.y, row.time)
            w.text(COL_PATIENT, w.y, row.patient)
            w.text(COL_TYPE, w.y, row.type)
            w.y += 6
            if row.note:
                w.set_font("sans", 9)
                w.text(COL_PATIENT, w.y, row.note)
                w.set_font("sans", 10)
                w.y += 6

        pages = w.finish()
    logger.info("Agenda PDF for %s written: %s (%d pages)", date_iso, out_pdf_path, pages)
    return out_pdf_path
