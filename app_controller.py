"""Application state and the operations the UI (or the CLI) drives.

Every operation updates the model synchronously, persists it best-effort and
notifies subscribers before returning. Subscribers receive ``(event, payload)``
where ``event`` is one of ``EVENT_REPORT``, ``EVENT_AGENDA`` or ``EVENT_VIEW``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import dataclasses
import logging

from agenda.book import AppointmentBook
from agenda.messaging import chat_link
from agenda.model import Appointment
from app_settings import default_settings
from audiometry.analysis import Derivation, asymmetry_note, derive
from audiometry.narrative import build_template, merge_interpretation
from audiometry.report import Report, today_iso
from audiometry.repo import ReportRepository
from export.agenda_pdf import agenda_filename, build_agenda_pdf
from export.layout import ensure_reportlab
from export.pdf import build_report_pdf, report_filename
from plotting.audiogram import Command, build_audiogram
from plotting.raster import render_png
from storage.kv import KeyValueStore

EVENT_REPORT = "report"
EVENT_AGENDA = "agenda"
EVENT_VIEW = "view"
VIEW_AUDIOGRAM = "audiogram"
VIEW_AGENDA = "agenda"

Listener = Callable[[str, Any], None]

logger = logging.getLogger(__name__)


class AppController:
    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[Dict[str, Any]] = None,
        export_dir: Optional[str | Path] = None,
        today: Callable[[], str] = today_iso,
    ) -> None:
        self.settings = settings or default_settings()
        self.today = today
        self.reports = ReportRepository(store)
        self.book = AppointmentBook(store)
        self.report = Report(date=today())
        configured = export_dir or self.settings.get('export_dir')
        self.export_dir = Path(configured) if configured else Path.cwd()
        self._listeners: List[Listener] = []

    # ----- observers -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    # ----- settings -----

    @property
    def _asymmetry(self) -> Dict[str, Any]:
        return self.settings.get('asymmetry', {})

    @property
    def _narrative(self) -> Dict[str, Any]:
        return self.settings.get('narrative', {})

    # ----- report -----

    def load(self) -> None:
        self.report = self.reports.load(today=self.today())
        self.book.load()
        self._refresh_interpretation()
        logger.info("State loaded: %d appointments", len(self.book))
        self._emit(EVENT_REPORT, self.report)
        self._emit(EVENT_AGENDA, None)

    def derivation(self) -> Derivation:
        return derive(
            self.report,
            min_difference_db=self._asymmetry.get('min_difference_db', 15),
            min_frequencies=self._asymmetry.get('min_frequencies', 2),
        )

    def _refresh_interpretation(self) -> None:
        derivation = self.derivation()
        note = asymmetry_note(
            self._asymmetry.get('min_difference_db', 15),
            self._asymmetry.get('min_frequencies', 2),
        )
        generated = build_template(derivation, note)
        self.report.interpretation = merge_interpretation(
            self.report.interpretation,
            generated,
            short_text_chars=self._narrative.get('short_text_chars', 30),
            long_text_chars=self._narrative.get('long_text_chars', 90),
        )

    def _report_changed(self) -> None:
        self.reports.save(self.report)
        self._emit(EVENT_REPORT, self.report)

    def set_threshold(self, ear: str, freq: int, raw: Any) -> Optional[float]:
        value = self.report.set_reading(ear, freq, raw)
        self._refresh_interpretation()
        self._report_changed()
        return value

    def set_patient(self, name: str) -> None:
        self.report.patient = (name or "").strip()
        self._report_changed()

    def set_date(self, date_iso: str) -> None:
        self.report.date = (date_iso or "").strip()
        self._report_changed()

    def set_interpretation(self, text: str) -> None:
        self.report.interpretation = text or ""
        self._report_changed()

    def clear_report(self) -> None:
        self.report.clear(today=self.today())
        self._refresh_interpretation()
        self._report_changed()
        logger.info("Report cleared")

    def chart_commands(self, width: float, height: float) -> List[Command]:
        return build_audiogram(self.report, width, height, derivation=self.derivation())

    def chart_png(self) -> bytes:
        chart = self.settings.get('chart', {})
        width = int(chart.get('width', 1050))
        height = int(chart.get('height', 450))
        return render_png(self.chart_commands(width, height), width, height)

    def export_report(self, out_path: Optional[str | Path] = None) -> str:
        ensure_reportlab()
        snapshot = dataclasses.replace(self.report, interpretation=(self.report.interpretation or "").strip())
        target = Path(out_path) if out_path else self.export_dir / report_filename(self.report.patient)
        path = build_report_pdf(snapshot, self.chart_png(), str(target), derivation=self.derivation())
        # committed only once the document is in place
        self.report.interpretation = snapshot.interpretation
        self.reports.save(self.report)
        self._emit(EVENT_REPORT, self.report)
        return path

    # ----- agenda -----

    def add_appointment(self, time: str, patient: str, date: str = "", type: str = "",
                        phone: str = "", note: str = "") -> Appointment:
        item = self.book.add(time, patient, date=date, type=type, phone=phone, note=note, today=self.today())
        self._emit(EVENT_AGENDA, item)
        return item

    def delete_appointment(self, appointment_id: str) -> bool:
        removed = self.book.delete(appointment_id)
        if removed:
            self._emit(EVENT_AGENDA, None)
        return removed

    def clear_agenda(self) -> None:
        self.book.clear_all()
        logger.info("Agenda cleared")
        self._emit(EVENT_AGENDA, None)

    def appointments_for_day(self, date_iso: Optional[str] = None) -> List[Appointment]:
        return self.book.for_day(date_iso or self.today())

    def load_from_appointment(self, appointment_id: str) -> Appointment:
        item = self.book.get(appointment_id)
        self.report.patient = item.patient.strip()
        self.report.date = item.date.strip() or self.today()
        self._refresh_interpretation()
        self._report_changed()
        self._emit(EVENT_VIEW, VIEW_AUDIOGRAM)
        return item

    def message_link(self, appointment_id: str) -> str:
        return chat_link(self.book.get(appointment_id))

    def export_agenda(self, date_iso: Optional[str] = None, out_path: Optional[str | Path] = None) -> str:
        ensure_reportlab()
        day = (date_iso or "").strip() or self.today()
        target = Path(out_path) if out_path else self.export_dir / agenda_filename(day)
        return build_agenda_pdf(day, self.book.for_day(day), str(target))
