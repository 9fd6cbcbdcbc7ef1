from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import os

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from agenda.book import REQUIRED_FIELDS_MESSAGE
from app_controller import (
    EVENT_AGENDA,
    EVENT_REPORT,
    EVENT_VIEW,
    VIEW_AGENDA,
    VIEW_AUDIOGRAM,
    AppController,
)
from errors import (
    AppointmentValidationError,
    ExportUnavailableError,
    MissingContactError,
    UnknownAppointmentError,
)
from export.agenda_pdf import agenda_filename
from export.pdf import report_filename
from project_version import __version__
from ui.agenda_panel import AgendaPanel
from ui.log_panel import LogPanel, PanelLogHandler
from ui.menus import MenuBuilder
from ui.report_panel import ReportPanel


class MainWindow(QMainWindow):
    """Main window: report and agenda tabs over one AppController."""

    def __init__(self, controller: AppController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.setWindowTitle(f"BTX AudioLaudo {__version__}")
        self.resize(1280, 800)

        self._logger = logging.getLogger('audiolaudo.ui')

        self._builder = MenuBuilder(self)
        self._builder.build()

        central = QWidget(self)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(6, 6, 6, 6)

        self.tabs = QTabWidget()
        self.report_panel = ReportPanel(controller)
        self.agenda_panel = AgendaPanel(controller)
        self.tabs.addTab(self.report_panel, "Audiogram")
        self.tabs.addTab(self.agenda_panel, "Agenda")
        root_layout.addWidget(self.tabs, 1)

        self.log_panel = LogPanel()
        root_layout.addWidget(self.log_panel)
        self.setCentralWidget(central)

        self._log_handler = PanelLogHandler(self.log_panel)
        logging.getLogger().addHandler(self._log_handler)

        self.report_panel.exportRequested.connect(self.export_report_pdf)
        self.report_panel.clearRequested.connect(self.clear_report)
        self.agenda_panel.addRequested.connect(self._on_add_requested)
        self.agenda_panel.loadRequested.connect(self._on_load_requested)
        self.agenda_panel.messageRequested.connect(self._on_message_requested)
        self.agenda_panel.deleteRequested.connect(self._on_delete_requested)
        self.agenda_panel.exportRequested.connect(self.export_agenda_pdf)
        self.agenda_panel.clearRequested.connect(self.clear_agenda)

        self._status_patient_label = QLabel("Patient: -")
        self.statusBar().addPermanentWidget(self._status_patient_label)

        self._unsubscribe = controller.subscribe(self._on_event)
        self.report_panel.refresh()
        self.agenda_panel.refresh()
        self._update_status_bar()

    # ----- Helpers -----

    def set_status(self, message: str, *, timeout: int = 6000) -> None:
        self._logger.info(message)
        self.statusBar().showMessage(message, timeout)

    def _update_status_bar(self) -> None:
        patient = self.controller.report.patient or "-"
        self._status_patient_label.setText(f"Patient: {patient}")

    def _on_event(self, event: str, payload: Any) -> None:
        if event == EVENT_REPORT:
            self.report_panel.refresh()
            self._update_status_bar()
        elif event == EVENT_AGENDA:
            self.agenda_panel.refresh()
        elif event == EVENT_VIEW:
            if payload == VIEW_AUDIOGRAM:
                self.show_audiogram()
            elif payload == VIEW_AGENDA:
                self.show_agenda()

    def _confirm(self, title: str, text: str) -> bool:
        reply = QMessageBox.question(
            self,
            title,
            text,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return reply == QMessageBox.Yes

    def _ask_save_path(self, caption: str, filename: str) -> Optional[str]:
        suggested = os.path.join(str(self.controller.export_dir), filename)
        out_path, _ = QFileDialog.getSaveFileName(self, caption, suggested, 'PDF (*.pdf)')
        return out_path or None

    # ----- View -----

    def show_audiogram(self) -> None:
        self.tabs.setCurrentWidget(self.report_panel)

    def show_agenda(self) -> None:
        self.tabs.setCurrentWidget(self.agenda_panel)

    # ----- Report -----

    def export_report_pdf(self) -> None:
        out_pdf = self._ask_save_path('Generate report PDF', report_filename(self.controller.report.patient))
        if not out_pdf:
            return
        try:
            path = self.controller.export_report(out_pdf)
        except ExportUnavailableError as exc:
            QMessageBox.warning(self, 'PDF unavailable', str(exc))
            return
        except OSError as exc:
            QMessageBox.warning(self, 'Export error', f"Could not write the PDF:\n{exc}")
            return
        self.set_status(f'Report PDF created: {path}')

    def clear_report(self) -> None:
        if self._confirm('Clear report', 'Clear patient, thresholds and interpretation?'):
            self.controller.clear_report()
            self.set_status('Report cleared.')

    # ----- Agenda -----

    def _on_add_requested(self, fields: Dict[str, str]) -> None:
        try:
            item = self.controller.add_appointment(**fields)
        except AppointmentValidationError as exc:
            QMessageBox.warning(self, 'Agenda', str(exc) or REQUIRED_FIELDS_MESSAGE)
            return
        self.agenda_panel.reset_quick_fields()
        self.set_status(f'Appointment added: {item.headline()}')

    def _on_load_requested(self, appointment_id: str) -> None:
        try:
            item = self.controller.load_from_appointment(appointment_id)
        except UnknownAppointmentError as exc:
            QMessageBox.warning(self, 'Agenda', str(exc))
            return
        self.set_status(f'Loaded into report: {item.patient}')

    def _on_message_requested(self, appointment_id: str) -> None:
        try:
            link = self.controller.message_link(appointment_id)
        except MissingContactError as exc:
            QMessageBox.information(self, 'Agenda', str(exc))
            return
        except UnknownAppointmentError as exc:
            QMessageBox.warning(self, 'Agenda', str(exc))
            return
        QDesktopServices.openUrl(QUrl(link))

    def _on_delete_requested(self, appointment_id: str) -> None:
        if self._confirm('Agenda', 'Delete this appointment?'):
            if self.controller.delete_appointment(appointment_id):
                self.set_status('Appointment deleted.')

    def export_selected_day_pdf(self) -> None:
        self.export_agenda_pdf(self.agenda_panel.selected_day())

    def export_agenda_pdf(self, date_iso: str) -> None:
        out_pdf = self._ask_save_path('Day PDF', agenda_filename(date_iso))
        if not out_pdf:
            return
        try:
            path = self.controller.export_agenda(date_iso, out_pdf)
        except ExportUnavailableError as exc:
            QMessageBox.warning(self, 'PDF unavailable', str(exc))
            return
        except OSError as exc:
            QMessageBox.warning(self, 'Export error', f"Could not write the PDF:\n{exc}")
            return
        self.set_status(f'Agenda PDF created: {path}')

    def clear_agenda(self) -> None:
        if self._confirm('Agenda', 'Delete ALL appointments on this device?'):
            self.controller.clear_agenda()
            self.set_status('Agenda cleared.')

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        logging.getLogger().removeHandler(self._log_handler)
        super().closeEvent(event)
