from __future__ import annotations
from typing import Dict, Tuple

from PySide6.QtCore import QDate, Qt, Signal
from PySide6.QtWidgets import (
    QDateEdit,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from app_controller import AppController
from audiometry.analysis import pill_text
from audiometry.report import DB_MAX, DB_MIN, EARS, FREQS
from ui.audiogram_view import AudiogramView

ISO_FMT = "yyyy-MM-dd"
EAR_HEADERS = {"right": "RE (O)", "left": "LE (X)"}


def _fmt_db(value) -> str:
    if value is None:
        return ""
    return f"{value:g}"


class ReportPanel(QWidget):
    """Report tab: patient data, threshold table, audiogram and interpretation."""

    exportRequested = Signal()
    clearRequested = Signal()

    def __init__(self, controller: AppController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self._inputs: Dict[Tuple[str, int], QLineEdit] = {}

        root = QVBoxLayout(self)

        header = QHBoxLayout()
        header.addWidget(QLabel("Patient"))
        self.txt_patient = QLineEdit()
        self.txt_patient.setPlaceholderText("Patient name")
        self.txt_patient.textEdited.connect(self.controller.set_patient)
        header.addWidget(self.txt_patient, 1)
        header.addWidget(QLabel("Date"))
        self.date_exam = QDateEdit()
        self.date_exam.setDisplayFormat(ISO_FMT)
        self.date_exam.setCalendarPopup(True)
        self.date_exam.dateChanged.connect(self._on_date_changed)
        header.addWidget(self.date_exam)
        root.addLayout(header)

        pills = QHBoxLayout()
        self.lbl_pta = {ear: QLabel() for ear in EARS}
        for ear in EARS:
            self.lbl_pta[ear].setStyleSheet("font-weight: bold; padding: 2px 8px;")
            pills.addWidget(self.lbl_pta[ear])
        pills.addStretch(1)
        self.btn_pdf = QPushButton("Generate PDF")
        self.btn_clear = QPushButton("Clear")
        self.btn_pdf.clicked.connect(self.exportRequested.emit)
        self.btn_clear.clicked.connect(self.clearRequested.emit)
        pills.addWidget(self.btn_pdf)
        pills.addWidget(self.btn_clear)
        root.addLayout(pills)

        splitter = QSplitter(Qt.Horizontal)
        table = QWidget()
        grid = QGridLayout(table)
        grid.addWidget(QLabel("Hz"), 0, 0)
        for col, ear in enumerate(EARS, start=1):
            grid.addWidget(QLabel(EAR_HEADERS[ear]), 0, col)
        for row, freq in enumerate(FREQS, start=1):
            grid.addWidget(QLabel(str(freq)), row, 0)
            for col, ear in enumerate(EARS, start=1):
                edit = QLineEdit()
                edit.setPlaceholderText("dB")
                edit.setToolTip(f"{DB_MIN}..{DB_MAX} dB HL")
                edit.setMaximumWidth(80)
                edit.textEdited.connect(lambda text, e=ear, f=freq: self.controller.set_threshold(e, f, text))
                edit.editingFinished.connect(lambda e=ear, f=freq: self._normalise_cell(e, f))
                grid.addWidget(edit, row, col)
                self._inputs[(ear, freq)] = edit
        grid.setRowStretch(len(FREQS) + 1, 1)
        splitter.addWidget(table)

        self.audiogram = AudiogramView(self.controller.chart_commands)
        splitter.addWidget(self.audiogram)
        splitter.setStretchFactor(1, 1)
        root.addWidget(splitter, 1)

        root.addWidget(QLabel("Interpretation"))
        self.txt_interp = QPlainTextEdit()
        self.txt_interp.setMinimumHeight(120)
        self.txt_interp.textChanged.connect(self._on_interp_changed)
        root.addWidget(self.txt_interp)

    def _on_date_changed(self, value: QDate) -> None:
        self.controller.set_date(value.toString(ISO_FMT))

    def _on_interp_changed(self) -> None:
        self.controller.set_interpretation(self.txt_interp.toPlainText())

    def _normalise_cell(self, ear: str, freq: int) -> None:
        # show the clamped value once the user leaves the cell
        edit = self._inputs[(ear, freq)]
        edit.setText(_fmt_db(self.controller.report.readings(ear).get(freq)))

    def refresh(self) -> None:
        """Sync widgets from the model; the widget being edited is left alone."""
        report = self.controller.report
        derivation = self.controller.derivation()
        if not self.txt_patient.hasFocus() and self.txt_patient.text() != report.patient:
            self.txt_patient.setText(report.patient)
        date = QDate.fromString(report.date, ISO_FMT)
        if not date.isValid():
            date = QDate.currentDate()
        if self.date_exam.date() != date:
            self.date_exam.blockSignals(True)
            self.date_exam.setDate(date)
            self.date_exam.blockSignals(False)
        for (ear, freq), edit in self._inputs.items():
            if edit.hasFocus():
                continue
            text = _fmt_db(report.readings(ear).get(freq))
            if edit.text() != text:
                edit.setText(text)
        for ear in EARS:
            self.lbl_pta[ear].setText(pill_text(derivation, ear))
        if self.txt_interp.toPlainText() != report.interpretation:
            self.txt_interp.blockSignals(True)
            self.txt_interp.setPlainText(report.interpretation)
            self.txt_interp.blockSignals(False)
        self.audiogram.refresh()
