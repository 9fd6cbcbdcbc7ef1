from __future__ import annotations

from PySide6.QtCore import QDate, Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from agenda.model import Appointment
from app_controller import AppController

ISO_FMT = "yyyy-MM-dd"
VISIT_TYPES = ["Tonal audiometry", "Speech audiometry", "Immittance", "Hearing aid fitting", "Follow-up"]


class AppointmentCard(QWidget):
    loadRequested = Signal(str)
    messageRequested = Signal(str)
    deleteRequested = Signal(str)

    def __init__(self, item: Appointment, parent=None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)

        text = QVBoxLayout()
        title = QLabel(item.headline())
        title.setStyleSheet("font-weight: 800;")
        meta = QLabel(item.meta_line())
        meta.setStyleSheet("color: #666;")
        text.addWidget(title)
        text.addWidget(meta)
        layout.addLayout(text, 1)

        for label, signal in (
            ("Use in report", self.loadRequested),
            ("Message", self.messageRequested),
            ("Delete", self.deleteRequested),
        ):
            btn = QPushButton(label)
            btn.clicked.connect(lambda _=False, s=signal: s.emit(item.id))
            layout.addWidget(btn)


class AgendaPanel(QWidget):
    """Appointment list for one day, plus the scheduling form."""

    loadRequested = Signal(str)
    messageRequested = Signal(str)
    deleteRequested = Signal(str)
    addRequested = Signal(dict)
    exportRequested = Signal(str)
    clearRequested = Signal()

    def __init__(self, controller: AppController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        root = QVBoxLayout(self)

        form = QFormLayout()
        self.date_day = QDateEdit(QDate.currentDate())
        self.date_day.setDisplayFormat(ISO_FMT)
        self.date_day.setCalendarPopup(True)
        self.date_day.dateChanged.connect(lambda _: self.refresh())
        self.txt_time = QLineEdit()
        self.txt_time.setPlaceholderText("HH:MM")
        self.txt_patient = QLineEdit()
        self.cmb_type = QComboBox()
        self.cmb_type.setEditable(True)
        self.cmb_type.addItems(VISIT_TYPES)
        self.txt_phone = QLineEdit()
        self.txt_phone.setPlaceholderText("Country and area code, digits only")
        self.txt_note = QLineEdit()
        form.addRow("Date", self.date_day)
        form.addRow("Time", self.txt_time)
        form.addRow("Patient", self.txt_patient)
        form.addRow("Type", self.cmb_type)
        form.addRow("Phone", self.txt_phone)
        form.addRow("Note", self.txt_note)
        root.addLayout(form)

        buttons = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_pdf = QPushButton("Day PDF")
        self.btn_clear = QPushButton("Clear agenda")
        self.btn_add.clicked.connect(self._emit_add)
        self.btn_pdf.clicked.connect(lambda: self.exportRequested.emit(self.selected_day()))
        self.btn_clear.clicked.connect(self.clearRequested.emit)
        buttons.addWidget(self.btn_add)
        buttons.addStretch(1)
        buttons.addWidget(self.btn_pdf)
        buttons.addWidget(self.btn_clear)
        root.addLayout(buttons)

        self.list_widget = QListWidget()
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        root.addWidget(self.list_widget, 1)

    def selected_day(self) -> str:
        return self.date_day.date().toString(ISO_FMT)

    def _emit_add(self) -> None:
        self.addRequested.emit({
            "date": self.selected_day(),
            "time": self.txt_time.text(),
            "patient": self.txt_patient.text(),
            "type": self.cmb_type.currentText(),
            "phone": self.txt_phone.text(),
            "note": self.txt_note.text(),
        })

    def reset_quick_fields(self) -> None:
        for edit in (self.txt_time, self.txt_patient, self.txt_phone, self.txt_note):
            edit.clear()

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        appointment_id = item.data(Qt.UserRole)
        if appointment_id:
            self.loadRequested.emit(appointment_id)

    def refresh(self) -> None:
        self.list_widget.clear()
        items = self.controller.appointments_for_day(self.selected_day())
        if not items:
            self.list_widget.addItem(QListWidgetItem("No appointments for this day."))
            return
        for appointment in items:
            row = QListWidgetItem()
            row.setData(Qt.UserRole, appointment.id)
            card = AppointmentCard(appointment)
            card.loadRequested.connect(self.loadRequested.emit)
            card.messageRequested.connect(self.messageRequested.emit)
            card.deleteRequested.connect(self.deleteRequested.emit)
            row.setSizeHint(card.sizeHint())
            self.list_widget.addItem(row)
            self.list_widget.setItemWidget(row, card)
