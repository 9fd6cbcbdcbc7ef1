from __future__ import annotations
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QMainWindow


class MenuBuilder:
    """
    Builds the menu bar:
    - FILE: Report PDF, Clear report, Close
    - AGENDA: Day PDF, Clear agenda
    - VIEW: Audiogram, Agenda
    """

    def __init__(self, win: QMainWindow) -> None:
        self.win = win

    def _action(self, menu, text: str, handler_name: str, shortcut: str | None = None) -> QAction:
        action = QAction(text, self.win)
        if shortcut:
            action.setShortcut(shortcut)
        action.triggered.connect(getattr(self.win, handler_name))
        menu.addAction(action)
        return action

    def build(self) -> None:
        mb = self.win.menuBar()
        m_file = mb.addMenu("FILE")
        m_agenda = mb.addMenu("AGENDA")
        m_view = mb.addMenu("VIEW")

        self._action(m_file, "Generate report PDF...", "export_report_pdf", "Ctrl+P")
        self._action(m_file, "Clear report", "clear_report")
        m_file.addSeparator()
        act_close = QAction("Close", self.win)
        act_close.setShortcut("Ctrl+Q")
        act_close.triggered.connect(self.win.close)
        m_file.addAction(act_close)

        self._action(m_agenda, "Day PDF...", "export_selected_day_pdf")
        self._action(m_agenda, "Clear agenda", "clear_agenda")

        self._action(m_view, "Audiogram", "show_audiogram", "Ctrl+1")
        self._action(m_view, "Agenda", "show_agenda", "Ctrl+2")
