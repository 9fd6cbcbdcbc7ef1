import re

import pytest

import export.layout as layout
from agenda.model import Appointment
from audiometry.report import Report
from errors import ExportUnavailableError
from export.agenda_pdf import EMPTY_DAY, agenda_filename, agenda_rows, build_agenda_pdf
from export.layout import PageWriter
from export.pdf import build_report_pdf, report_filename, safe_name, table_line
from plotting.audiogram import build_audiogram
from plotting.raster import render_png


def _page_count(path):
    return len(re.findall(rb"/Type /Page\b", path.read_bytes()))


def _chart(report):
    return render_png(build_audiogram(report, 300, 130), 300, 130)


def _report(**kw):
    report = Report(patient="João Silva", date="2024-03-05", **kw)
    report.right.update({500: 30, 1000: 35, 2000: 40})
    report.left.update({500: 32.5})
    return report


def test_safe_name():
    assert safe_name("João/Silva!") == "João_Silva"
    assert safe_name("  Ana   Maria ") == "Ana_Maria"
    assert safe_name("") == "Patient"
    assert safe_name("???") == "Patient"
    assert report_filename("Ana Maria") == "BTX_AudioLaudo_Ana_Maria.pdf"
    assert agenda_filename("2024-03-05") == "BTX_Agenda_2024-03-05.pdf"


def test_table_line():
    assert table_line(250, 20, None) == "250   | RE 20   | LE —   "
    assert table_line(1000, 32.5, 120) == "1000  | RE 33   | LE 120 "


def test_report_pdf(tmp_path):
    report = _report(interpretation="Automatic summary (editable):\nRE: PTA 35 dB — Mild.")
    out = tmp_path / "out" / report_filename(report.patient)
    path = build_report_pdf(report, _chart(report), str(out))
    assert path == str(out)
    assert out.read_bytes().startswith(b"%PDF")
    assert _page_count(out) == 1
    assert not (tmp_path / "out" / (out.name + ".part")).exists()


def test_long_interpretation_paginates(tmp_path):
    report = _report(interpretation="Lorem ipsum dolor sit amet. " * 600)
    out = tmp_path / "long.pdf"
    build_report_pdf(report, _chart(report), str(out))
    assert _page_count(out) > 1


def test_page_writer_breaks(tmp_path):
    writer = PageWriter(str(tmp_path / "w.pdf"), footer="footer")
    writer.y = 250
    assert not writer.break_if_past(260)
    writer.y = 261
    assert writer.break_if_past(260)
    assert writer.y == writer.top_margin
    assert writer.finish() == 2


def test_agenda_pdf_empty_day(tmp_path):
    out = tmp_path / agenda_filename("2024-03-05")
    build_agenda_pdf("2024-03-05", [], str(out))
    assert out.read_bytes().startswith(b"%PDF")
    assert _page_count(out) == 1


def test_agenda_pdf_many_rows(tmp_path):
    items = [
        Appointment(date="2024-03-05", time=f"{8 + i // 6:02d}:{(i % 6) * 10:02d}", patient=f"Patient {i}",
                    type="Tonal audiometry", note="x" * 150)
        for i in range(40)
    ]
    out = tmp_path / "agenda.pdf"
    build_agenda_pdf("2024-03-05", items, str(out))
    assert _page_count(out) > 1


def test_export_unavailable_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.setattr(layout, "_REPORTLAB_AVAILABLE", False)
    out = tmp_path / "x.pdf"
    with pytest.raises(ExportUnavailableError):
        build_report_pdf(_report(), b"", str(out))
    with pytest.raises(ExportUnavailableError):
        build_agenda_pdf("2024-03-05", [], str(out))
    assert list(tmp_path.iterdir()) == []


def test_failed_export_leaves_no_partial_file(tmp_path):
    out = tmp_path / "broken.pdf"
    with pytest.raises(Exception):
        build_report_pdf(_report(), b"not a png", str(out))
    assert list(tmp_path.iterdir()) == []


def _drawn_text(monkeypatch):
    drawn = []
    original = PageWriter.text

    def record(self, x, y, value):
        drawn.append(value)
        original(self, x, y, value)

    monkeypatch.setattr(PageWriter, "text", record)
    return drawn


def test_split_keeps_paragraph_breaks(tmp_path):
    writer = PageWriter(str(tmp_path / "w.pdf"))
    assert writer.split("Para one.\n\nPara two.", 182) == ["Para one.", "", "Para two."]
    assert writer.split("", 182) == [""]


def test_split_breaks_over_wide_tokens(tmp_path):
    writer = PageWriter(str(tmp_path / "w.pdf"))
    writer.set_font("sans", 10)
    token = "https://example.org/" + "a" * 400
    lines = writer.split(f"See {token} later", 182)
    assert len(lines) > 1
    limit = 182 * layout.mm
    for line in lines:
        assert layout.pdfmetrics.stringWidth(line, writer.font_name, writer.font_size) <= limit
    assert "".join(lines).replace(" ", "") == f"See{token}later"


def test_report_pdf_draws_blank_lines_and_placeholders(tmp_path, monkeypatch):
    drawn = _drawn_text(monkeypatch)
    report = _report(interpretation="First.\n\nSecond.")
    build_report_pdf(report, _chart(report), str(tmp_path / "r.pdf"))
    start = drawn.index("First.")
    assert drawn[start:start + 3] == ["First.", "", "Second."]
    assert table_line(8000, None, None) in drawn


def test_agenda_rows_truncate_and_fill_placeholders():
    long_item = Appointment(date="2024-03-05", time="09:00", patient="P" * 60,
                            type="T" * 30, note="n" * 150)
    blank_item = Appointment(date="2024-03-05", time="", patient="", type="")
    long_row, blank_row = agenda_rows([long_item, blank_item])
    assert long_row.patient == "P" * 40
    assert long_row.type == "T" * 20
    assert long_row.note == "Note: " + "n" * 100
    assert (blank_row.time, blank_row.patient, blank_row.type, blank_row.note) == ("--:--", "—", "—", None)


def test_agenda_pdf_draws_rows(tmp_path, monkeypatch):
    drawn = _drawn_text(monkeypatch)
    item = Appointment(date="2024-03-05", time="09:00", patient="Ana", type="Follow-up", note="bring exams")
    build_agenda_pdf("2024-03-05", [item], str(tmp_path / "a.pdf"))
    assert ["09:00", "Ana", "Follow-up", "Note: bring exams"] == drawn[drawn.index("09:00"):drawn.index("09:00") + 4]
    assert "Date: 05/03/2024" in drawn
    assert "Total: 1" in drawn
    assert EMPTY_DAY not in drawn


def test_agenda_pdf_empty_day_message(tmp_path, monkeypatch):
    drawn = _drawn_text(monkeypatch)
    build_agenda_pdf("2024-03-05", [], str(tmp_path / "a.pdf"))
    assert EMPTY_DAY in drawn
    assert "Total: 0" in drawn
