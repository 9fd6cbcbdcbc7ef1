import json

import pytest

from agenda.book import AGENDA_KEY, REQUIRED_FIELDS_MESSAGE, AppointmentBook
from agenda.model import Appointment, format_date_display, normalize_phone
from errors import AppointmentValidationError, UnknownAppointmentError
from storage.kv import MemoryStore


@pytest.fixture
def book():
    b = AppointmentBook(MemoryStore())
    b.load()
    return b


def test_day_listing_is_sorted_by_time(book):
    book.add("14:00", "Bruno", date="2024-03-05")
    book.add("09:30", "Ana", date="2024-03-05")
    book.add("08:00", "Carla", date="2024-03-06")
    assert [it.time for it in book.for_day("2024-03-05")] == ["09:30", "14:00"]
    assert [it.patient for it in book.for_day("2024-03-06")] == ["Carla"]
    assert book.for_day("2024-03-07") == []


def test_required_fields(book):
    book.add("09:00", "Ana", date="2024-03-05")
    with pytest.raises(AppointmentValidationError) as exc:
        book.add("10:00", "   ", date="2024-03-05")
    assert str(exc.value) == REQUIRED_FIELDS_MESSAGE
    with pytest.raises(AppointmentValidationError):
        book.add("", "Bruno")
    assert len(book) == 1


def test_add_normalises_fields(book):
    item = book.add(" 09:00 ", " Ana ", type=" Follow-up ", phone="+55 (11) 99999-0000",
                    note="  bring old exams ", today="2024-03-05")
    assert item.date == "2024-03-05"
    assert item.time == "09:00"
    assert item.patient == "Ana"
    assert item.type == "Follow-up"
    assert item.phone == "5511999990000"
    assert item.note == "bring old exams"


def test_identifiers_are_unique(book):
    ids = {book.add("09:00", f"P{i}", date="2024-03-05").id for i in range(20)}
    assert len(ids) == 20


def test_delete_and_get(book):
    item = book.add("09:00", "Ana", date="2024-03-05")
    assert book.get(item.id) == item
    assert book.delete(item.id)
    assert not book.delete(item.id)
    with pytest.raises(UnknownAppointmentError):
        book.get(item.id)
    with pytest.raises(KeyError):
        book.get("nope")


def test_changes_are_persisted():
    store = MemoryStore()
    book = AppointmentBook(store)
    book.load()
    item = book.add("09:00", "Ana", date="2024-03-05")

    reloaded = AppointmentBook(store)
    reloaded.load()
    assert reloaded.items == [item]

    reloaded.clear_all()
    again = AppointmentBook(store)
    again.load()
    assert len(again) == 0


def test_load_drops_duplicates_and_junk():
    blob = {
        "items": [
            {"id": "a", "date": "2024-03-05", "time": "10:00", "patient": "Ana"},
            {"id": "a", "date": "2024-03-05", "time": "11:00", "patient": "Copy"},
            "junk",
            {"date": "2024-03-05", "time": "12:00", "patient": "No id", "phone": "(11) 2222"},
        ]
    }
    book = AppointmentBook(MemoryStore({AGENDA_KEY: json.dumps(blob)}))
    book.load()
    assert [it.patient for it in book.items] == ["Ana", "No id"]
    assert book.items[1].id
    assert book.items[1].phone == "112222"


def test_load_tolerates_malformed_blob():
    book = AppointmentBook(MemoryStore({AGENDA_KEY: "[[["}))
    book.load()
    assert len(book) == 0


def test_card_text():
    item = Appointment(date="2024-03-05", time="09:30", patient="Ana", type="Follow-up",
                       phone="5511", note="bring exams")
    assert item.headline() == "09:30 — Ana"
    assert item.meta_line() == "Follow-up • 5511 • bring exams"
    blank = Appointment(date="", time="", patient="")
    assert blank.headline() == "--:-- — No name"
    assert blank.meta_line() == "—"


def test_helpers():
    assert normalize_phone(" +1 (555) 010-9999 ") == "15550109999"
    assert normalize_phone(None) == ""
    assert format_date_display("2024-03-05") == "05/03/2024"
    assert format_date_display("March 5") == "March 5"
