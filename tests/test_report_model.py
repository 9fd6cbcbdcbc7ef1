import pytest

from audiometry.report import DB_MAX, DB_MIN, FREQS, Report, parse_db
from audiometry.repo import REPORT_KEY, ReportRepository
from storage.kv import MemoryStore


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("40", 40),
        (" 35 ", 35),
        ("32,5", 32.5),
        ("130", DB_MAX),
        ("-20", DB_MIN),
        (200, DB_MAX),
        ("", None),
        ("   ", None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_db(raw, expected):
    assert parse_db(raw) == expected


def test_new_report_has_every_frequency_unset():
    report = Report(date="2024-03-05")
    assert list(report.right) == FREQS
    assert all(v is None for v in report.left.values())
    assert not report.has_readings()


def test_set_reading_clamps_and_rejects_unknown_keys():
    report = Report()
    assert report.set_reading("right", 1000, "150") == 120
    assert report.right[1000] == 120
    assert report.set_reading("left", 500, "") is None
    with pytest.raises(ValueError):
        report.set_reading("right", 1500, "20")
    with pytest.raises(ValueError):
        report.readings("both")


def test_clear_keeps_frequency_keys():
    report = Report(patient="Ana", interpretation="text")
    report.set_reading("right", 250, 10)
    report.clear(today="2024-03-05")
    assert report.patient == ""
    assert report.date == "2024-03-05"
    assert report.interpretation == ""
    assert list(report.right) == FREQS
    assert not report.has_readings()


def test_from_dict_tolerates_partial_and_bad_records():
    report = Report.from_dict(
        {"patient": "Ana", "right": {"250": "abc", "500": 40, "9999": 10}, "left": "oops"},
        today="2024-03-05",
    )
    assert report.patient == "Ana"
    assert report.date == "2024-03-05"
    assert report.right[250] is None
    assert report.right[500] == 40
    assert list(report.right) == FREQS
    assert all(v is None for v in report.left.values())


def test_repository_round_trip():
    store = MemoryStore()
    repo = ReportRepository(store)
    report = Report(patient="João", date="2024-01-02", interpretation="Fine.\nSecond line.")
    for i, freq in enumerate(FREQS):
        report.set_reading("right", freq, 5 * i)
        report.set_reading("left", freq, 32.5 + i)
    assert repo.save(report)

    loaded = ReportRepository(store).load(today="2030-01-01")
    assert loaded == report


def test_repository_ignores_malformed_blob():
    store = MemoryStore({REPORT_KEY: "{not json"})
    loaded = ReportRepository(store).load(today="2024-03-05")
    assert loaded.patient == ""
    assert loaded.date == "2024-03-05"
    assert not loaded.has_readings()
