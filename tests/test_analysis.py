import pytest

from audiometry.analysis import (
    NO_DATA,
    asymmetric_frequencies,
    classify_pta,
    compute_pta,
    derive,
    has_asymmetry,
    pill_text,
    pta_sentence,
    summary_line,
)
from audiometry.report import Report, empty_readings


def _readings(**values):
    out = empty_readings()
    for key, value in values.items():
        out[int(key.lstrip("f"))] = value
    return out


def test_pta_without_readings_is_undefined():
    assert compute_pta(empty_readings()) is None


def test_pta_uses_only_500_1000_2000():
    readings = _readings(f250=90, f500=30, f1000=30, f2000=30, f4000=90)
    assert compute_pta(readings) == 30


def test_pta_averages_and_rounds():
    assert compute_pta(_readings(f500=30, f1000=35, f2000=40)) == 35
    # 32.5 rounds half up
    assert compute_pta(_readings(f500=30, f1000=35)) == 33


def test_pta_skips_unset_bands():
    assert compute_pta(_readings(f1000=20)) == 20


@pytest.mark.parametrize(
    "pta, label",
    [
        (None, NO_DATA),
        (-10, "Normal"),
        (25, "Normal"),
        (26, "Mild"),
        (40, "Mild"),
        (41, "Moderate"),
        (55, "Moderate"),
        (56, "Moderately severe"),
        (70, "Moderately severe"),
        (71, "Severe"),
        (90, "Severe"),
        (91, "Profound"),
        (120, "Profound"),
    ],
)
def test_classification_bands(pta, label):
    assert classify_pta(pta) == label


def test_asymmetry_needs_two_frequencies():
    right = _readings(f500=20, f1000=20)
    left = _readings(f500=40, f1000=20)
    assert asymmetric_frequencies(right, left) == [500]
    assert not has_asymmetry(right, left)

    left[1000] = 35
    assert asymmetric_frequencies(right, left) == [500, 1000]
    assert has_asymmetry(right, left)


def test_asymmetry_ignores_pairs_with_a_missing_side():
    right = _readings(f500=20, f1000=20, f2000=20)
    left = _readings(f500=60, f4000=80)
    assert not has_asymmetry(right, left)


def test_asymmetry_threshold_is_inclusive():
    right = _readings(f500=20, f1000=20)
    left = _readings(f500=35, f1000=34)
    assert asymmetric_frequencies(right, left) == [500]


def test_derive_and_labels():
    report = Report(date="2024-03-05")
    report.right.update({500: 30, 1000: 35, 2000: 40})
    derivation = derive(report)
    assert derivation.pta("right") == 35
    assert derivation.classification("right") == "Mild"
    assert derivation.pta("left") is None
    assert pill_text(derivation, "right") == "PTA RE: 35 (Mild)"
    assert pill_text(derivation, "left") == "PTA LE: — (—)"
    assert pta_sentence(derivation, "right") == "PTA RE: 35 dB — Mild"
    assert summary_line(derivation).startswith("PTA RE: 35 (Mild)")
