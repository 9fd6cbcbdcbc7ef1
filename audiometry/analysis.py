from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Dict, Optional, Sequence

from audiometry.report import FREQS, Report

PTA_BANDS = (500, 1000, 2000)
NO_DATA = "—"

# inclusive upper bound (dB HL) -> label; anything above the last bound is profound
SEVERITY = [
    (25, "Normal"),
    (40, "Mild"),
    (55, "Moderate"),
    (70, "Moderately severe"),
    (90, "Severe"),
]
PROFOUND = "Profound"

ASYMMETRY_MIN_DIFFERENCE_DB = 15
ASYMMETRY_MIN_FREQUENCIES = 2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_pta(readings: Dict[int, Optional[float]], bands: Sequence[int] = PTA_BANDS) -> Optional[int]:
    """Pure-tone average over ``bands``, skipping unset readings; None when all are unset."""
    vals = [readings.get(f) for f in bands]
    vals = [v for v in vals if v is not None]
    if not vals:
        return None
    return _round_half_up(sum(vals) / len(vals))


def classify_pta(pta: Optional[float]) -> str:
    if pta is None:
        return NO_DATA
    for upper, label in SEVERITY:
        if pta <= upper:
            return label
    return PROFOUND


def asymmetric_frequencies(
    right: Dict[int, Optional[float]],
    left: Dict[int, Optional[float]],
    min_difference_db: float = ASYMMETRY_MIN_DIFFERENCE_DB,
) -> list[int]:
    out = []
    for f in FREQS:
        r, l = right.get(f), left.get(f)
        if r is None or l is None:
            continue
        if abs(r - l) >= min_difference_db:
            out.append(f)
    return out


def has_asymmetry(
    right: Dict[int, Optional[float]],
    left: Dict[int, Optional[float]],
    min_difference_db: float = ASYMMETRY_MIN_DIFFERENCE_DB,
    min_frequencies: int = ASYMMETRY_MIN_FREQUENCIES,
) -> bool:
    """Screening flag, not a diagnosis: enough frequencies differ between ears."""
    return len(asymmetric_frequencies(right, left, min_difference_db)) >= min_frequencies


def asymmetry_note(
    min_difference_db: float = ASYMMETRY_MIN_DIFFERENCE_DB,
    min_frequencies: int = ASYMMETRY_MIN_FREQUENCIES,
) -> str:
    return (
        f"Clinically relevant asymmetry (≥{min_difference_db:g} dB at "
        f"≥{min_frequencies} frequencies)."
    )


@dataclass(frozen=True)
class Derivation:
    pta_right: Optional[int]
    pta_left: Optional[int]
    class_right: str
    class_left: str
    asymmetry: bool

    def pta(self, ear: str) -> Optional[int]:
        return self.pta_right if ear == "right" else self.pta_left

    def classification(self, ear: str) -> str:
        return self.class_right if ear == "right" else self.class_left


def derive(
    report: Report,
    min_difference_db: float = ASYMMETRY_MIN_DIFFERENCE_DB,
    min_frequencies: int = ASYMMETRY_MIN_FREQUENCIES,
) -> Derivation:
    pta_r = compute_pta(report.right)
    pta_l = compute_pta(report.left)
    return Derivation(
        pta_right=pta_r,
        pta_left=pta_l,
        class_right=classify_pta(pta_r),
        class_left=classify_pta(pta_l),
        asymmetry=has_asymmetry(report.right, report.left, min_difference_db, min_frequencies),
    )


def _fmt(value: Optional[int]) -> str:
    return NO_DATA if value is None else str(value)


EAR_SHORT = {"right": "RE", "left": "LE"}


def pill_text(derivation: Derivation, ear: str) -> str:
    """Short label such as ``PTA RE: 35 (Mild)``."""
    return f"PTA {EAR_SHORT[ear]}: {_fmt(derivation.pta(ear))} ({derivation.classification(ear)})"


def summary_line(derivation: Derivation) -> str:
    return f"{pill_text(derivation, 'right')}  |  {pill_text(derivation, 'left')}"


def pta_sentence(derivation: Derivation, ear: str) -> str:
    return f"PTA {EAR_SHORT[ear]}: {_fmt(derivation.pta(ear))} dB — {derivation.classification(ear)}"
