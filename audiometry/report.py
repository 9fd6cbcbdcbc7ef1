from __future__ import annotations
from dataclasses import dataclass, field
import datetime as dt
import math
from typing import Any, Dict, Optional

FREQS = [250, 500, 1000, 2000, 3000, 4000, 5000, 6000, 7000, 8000]
DB_MIN = -10
DB_MAX = 120
EARS = ("right", "left")


def today_iso() -> str:
    return dt.date.today().isoformat()


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def parse_db(raw: Any) -> Optional[float]:
    """Parse a threshold typed by the user.

    Blank, non-numeric and non-finite input gives ``None`` (no measurement);
    numbers are clamped to [DB_MIN, DB_MAX]. A decimal comma is accepted.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", ".")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    value = clamp(value, DB_MIN, DB_MAX)
    return int(value) if value.is_integer() else value


def empty_readings() -> Dict[int, Optional[float]]:
    return {f: None for f in FREQS}


def _readings_from_record(raw: Any) -> Dict[int, Optional[float]]:
    out = empty_readings()
    if not isinstance(raw, dict):
        return out
    for key, value in raw.items():
        try:
            freq = int(float(key))
        except (TypeError, ValueError):
            continue
        if freq in out:
            out[freq] = parse_db(value)
    return out


@dataclass
class Report:
    """Current report: patient, exam date, per-ear thresholds and interpretation."""

    patient: str = ""
    date: str = field(default_factory=today_iso)
    right: Dict[int, Optional[float]] = field(default_factory=empty_readings)
    left: Dict[int, Optional[float]] = field(default_factory=empty_readings)
    interpretation: str = ""

    def readings(self, ear: str) -> Dict[int, Optional[float]]:
        if ear == "right":
            return self.right
        if ear == "left":
            return self.left
        raise ValueError("ear must be 'right' or 'left'.")

    def set_reading(self, ear: str, freq: int, raw: Any) -> Optional[float]:
        freq = int(freq)
        if freq not in FREQS:
            raise ValueError(f"Unsupported frequency {freq} Hz.")
        value = parse_db(raw)
        self.readings(ear)[freq] = value
        return value

    def clear(self, today: Optional[str] = None) -> None:
        self.patient = ""
        self.date = today or today_iso()
        self.interpretation = ""
        self.right = empty_readings()
        self.left = empty_readings()

    def has_readings(self) -> bool:
        return any(v is not None for v in self.right.values()) or any(
            v is not None for v in self.left.values()
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patient": self.patient,
            "date": self.date,
            "interpretation": self.interpretation,
            "right": {str(f): self.right.get(f) for f in FREQS},
            "left": {str(f): self.left.get(f) for f in FREQS},
        }

    @staticmethod
    def from_dict(d: Any, today: Optional[str] = None) -> "Report":
        if not isinstance(d, dict):
            return Report(date=today or today_iso())
        return Report(
            patient=str(d.get("patient") or ""),
            date=str(d.get("date") or "") or (today or today_iso()),
            right=_readings_from_record(d.get("right")),
            left=_readings_from_record(d.get("left")),
            interpretation=str(d.get("interpretation") or ""),
        )
