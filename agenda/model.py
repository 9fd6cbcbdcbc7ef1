from __future__ import annotations
from dataclasses import dataclass, asdict, field
import re
import uuid
from typing import Any, Dict


def normalize_phone(raw: Any) -> str:
    return re.sub(r"\D", "", str(raw or "").strip())


def new_appointment_id() -> str:
    return uuid.uuid4().hex


def format_date_display(iso: str) -> str:
    """``2024-03-05`` -> ``05/03/2024``; anything that does not split in three is returned as is."""
    if not iso:
        return ""
    parts = iso.split("-")
    if len(parts) != 3 or not all(parts):
        return iso
    y, m, d = parts
    return f"{d}/{m}/{y}"


@dataclass(frozen=True)
class Appointment:
    date: str
    time: str
    patient: str
    type: str = ""
    phone: str = ""
    note: str = ""
    id: str = field(default_factory=new_appointment_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Appointment":
        return Appointment(
            id=str(d.get("id") or "") or new_appointment_id(),
            date=str(d.get("date") or "").strip(),
            time=str(d.get("time") or "").strip(),
            patient=str(d.get("patient") or "").strip(),
            type=str(d.get("type") or "").strip(),
            phone=normalize_phone(d.get("phone")),
            note=str(d.get("note") or "").strip(),
        )

    def headline(self) -> str:
        return f"{self.time or '--:--'} — {self.patient or 'No name'}"

    def meta_line(self) -> str:
        parts = [self.type or "—"]
        if self.phone:
            parts.append(self.phone)
        if self.note:
            parts.append(self.note)
        return " • ".join(parts)
