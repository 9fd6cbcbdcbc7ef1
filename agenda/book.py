from __future__ import annotations
from typing import Any, List, Optional
import logging

from agenda.model import Appointment, normalize_phone
from audiometry.report import today_iso
from errors import AppointmentValidationError, UnknownAppointmentError
from storage.kv import KeyValueStore

AGENDA_KEY = "btx_audiolaudo_agenda_v1"
REQUIRED_FIELDS_MESSAGE = "Fill in at least Time and Patient."

logger = logging.getLogger(__name__)


class AppointmentBook:
    """Same-device appointment list, saved after every change."""

    def __init__(self, store: KeyValueStore, key: str = AGENDA_KEY) -> None:
        self.store = store
        self.key = key
        self.items: List[Appointment] = []

    def load(self) -> None:
        data = self.store.get(self.key)
        raw_items: Any = data.get("items") if isinstance(data, dict) else None
        if not isinstance(raw_items, list):
            raw_items = []
        seen = set()
        items: List[Appointment] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                continue
            item = Appointment.from_dict(raw)
            if item.id in seen:
                logger.info("Dropping duplicate appointment id %s", item.id)
                continue
            seen.add(item.id)
            items.append(item)
        self.items = items

    def save(self) -> bool:
        return self.store.set(self.key, {"items": [it.to_dict() for it in self.items]})

    def __len__(self) -> int:
        return len(self.items)

    def add(
        self,
        time: str,
        patient: str,
        date: str = "",
        type: str = "",
        phone: str = "",
        note: str = "",
        today: Optional[str] = None,
    ) -> Appointment:
        time = (time or "").strip()
        patient = (patient or "").strip()
        if not time or not patient:
            raise AppointmentValidationError(REQUIRED_FIELDS_MESSAGE)
        item = Appointment(
            date=(date or "").strip() or today or today_iso(),
            time=time,
            patient=patient,
            type=(type or "").strip(),
            phone=normalize_phone(phone),
            note=(note or "").strip(),
        )
        ids = {it.id for it in self.items}
        while item.id in ids:
            item = Appointment.from_dict({**item.to_dict(), "id": ""})
        self.items.append(item)
        self.save()
        logger.info("Appointment added: %s %s", item.date, item.time)
        return item

    def get(self, appointment_id: str) -> Appointment:
        for it in self.items:
            if it.id == appointment_id:
                return it
        raise UnknownAppointmentError(appointment_id)

    def delete(self, appointment_id: str) -> bool:
        before = len(self.items)
        self.items = [it for it in self.items if it.id != appointment_id]
        if len(self.items) == before:
            return False
        self.save()
        return True

    def clear_all(self) -> None:
        self.items = []
        self.save()

    def for_day(self, date: str) -> List[Appointment]:
        """Same-date entries ordered by their ``HH:MM`` string (zero-padded input expected)."""
        return sorted((it for it in self.items if it.date == date), key=lambda it: it.time or "")
