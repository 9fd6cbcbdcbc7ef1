from __future__ import annotations
from urllib.parse import quote

from agenda.model import Appointment, format_date_display, normalize_phone
from errors import MissingContactError

CHAT_BASE_URL = "https://wa.me/"
GREETING_TEMPLATE = "Hello, {patient}! Confirming your appointment ({type}) on {date} at {time}."


def greeting_text(item: Appointment, template: str = GREETING_TEMPLATE) -> str:
    return template.format(
        patient=item.patient or "",
        type=item.type or "consultation",
        date=format_date_display(item.date),
        time=item.time or "",
    )


def chat_link(item: Appointment, template: str = GREETING_TEMPLATE) -> str:
    """Pre-filled chat deep link; nothing is sent, the caller opens the URL."""
    phone = normalize_phone(item.phone)
    if not phone:
        raise MissingContactError("No phone number on this appointment.")
    text = quote(greeting_text(item, template), safe="!'()*")
    return f"{CHAT_BASE_URL}{phone}?text={text}"
