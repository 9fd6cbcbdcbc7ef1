from __future__ import annotations


class AudioLaudoError(Exception):
    """Base class for the errors surfaced to the user as a notice."""


class AppointmentValidationError(AudioLaudoError, ValueError):
    """Raised when an appointment lacks its required fields."""


class UnknownAppointmentError(AudioLaudoError, KeyError):
    def __str__(self) -> str:
        return f"Appointment not found: {self.args[0]!r}" if self.args else "Appointment not found."


class MissingContactError(AudioLaudoError, ValueError):
    """The appointment has no phone number to contact."""


class ExportUnavailableError(AudioLaudoError, RuntimeError):
    """The PDF backend could not be imported; nothing was written."""
