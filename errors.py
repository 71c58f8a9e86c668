"""Failures raised by the scheduling core.

Each one is scoped to a single request. None of them are retried inside the
core; the caller decides what to do next (usually: pick another slot).
"""


class SchedulingError(Exception):
    """Base class for every failure the core reports to its callers."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidWindow(SchedulingError):
    """A professional's working-hour bounds are not valid times of day."""

    status_code = 500


class InvalidSlot(SchedulingError):
    """Requested time is malformed, off the half-hour grid, or outside working hours."""

    status_code = 400


class SlotTaken(SchedulingError):
    """Another active appointment already holds the slot."""

    status_code = 409


class ProfessionalNotFound(SchedulingError):
    status_code = 404


class NotFound(SchedulingError):
    """Appointment is absent or not owned by the requester."""

    status_code = 404


class InvalidTransition(SchedulingError):
    status_code = 409
