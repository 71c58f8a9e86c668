"""
Appointment lifecycle.

    Requested --> Confirmed --> Completed
        |             |
        +--> Cancelled <--+

Cancelled and Completed are terminal. Only this module changes an
appointment's status, and it keeps `holds_slot` in step with it.
"""
import logging
from datetime import date
from typing import Dict, FrozenSet, Optional

from errors import InvalidTransition
from models import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.REQUESTED: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def is_active(status: AppointmentStatus) -> bool:
    """Active appointments occupy their slot. Completed ones still count."""
    return status != AppointmentStatus.CANCELLED


def can_transition(current: AppointmentStatus, new: AppointmentStatus) -> bool:
    return new in TRANSITIONS[current]


def open_appointment(
    subject_id: int,
    professional_id: int,
    appointment_date: date,
    slot_minute: int,
    reason: Optional[str] = None,
) -> Appointment:
    """Build a new appointment in its initial state. Persisting it is up to the ledger."""
    return Appointment(
        subject_id=subject_id,
        professional_id=professional_id,
        appointment_date=appointment_date,
        slot_minute=slot_minute,
        status=AppointmentStatus.REQUESTED,
        holds_slot=True,
        reason=reason,
    )


def apply_transition(appointment: Appointment, new_status: AppointmentStatus) -> Appointment:
    current = AppointmentStatus(appointment.status)
    if not can_transition(current, new_status):
        raise InvalidTransition(
            f"Cannot change appointment {appointment.id} from {current.value} to {new_status.value}"
        )

    appointment.status = new_status
    # NULL releases the slot in the unique constraint
    appointment.holds_slot = True if is_active(new_status) else None
    logger.info(
        "Appointment %s: %s -> %s", appointment.id, current.value, new_status.value
    )
    return appointment
