"""
Scheduling service: the entry point the HTTP layer talks to.

Composes the directory, the ledger and the availability calculator for the
lifetime of one session. Holds no state of its own between calls.
"""
from datetime import date
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from availability import compute_availability
from directory import ProfessionalDirectory
from errors import InvalidSlot, InvalidTransition
from ledger import BookingLedger, SlotLocks
from models import Appointment, AppointmentStatus
from slots import TimeLike


class SchedulingService:
    def __init__(
        self,
        session: AsyncSession,
        locks: SlotLocks,
        directory: Optional[ProfessionalDirectory] = None,
    ):
        self.directory = directory or ProfessionalDirectory(session)
        self.ledger = BookingLedger(session, self.directory, locks)

    async def book_appointment(
        self,
        subject_id: int,
        professional_id: int,
        appointment_date: date,
        appointment_time: TimeLike,
        reason: Optional[str] = None,
    ) -> Appointment:
        if appointment_time is None or appointment_time == "":
            raise InvalidSlot("Appointment time is required")
        return await self.ledger.reserve(
            professional_id, appointment_date, appointment_time, subject_id, reason
        )

    async def list_availability(self, professional_id: int, appointment_date: date) -> List[str]:
        """Free times as "HH:MM", chronological.

        Advisory only: a listed time may be booked by someone else before the
        caller reserves it.
        """
        schedule = await self.directory.get_schedule(professional_id)
        active = await self.ledger.active_bookings_on(professional_id, appointment_date)
        return [slot.label for slot in compute_availability(schedule, appointment_date, active)]

    async def update_appointment_status(
        self, subject_id: int, appointment_id: int, new_status: Union[AppointmentStatus, str]
    ) -> Appointment:
        try:
            status = AppointmentStatus(new_status)
        except ValueError:
            raise InvalidTransition(f"Unknown appointment status: {new_status!r}") from None
        return await self.ledger.set_status(appointment_id, subject_id, status)

    cancel_or_update = update_appointment_status

    async def cancel_appointment(self, subject_id: int, appointment_id: int) -> Appointment:
        return await self.update_appointment_status(
            subject_id, appointment_id, AppointmentStatus.CANCELLED
        )

    async def list_appointments_for_subject(self, subject_id: int) -> List[Appointment]:
        return await self.ledger.list_for_subject(subject_id)
