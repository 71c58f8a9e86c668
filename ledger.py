"""
Booking ledger: the only place appointments are created or change status.

Double booking is prevented twice over:

1. An in-process lock per (professional, date, time) serializes the
   check-then-insert in `reserve`. Different keys never wait on each other.
2. The `unique_active_appointment_slot` constraint rejects a second active
   row for the same key, covering writers in other processes. A violation is
   reported as SlotTaken like any other conflict.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from directory import ProfessionalDirectory
from errors import InvalidSlot, InvalidTransition, NotFound, SlotTaken
from lifecycle import apply_transition, open_appointment
from models import Appointment, AppointmentStatus
from slots import TimeLike, format_time_of_day, is_grid_point, parse_time_of_day

logger = logging.getLogger(__name__)

SlotKey = Tuple[int, date, int]


class SlotLocks:
    """Lock table keyed by slot. Entries are dropped once nobody holds or waits on them."""

    def __init__(self):
        self._locks: Dict[SlotKey, asyncio.Lock] = {}
        self._users: Dict[SlotKey, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: SlotKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


class BookingLedger:
    def __init__(self, session: AsyncSession, directory: ProfessionalDirectory, locks: SlotLocks):
        self.session = session
        self.directory = directory
        self.locks = locks

    async def reserve(
        self,
        professional_id: int,
        appointment_date: date,
        appointment_time: TimeLike,
        subject_id: int,
        reason: Optional[str] = None,
    ) -> Appointment:
        schedule = await self.directory.get_schedule(professional_id)

        try:
            minute = parse_time_of_day(appointment_time)
        except ValueError as exc:
            raise InvalidSlot(str(exc)) from exc

        if not is_grid_point(schedule, minute):
            raise InvalidSlot(
                f"{format_time_of_day(minute)} is not a bookable time for professional {professional_id}"
            )

        key = (professional_id, appointment_date, minute)
        async with self.locks.hold(key):
            if await self._find_active(*key) is not None:
                logger.info("Slot taken: professional=%s date=%s time=%s",
                            professional_id, appointment_date, format_time_of_day(minute))
                raise SlotTaken("Time slot not available")

            appointment = open_appointment(
                subject_id=subject_id,
                professional_id=professional_id,
                appointment_date=appointment_date,
                slot_minute=minute,
                reason=reason,
            )
            try:
                self.session.add(appointment)
                await self.session.commit()
                await self.session.refresh(appointment)
            except IntegrityError:
                # Lost the race to a writer outside this process
                await self.session.rollback()
                logger.warning("Unique constraint rejected booking: professional=%s date=%s time=%s",
                               professional_id, appointment_date, format_time_of_day(minute))
                raise SlotTaken("Time slot not available") from None

        logger.info("Booked appointment %s for subject %s", appointment.id, subject_id)
        return appointment

    async def _find_active(self, professional_id: int, appointment_date: date, minute: int) -> Optional[Appointment]:
        statement = select(Appointment).where(
            Appointment.professional_id == professional_id,
            Appointment.appointment_date == appointment_date,
            Appointment.slot_minute == minute,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def active_bookings_on(self, professional_id: int, appointment_date: date) -> List[Appointment]:
        statement = (
            select(Appointment)
            .where(
                Appointment.professional_id == professional_id,
                Appointment.appointment_date == appointment_date,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .order_by(Appointment.slot_minute)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_for_subject(self, subject_id: int) -> List[Appointment]:
        """Newest first by (date, time)."""
        statement = (
            select(Appointment)
            .where(Appointment.subject_id == subject_id)
            .order_by(
                Appointment.appointment_date.desc(),
                Appointment.slot_minute.desc(),
                Appointment.id.desc(),
            )
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def set_status(
        self, appointment_id: int, requester_id: int, new_status: AppointmentStatus
    ) -> Appointment:
        # Scoped to the requester: someone else's appointment looks absent
        statement = (
            select(Appointment)
            .where(Appointment.id == appointment_id, Appointment.subject_id == requester_id)
            .with_for_update()
        )
        result = await self.session.execute(statement)
        appointment = result.scalars().first()
        if appointment is None:
            raise NotFound("Appointment not found")

        try:
            apply_transition(appointment, new_status)
        except InvalidTransition:
            await self.session.rollback()
            raise

        self.session.add(appointment)
        await self.session.commit()
        await self.session.refresh(appointment)
        return appointment
