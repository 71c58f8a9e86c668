"""
Free-slot calculation for one professional on one date.

The result is a snapshot. A slot listed here can be taken by a concurrent
booking before the caller gets to reserve it; callers must still handle
SlotTaken from the ledger.
"""
from datetime import date
from typing import Iterable, List

from models import Appointment
from slots import ProfessionalSchedule, Slot, generate_grid


def compute_availability(
    schedule: ProfessionalSchedule,
    on_date: date,
    active_bookings: Iterable[Appointment],
) -> List[Slot]:
    """Grid points of the schedule not held by any of the given bookings.

    `active_bookings` must already exclude cancelled appointments
    (BookingLedger.active_bookings_on does that filtering).
    """
    taken = {booking.slot_minute for booking in active_bookings}
    return [
        Slot(date=on_date, minute=minute)
        for minute in generate_grid(schedule.work_start, schedule.work_end)
        if minute not in taken
    ]
