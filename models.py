from enum import Enum
from typing import Optional
from datetime import date
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class AppointmentStatus(str, Enum):
    REQUESTED = "Requested"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class Professional(SQLModel, table=True):
    __tablename__ = "healthcare_professionals"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    specialization: str = Field(index=True)
    department: Optional[str] = None
    experience_years: Optional[int] = None
    consultation_fee: Optional[float] = None
    # "HH:MM" or "HH:MM:SS", parsed by slots.generate_grid
    availability_start: str = "09:00"
    availability_end: str = "17:00"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # Database-level protection against double booking. holds_slot is NULL
        # once cancelled and NULLs never collide, so a freed slot can be rebooked.
        UniqueConstraint(
            "professional_id", "appointment_date", "slot_minute", "holds_slot",
            name="unique_active_appointment_slot",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    subject_id: int = Field(index=True)
    professional_id: int = Field(index=True, foreign_key="healthcare_professionals.id")
    appointment_date: date = Field(index=True)
    slot_minute: int  # minutes since midnight: 540 = 09:00
    status: AppointmentStatus = Field(default=AppointmentStatus.REQUESTED)
    # True while active, NULL once cancelled; set explicitly by lifecycle.py
    holds_slot: Optional[bool] = None
    reason: Optional[str] = None
