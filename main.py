import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Depends, Header, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

import config
from database import build_engine, build_session_factory, get_session, init_db
from directory import ProfessionalDirectory
from errors import SchedulingError
from ledger import SlotLocks
from models import Appointment, AppointmentStatus, Professional
from scheduling import SchedulingService
from slots import format_time_of_day

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


# Pydantic Schemas for Request/Response
class AppointmentCreate(BaseModel):
    professional_id: int = Field(alias="professionalId")
    appointment_date: date = Field(alias="appointmentDate")
    appointment_time: str = Field(alias="appointmentTime", description="HH:MM or HH:MM:SS")
    reason: Optional[str] = None

    model_config = {"populate_by_name": True}


class BookingResponse(BaseModel):
    message: str
    appointment_id: int = Field(serialization_alias="appointmentId")


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentRead(BaseModel):
    id: int
    subject_id: int
    professional_id: int
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus
    reason: Optional[str]
    doctor_first_name: Optional[str] = None
    doctor_last_name: Optional[str] = None
    specialization: Optional[str] = None

    @classmethod
    def from_appointment(
        cls, appointment: Appointment, professional: Optional[Professional] = None
    ) -> "AppointmentRead":
        return cls(
            id=appointment.id,
            subject_id=appointment.subject_id,
            professional_id=appointment.professional_id,
            appointment_date=appointment.appointment_date,
            appointment_time=format_time_of_day(appointment.slot_minute),
            status=appointment.status,
            reason=appointment.reason,
            doctor_first_name=professional.first_name if professional else None,
            doctor_last_name=professional.last_name if professional else None,
            specialization=professional.specialization if professional else None,
        )


async def read_appointments(
    appointments: List[Appointment], directory: ProfessionalDirectory
) -> List[AppointmentRead]:
    # One query for all professionals, then O(1) lookups
    professionals = await directory.get_many(a.professional_id for a in appointments)
    return [
        AppointmentRead.from_appointment(a, professionals.get(a.professional_id))
        for a in appointments
    ]


class Identity(BaseModel):
    subject_id: int
    role: str


# --- Dependencies ---

def get_identity(
    x_subject_id: Optional[int] = Header(None),
    x_subject_role: Optional[str] = Header(None),
) -> Identity:
    # Authentication happens upstream; the gateway forwards who the caller is
    if x_subject_id is None or not x_subject_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Caller identity required")
    return Identity(subject_id=x_subject_id, role=x_subject_role)


def require_patient(identity: Identity = Depends(get_identity)) -> Identity:
    if identity.role != config.PATIENT_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return identity


def get_scheduler(request: Request, session: AsyncSession = Depends(get_session)) -> SchedulingService:
    return SchedulingService(session, request.app.state.slot_locks)


def get_directory(session: AsyncSession = Depends(get_session)) -> ProfessionalDirectory:
    return ProfessionalDirectory(session)


def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    """Build the API. Without an engine one is created from DATABASE_URL at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = engine is None
        app_engine = build_engine() if owned else engine
        await init_db(app_engine)
        app.state.engine = app_engine
        app.state.session_factory = build_session_factory(app_engine)
        app.state.slot_locks = SlotLocks()
        logger.info("Database initialized")
        yield
        if owned:
            await app_engine.dispose()

    app = FastAPI(title="Appointment Scheduling Service", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    # --- Professionals ---

    @app.get("/api/professionals", response_model=List[Professional])
    async def list_professionals(directory: ProfessionalDirectory = Depends(get_directory)):
        return await directory.list_professionals()

    @app.get("/api/professionals/specialization/{spec}", response_model=List[Professional])
    async def professionals_by_specialization(
        spec: str, directory: ProfessionalDirectory = Depends(get_directory)
    ):
        return await directory.list_professionals(specialization=spec)

    @app.get("/api/professionals/{professional_id}/availability/{target_date}", response_model=List[str])
    async def get_availability(
        professional_id: int,
        target_date: date,
        scheduler: SchedulingService = Depends(get_scheduler),
    ):
        return await scheduler.list_availability(professional_id, target_date)

    # --- Appointments ---

    @app.post("/api/appointments", status_code=status.HTTP_201_CREATED, response_model=BookingResponse)
    async def book_appointment(
        booking_data: AppointmentCreate,
        identity: Identity = Depends(require_patient),
        scheduler: SchedulingService = Depends(get_scheduler),
    ):
        appointment = await scheduler.book_appointment(
            subject_id=identity.subject_id,
            professional_id=booking_data.professional_id,
            appointment_date=booking_data.appointment_date,
            appointment_time=booking_data.appointment_time,
            reason=booking_data.reason,
        )
        return BookingResponse(message="Appointment booked successfully", appointment_id=appointment.id)

    @app.get("/api/appointments", response_model=List[AppointmentRead])
    async def list_appointments(
        identity: Identity = Depends(require_patient),
        scheduler: SchedulingService = Depends(get_scheduler),
    ):
        appointments = await scheduler.list_appointments_for_subject(identity.subject_id)
        return await read_appointments(appointments, scheduler.directory)

    @app.put("/api/appointments/{appointment_id}", response_model=AppointmentRead)
    async def update_appointment(
        appointment_id: int,
        update: StatusUpdate,
        identity: Identity = Depends(get_identity),
        scheduler: SchedulingService = Depends(get_scheduler),
    ):
        appointment = await scheduler.update_appointment_status(
            identity.subject_id, appointment_id, update.status
        )
        return (await read_appointments([appointment], scheduler.directory))[0]

    @app.post("/api/appointments/{appointment_id}/cancel", response_model=AppointmentRead)
    async def cancel_appointment(
        appointment_id: int,
        identity: Identity = Depends(get_identity),
        scheduler: SchedulingService = Depends(get_scheduler),
    ):
        appointment = await scheduler.cancel_appointment(identity.subject_id, appointment_id)
        return (await read_appointments([appointment], scheduler.directory))[0]

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=config.HOST, port=config.PORT)
