"""
HTTP adapter for the booking engine.

Run with ``uvicorn medslot.main:app`` (settings come from the environment),
or build an app explicitly through :func:`create_app`.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .db import Database
from .domain import BookingService, Doctor, format_instant
from .domain.exceptions import (
    DomainError,
    NotFoundError,
    RetryableError,
    SlotAlreadyBooked,
)
from .domain.ports import Repository
from .logger import configure_logging
from .schemas import AppointmentCreate, AppointmentOut, AppointmentUpdate, DoctorCreate, DoctorOut
from .storage import MemoryStore

logger = logging.getLogger(__name__)

DEMO_DOCTORS = (
    ("Dr. Ana Cardoso", "Cardiology", "09:00", "17:00"),
    ("Dr. Bruno Silva", "Orthopedics", "08:00", "12:00"),
)


def build_repository(settings: Settings) -> Repository:
    if settings.storage == "memory":
        return MemoryStore(timeout=settings.db_timeout)
    return Database(settings.db_path, timeout=settings.db_timeout)


def _seed(repository: Repository) -> None:
    if repository.list_doctors():
        return
    for name, specialization, start, end in DEMO_DOCTORS:
        repository.add_doctor(Doctor.new(name, start, end, specialization=specialization))
    logger.info("Seeded %d demo doctors", len(DEMO_DOCTORS))


def _handle_domain_error(err: DomainError) -> None:
    if isinstance(err, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(err, SlotAlreadyBooked):
        code = status.HTTP_409_CONFLICT
    elif isinstance(err, RetryableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(err)) from err


def get_service(request: Request) -> BookingService:
    return request.app.state.service


def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    repository = repository or build_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_file)
        repository.open()
        if settings.seed_demo:
            _seed(repository)
        try:
            yield
        finally:
            repository.close()

    app = FastAPI(title="MedSlot", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.repository = repository
    app.state.service = BookingService(repository, lock_timeout=settings.lock_timeout)

    @app.get("/doctors", response_model=List[DoctorOut])
    def list_doctors():
        try:
            return [DoctorOut.from_entity(d) for d in repository.list_doctors()]
        except DomainError as err:
            _handle_domain_error(err)

    @app.post("/doctors", response_model=DoctorOut, status_code=status.HTTP_201_CREATED)
    def create_doctor(payload: DoctorCreate):
        try:
            doctor = Doctor.new(
                payload.name,
                payload.workingHours.start,
                payload.workingHours.end,
                specialization=payload.specialization,
            )
            return DoctorOut.from_entity(repository.add_doctor(doctor))
        except DomainError as err:
            _handle_domain_error(err)

    @app.get("/doctors/{doctor_id}", response_model=DoctorOut)
    def get_doctor(doctor_id: str, service: BookingService = Depends(get_service)):
        try:
            return DoctorOut.from_entity(service.get_doctor(doctor_id))
        except DomainError as err:
            _handle_domain_error(err)

    @app.get("/doctors/{doctor_id}/slots", response_model=List[str])
    def available_slots(
        doctor_id: str,
        date: str = Query(..., description="Calendar day, YYYY-MM-DD"),
        service: BookingService = Depends(get_service),
    ):
        try:
            return [format_instant(s) for s in service.available_slots(doctor_id, date)]
        except DomainError as err:
            _handle_domain_error(err)

    @app.get("/appointments", response_model=List[AppointmentOut])
    def list_appointments(doctor_id: Optional[str] = Query(default=None)):
        try:
            return [AppointmentOut.from_entity(a) for a in repository.list_appointments(doctor_id)]
        except DomainError as err:
            _handle_domain_error(err)

    @app.get("/appointments/{appointment_id}", response_model=AppointmentOut)
    def get_appointment(appointment_id: str, service: BookingService = Depends(get_service)):
        try:
            return AppointmentOut.from_entity(service.get_appointment(appointment_id))
        except DomainError as err:
            _handle_domain_error(err)

    @app.post("/appointments", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
    def book(payload: AppointmentCreate, service: BookingService = Depends(get_service)):
        try:
            appointment = service.book(
                payload.doctorId,
                payload.date,
                payload.duration,
                appointment_type=payload.appointmentType,
                patient_name=payload.patientName,
                notes=payload.notes,
            )
            return AppointmentOut.from_entity(appointment)
        except DomainError as err:
            _handle_domain_error(err)

    @app.put("/appointments/{appointment_id}", response_model=AppointmentOut)
    def reschedule(
        appointment_id: str,
        payload: AppointmentUpdate,
        service: BookingService = Depends(get_service),
    ):
        try:
            appointment = service.reschedule(appointment_id, payload.date, payload.duration)
            return AppointmentOut.from_entity(appointment)
        except DomainError as err:
            _handle_domain_error(err)

    @app.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_appointment(appointment_id: str, service: BookingService = Depends(get_service)):
        try:
            service.cancel(appointment_id)
        except DomainError as err:
            _handle_domain_error(err)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    # ``uvicorn medslot.main:app``; built on first access
    global _app
    if name != "app":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    if _app is None:
        _app = create_app()
    return _app
