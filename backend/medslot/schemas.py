from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .domain import SLOT_MINUTES, format_instant
from .domain.entities import parse_time_of_day
from .domain.exceptions import InvalidWorkingHours


class WorkingHoursIn(BaseModel):
    start: str = Field(..., description="Opening time, 'HH:MM' (UTC)")
    end: str = Field(..., description="Closing time, 'HH:MM' (UTC)")

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        try:
            parse_time_of_day(v)
        except InvalidWorkingHours as err:
            raise ValueError(str(err)) from err
        return v


class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    specialization: Optional[str] = None
    workingHours: WorkingHoursIn


class WorkingHoursOut(BaseModel):
    start: str
    end: str

    model_config = ConfigDict(from_attributes=True)


class DoctorOut(BaseModel):
    id: str
    name: str
    specialization: Optional[str] = None
    workingHours: WorkingHoursOut

    @classmethod
    def from_entity(cls, doctor) -> "DoctorOut":
        return cls(
            id=doctor.id,
            name=doctor.name,
            specialization=doctor.specialization,
            workingHours=WorkingHoursOut.model_validate(doctor.working_hours),
        )


class AppointmentCreate(BaseModel):
    doctorId: str
    date: str = Field(..., description="Instant as YYYY-MM-DDTHH:MM:SS.mmmZ")
    duration: int = SLOT_MINUTES
    appointmentType: Optional[str] = None
    patientName: Optional[str] = None
    notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    date: str
    duration: int


class AppointmentOut(BaseModel):
    id: str
    doctorId: str
    date: str
    duration: int
    appointmentType: Optional[str] = None
    patientName: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_entity(cls, appointment) -> "AppointmentOut":
        return cls(
            id=appointment.id,
            doctorId=appointment.doctor_id,
            date=format_instant(appointment.start),
            duration=appointment.duration,
            appointmentType=appointment.appointment_type,
            patientName=appointment.patient_name,
            notes=appointment.notes,
        )
