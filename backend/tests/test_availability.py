from datetime import date, datetime, timedelta, timezone

import pytest

from medslot.domain import Appointment, AvailabilityService, Doctor
from medslot.domain.exceptions import InvalidDate, InvalidWorkingHours
from medslot.domain.entities import WorkingHours


def at(hour, minute=0, day=1):
    return datetime(2024, 5, day, hour, minute, tzinfo=timezone.utc)


def test_no_appointments_returns_full_grid(repository, doctor):
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, "2024-05-01") == [at(9), at(9, 30)]


def test_accepts_date_objects(repository, doctor):
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, date(2024, 5, 1)) == [at(9), at(9, 30)]


def test_booked_slot_is_excluded(repository, doctor):
    repository.create_appointment(Appointment.new(doctor.id, at(9), 30))
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, "2024-05-01") == [at(9, 30)]


def test_long_appointment_blocks_following_slots(repository):
    doctor = repository.add_doctor(Doctor.new("Dr. Long", "09:00", "12:00"))
    repository.create_appointment(Appointment.new(doctor.id, at(9, 30), 75))
    slots = AvailabilityService(repository).available_slots(doctor, "2024-05-01")
    assert slots == [at(9), at(11), at(11, 30)]


def test_other_days_and_doctors_do_not_block(repository, doctor):
    other = repository.add_doctor(Doctor.new("Dr. Other", "09:00", "10:00"))
    repository.create_appointment(Appointment.new(other.id, at(9), 30))
    repository.create_appointment(Appointment.new(doctor.id, at(9, day=2), 30))
    assert AvailabilityService(repository).available_slots(doctor, "2024-05-01") == [at(9), at(9, 30)]


def test_excluding_an_appointment(repository, doctor):
    own = repository.create_appointment(Appointment.new(doctor.id, at(9), 30))
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, "2024-05-01", exclude_appointment=own.id) == [at(9), at(9, 30)]


def test_slots_are_spaced_and_counted(repository):
    doctor = repository.add_doctor(Doctor.new("Dr. Day", "08:00", "17:00"))
    blocked = [at(10), at(13, 30)]
    for start in blocked:
        repository.create_appointment(Appointment.new(doctor.id, start, 30))
    slots = AvailabilityService(repository).available_slots(doctor, "2024-05-01")
    assert len(slots) == 18 - len(blocked)
    assert all(at(8) <= s < at(17) for s in slots)
    assert all((s - at(8)) % timedelta(minutes=30) == timedelta(0) for s in slots)
    assert slots == sorted(slots)


def test_idempotent_without_writes(repository, doctor):
    repository.create_appointment(Appointment.new(doctor.id, at(9, 30), 30))
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, "2024-05-01") == availability.available_slots(doctor, "2024-05-01")


@pytest.mark.parametrize(
    "day", ["", "2024-02-30", "01-05-2024", "2024-05-01T09:00:00.000Z", "\u0662\u0660\u0662\u0664-05-01", None]
)
def test_invalid_day(repository, doctor, day):
    with pytest.raises(InvalidDate):
        AvailabilityService(repository).available_slots(doctor, day)


def test_malformed_working_hours(repository):
    broken = Doctor(_id="doc-broken", _name="Dr. Broken", _working_hours=WorkingHours("17:00", "09:00"))
    with pytest.raises(InvalidWorkingHours):
        AvailabilityService(repository).available_slots(broken, "2024-05-01")


def test_appointment_carried_over_from_previous_day_blocks(repository, doctor):
    # 09:45 on the 1st plus a full day ends at 09:45 on the 2nd
    repository.create_appointment(Appointment.new(doctor.id, at(9, 45), 24 * 60))
    availability = AvailabilityService(repository)
    assert availability.available_slots(doctor, "2024-05-02") == []
    assert availability.available_slots(doctor, "2024-05-03") == [at(9, day=3), at(9, 30, day=3)]


def test_working_hours_need_ascii_digits():
    with pytest.raises(InvalidWorkingHours):
        Doctor.new("Dr. Ana", "\u0660\u0669:00", "17:00")
