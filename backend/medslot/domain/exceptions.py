class DomainError(Exception):
    """Base error for the scheduling domain."""


class ValidationError(DomainError):
    """Input rejected before any scheduling work."""


class InvalidDateFormat(ValidationError):
    """Instant string is malformed or ambiguous."""


InvalidTimeFormat = InvalidDateFormat


class InvalidDate(ValidationError):
    """Calendar day is not a valid YYYY-MM-DD date."""


class InvalidWorkingHours(ValidationError):
    """Doctor working hours are malformed or start >= end."""


class InvalidDuration(ValidationError):
    """Appointment duration is not a positive number of minutes."""


class NotFoundError(DomainError):
    pass


class DoctorNotFound(NotFoundError):
    pass


class AppointmentNotFound(NotFoundError):
    pass


class SchedulingError(DomainError):
    """Scheduling rules were violated."""


class SlotUnavailable(SchedulingError):
    """Requested instant is not a slot start on the doctor's grid."""


class SlotAlreadyBooked(SchedulingError):
    """Grid slot is valid but taken by another appointment."""


class PersistenceError(DomainError):
    pass


class Conflict(PersistenceError):
    """Uniqueness constraint on (doctor_id, start) was violated."""


class RetryableError(PersistenceError):
    """The caller may retry the same operation later."""


class PersistenceTimeout(RetryableError):
    pass


class PersistenceUnavailable(RetryableError):
    pass
