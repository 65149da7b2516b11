import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator, List, Optional

from .config import DEFAULT_DB_PATH
from .domain import Appointment, Doctor, WorkingHours
from .domain.exceptions import (
    AppointmentNotFound,
    Conflict,
    PersistenceTimeout,
    PersistenceUnavailable,
)
from .domain.services import format_instant, parse_instant

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS doctors (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        specialization TEXT,
        working_start TEXT NOT NULL,
        working_end TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS appointments (
        id TEXT PRIMARY KEY,
        doctor_id TEXT NOT NULL REFERENCES doctors(id),
        start TEXT NOT NULL,
        duration INTEGER NOT NULL CHECK (duration > 0),
        appointment_type TEXT,
        patient_name TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (doctor_id, start)
    );
    """,
    "CREATE INDEX IF NOT EXISTS ix_appointments_doctor_start ON appointments (doctor_id, start);",
)


class Database:
    """SQLite-backed repository. Opens one short-lived connection per call."""

    def __init__(self, path: str = DEFAULT_DB_PATH, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout
        self._open = False
        self._state_lock = threading.Lock()

    # --- lifecycle ---
    def open(self) -> None:
        with self._state_lock:
            self._open = True
        with self._connect() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
        logger.info("SQLite repository opened at %s", self.path)

    def close(self) -> None:
        with self._state_lock:
            self._open = False
        logger.info("SQLite repository closed")

    @contextmanager
    def _connect(self, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
        if not self._open:
            raise PersistenceUnavailable("Repository is not open.")
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout if timeout is None else timeout)
        except sqlite3.Error as err:
            logger.warning("Cannot connect to %s: %s", self.path, err)
            raise PersistenceUnavailable(str(err)) from err
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as err:
            conn.rollback()
            raise Conflict(str(err)) from err
        except sqlite3.OperationalError as err:
            conn.rollback()
            if "locked" in str(err) or "busy" in str(err):
                logger.warning("SQLite call timed out: %s", err)
                raise PersistenceTimeout(str(err)) from err
            logger.warning("SQLite call failed: %s", err)
            raise PersistenceUnavailable(str(err)) from err
        finally:
            conn.close()

    # --- doctors ---
    def add_doctor(self, doctor: Doctor, *, timeout: Optional[float] = None) -> Doctor:
        with self._connect(timeout) as conn:
            conn.execute(
                """
                INSERT INTO doctors (id, name, specialization, working_start, working_end)
                VALUES (?, ?, ?, ?, ?);
                """,
                (
                    doctor.id,
                    doctor.name,
                    doctor.specialization,
                    doctor.working_hours.start,
                    doctor.working_hours.end,
                ),
            )
        return doctor

    def find_doctor(self, doctor_id: str, *, timeout: Optional[float] = None) -> Optional[Doctor]:
        with self._connect(timeout) as conn:
            row = conn.execute("SELECT * FROM doctors WHERE id = ?", (doctor_id,)).fetchone()
        return _doctor(row) if row else None

    def list_doctors(self, *, timeout: Optional[float] = None) -> List[Doctor]:
        with self._connect(timeout) as conn:
            rows = conn.execute("SELECT * FROM doctors ORDER BY name").fetchall()
        return [_doctor(row) for row in rows]

    # --- appointments ---
    def find_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        with self._connect(timeout) as conn:
            rows = conn.execute(
                """
                SELECT * FROM appointments
                WHERE doctor_id = ? AND start >= ? AND start < ?
                ORDER BY start
                """,
                (doctor_id, format_instant(start), format_instant(end)),
            ).fetchall()
        return [_appointment(row) for row in rows]

    def find_overlapping(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Appointment]:
        with self._connect(timeout) as conn:
            longest = conn.execute(
                "SELECT MAX(duration) FROM appointments WHERE doctor_id = ?", (doctor_id,)
            ).fetchone()[0]
            if longest is None:
                return []
            # nothing starting earlier than the longest stored duration can still be running
            rows = conn.execute(
                """
                SELECT * FROM appointments
                WHERE doctor_id = ? AND start > ? AND start < ?
                ORDER BY start
                """,
                (doctor_id, format_instant(start - timedelta(minutes=longest)), format_instant(end)),
            ).fetchall()
        return [a for a in map(_appointment, rows) if a.end > start]

    def find_appointment(
        self, doctor_id: str, instant: datetime, *, timeout: Optional[float] = None
    ) -> Optional[Appointment]:
        with self._connect(timeout) as conn:
            row = conn.execute(
                "SELECT * FROM appointments WHERE doctor_id = ? AND start = ?",
                (doctor_id, format_instant(instant)),
            ).fetchone()
        return _appointment(row) if row else None

    def get_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> Optional[Appointment]:
        with self._connect(timeout) as conn:
            row = conn.execute("SELECT * FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
        return _appointment(row) if row else None

    def list_appointments(
        self, doctor_id: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> List[Appointment]:
        with self._connect(timeout) as conn:
            if doctor_id:
                rows = conn.execute(
                    "SELECT * FROM appointments WHERE doctor_id = ? ORDER BY start", (doctor_id,)
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM appointments ORDER BY start").fetchall()
        return [_appointment(row) for row in rows]

    def create_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        with self._connect(timeout) as conn:
            conn.execute(
                """
                INSERT INTO appointments
                    (id, doctor_id, start, duration, appointment_type, patient_name, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    appointment.id,
                    appointment.doctor_id,
                    format_instant(appointment.start),
                    appointment.duration,
                    appointment.appointment_type,
                    appointment.patient_name,
                    appointment.notes,
                    format_instant(appointment.created_at),
                    format_instant(appointment.updated_at),
                ),
            )
        return appointment

    def update_appointment(self, appointment: Appointment, *, timeout: Optional[float] = None) -> Appointment:
        with self._connect(timeout) as conn:
            cur = conn.execute(
                "UPDATE appointments SET start = ?, duration = ?, updated_at = ? WHERE id = ?",
                (
                    format_instant(appointment.start),
                    appointment.duration,
                    format_instant(appointment.updated_at),
                    appointment.id,
                ),
            )
            updated = cur.rowcount
        if not updated:
            raise AppointmentNotFound(f"Appointment {appointment.id} not found")
        return appointment

    def delete_appointment(self, appointment_id: str, *, timeout: Optional[float] = None) -> None:
        with self._connect(timeout) as conn:
            conn.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))


def _doctor(row: sqlite3.Row) -> Doctor:
    return Doctor(
        _id=row["id"],
        _name=row["name"],
        _working_hours=WorkingHours(start=row["working_start"], end=row["working_end"]),
        _specialization=row["specialization"],
    )


def _appointment(row: sqlite3.Row) -> Appointment:
    return Appointment(
        _id=row["id"],
        _doctor_id=row["doctor_id"],
        _start=parse_instant(row["start"]),
        _duration=row["duration"],
        _appointment_type=row["appointment_type"],
        _patient_name=row["patient_name"],
        _notes=row["notes"],
        _created_at=parse_instant(row["created_at"]),
        _updated_at=parse_instant(row["updated_at"]),
    )
