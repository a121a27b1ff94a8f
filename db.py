"""
db.py
SQLite record store for students and payment records (creates DB/tables, CRUD helpers).
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import date
from pathlib import Path

from calendar_math import as_date, parse_iso
from errors import CancelBeforeAdmission
from liability import annotate_roster, annotate_student, normalize_fee
from models import AnnotatedStudent, PaymentRecord, Student

logger = logging.getLogger(__name__)

DB_FILE = Path(os.environ.get("FEES_DB_FILE") or Path(__file__).with_name("fees.db"))


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> list[sqlite3.Row]:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchall()


def _create_tables() -> None:
    # monthly_fee is stored as TEXT so Decimal amounts survive the round trip
    execute(
        """
        CREATE TABLE IF NOT EXISTS students (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            address TEXT,
            phone TEXT,
            admission_date TEXT NOT NULL,
            cancel_date TEXT,
            monthly_fee TEXT NOT NULL,
            age INTEGER,
            student_class INTEGER
        )
        """
    )

    execute(
        """
        CREATE TABLE IF NOT EXISTS payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL,
            paid_through TEXT NOT NULL,
            FOREIGN KEY(student_id) REFERENCES students(id) ON DELETE CASCADE
        )
        """
    )


def init_db() -> None:
    _create_tables()
    logger.debug("Record store ready at %s", DB_FILE)


def _row_to_student(row) -> Student:
    return Student(
        id=row["id"],
        name=row["name"],
        address=row["address"],
        phone=row["phone"],
        admission_date=parse_iso(row["admission_date"], "admission_date"),
        cancel_date=parse_iso(row["cancel_date"], "cancel_date") if row["cancel_date"] else None,
        monthly_fee=normalize_fee(row["monthly_fee"]),
        age=row["age"],
        student_class=row["student_class"],
    )


def _row_to_payment(row) -> PaymentRecord:
    return PaymentRecord(
        id=row["id"],
        student_id=row["student_id"],
        paid_through=parse_iso(row["paid_through"], "paid_through"),
    )


def add_student(student: Student, initial_paid_till: date | None = None) -> int:
    """
    Insert a student (id is ignored) and, when given, the payment record
    for what they had already paid on admission.
    """
    admission = as_date(student.admission_date, "admission_date")
    cancel = as_date(student.cancel_date, "cancel_date") if student.cancel_date else None
    if cancel is not None and cancel < admission:
        raise CancelBeforeAdmission(admission, cancel)
    fee = normalize_fee(student.monthly_fee)

    sid = execute(
        """
        INSERT INTO students(name, address, phone, admission_date, cancel_date, monthly_fee, age, student_class)
        VALUES(?,?,?,?,?,?,?,?)
        """,
        (
            student.name.strip(),
            student.address,
            student.phone,
            admission.isoformat(),
            cancel.isoformat() if cancel else None,
            str(fee),
            student.age,
            student.student_class,
        ),
    )
    logger.debug("Added student %s (%s)", sid, student.name)
    if initial_paid_till is not None:
        record_payment(sid, initial_paid_till)
    return sid


def record_payment(student_id: int, paid_through: date) -> int:
    paid = as_date(paid_through, "paid_through")
    pid = execute(
        "INSERT INTO payments(student_id, paid_through) VALUES(?,?)",
        (student_id, paid.isoformat()),
    )
    logger.debug("Recorded payment %s: student %s paid through %s", pid, student_id, paid)
    return pid


def delete_student(student_id: int) -> None:
    execute("DELETE FROM students WHERE id = ?", (student_id,))
    logger.debug("Deleted student %s", student_id)


def get_student(student_id: int) -> Student | None:
    row = fetch_one("SELECT * FROM students WHERE id = ?", (student_id,))
    return _row_to_student(row) if row else None


def list_students() -> list[Student]:
    rows = fetch_all("SELECT * FROM students ORDER BY name ASC, id ASC")
    return [_row_to_student(r) for r in rows]


def list_payments(student_id: int | None = None) -> list[PaymentRecord]:
    sql = "SELECT * FROM payments"
    params: tuple = ()
    if student_id is not None:
        sql += " WHERE student_id = ?"
        params = (student_id,)
    sql += " ORDER BY paid_through DESC, id DESC"
    return [_row_to_payment(r) for r in fetch_all(sql, params)]


def student_payment_details(
    student_id: int, today: date
) -> tuple[AnnotatedStudent, list[PaymentRecord]] | None:
    student = get_student(student_id)
    if student is None:
        return None
    payments = list_payments(student_id)
    return annotate_student(student, payments, today), payments


def annotated_roster(today: date) -> list[AnnotatedStudent]:
    return annotate_roster(list_students(), list_payments(), today)
