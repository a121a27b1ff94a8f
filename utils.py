"""
utils.py
Input validation, dates, pandas reports/exports, sample data.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, timedelta
from decimal import Decimal
import pandas as pd

import db
from calendar_math import add_months, last_day_of_month, parse_iso
from errors import FeeTrackerError
from liability import normalize_fee
from models import AnnotatedStudent, PaymentRecord, Student
from reminders import next_due_date

ROSTER_COLUMNS = [
    "id", "name", "phone", "admission_date", "cancel_date", "monthly_fee",
    "paid_till", "pending_months", "pending_amount",
]


def today() -> date:
    return date.today()


def parse_fee(value) -> Decimal:
    return normalize_fee(value)


def validate_student_inputs(
    name: str,
    admission_date,
    monthly_fee,
    cancel_date=None,
    initial_paid_till=None,
) -> list[str]:
    errors: list[str] = []
    if not (name or "").strip():
        errors.append("Name is required.")
    try:
        parse_fee(monthly_fee)
    except FeeTrackerError as e:
        errors.append(str(e))

    admission = None
    try:
        admission = parse_iso(admission_date, "admission_date")
    except FeeTrackerError as e:
        errors.append(str(e))

    if cancel_date not in (None, ""):
        try:
            cancel = parse_iso(cancel_date, "cancel_date")
            if admission and cancel < admission:
                errors.append("Cancellation date must not be before admission date.")
        except FeeTrackerError as e:
            errors.append(str(e))

    if initial_paid_till not in (None, ""):
        try:
            parse_iso(initial_paid_till, "initial_paid_till")
        except FeeTrackerError as e:
            errors.append(str(e))
    return errors


def roster_frame(students: list[AnnotatedStudent]) -> pd.DataFrame:
    rows = [
        {
            "id": s.id,
            "name": s.name,
            "phone": s.student.phone,
            "admission_date": s.student.admission_date.isoformat(),
            "cancel_date": s.student.cancel_date.isoformat() if s.student.cancel_date else None,
            "monthly_fee": s.student.monthly_fee,
            "paid_till": s.paid_till.isoformat() if s.paid_till else None,
            "pending_months": s.pending_months,
            "pending_amount": s.pending_amount,
        }
        for s in students
    ]
    if not rows:
        return pd.DataFrame(columns=ROSTER_COLUMNS)
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)


def fee_summary(students: list[AnnotatedStudent]) -> dict:
    pending = [s for s in students if s.is_pending]
    return {
        "total_students": len(students),
        "pending_students": len(pending),
        "cleared_students": len(students) - len(pending),
        "total_pending_amount": sum((s.pending_amount for s in pending), Decimal("0.00")),
    }


def roster_to_csv_bytes(students: list[AnnotatedStudent]) -> bytes:
    return roster_frame(students).to_csv(index=False).encode("utf-8")


def payments_to_csv_bytes(payments: list[PaymentRecord]) -> bytes:
    df = pd.DataFrame([asdict(p) for p in payments], columns=["id", "student_id", "paid_through"])
    return df.to_csv(index=False).encode("utf-8")


def pending_by_month(students: list[AnnotatedStudent]) -> pd.DataFrame:
    """Overdue students grouped by the month their first unpaid cycle began."""
    rows = [
        {
            "overdue_since": next_due_date(s).strftime("%Y-%m"),
            "name": s.name,
            "pending_amount": s.pending_amount,
        }
        for s in students
        if s.is_pending
    ]
    if not rows:
        return pd.DataFrame(columns=["overdue_since", "students", "pending_amount"])
    df = pd.DataFrame(rows)
    return (
        df.groupby("overdue_since", as_index=False)
        .agg(
            students=("name", "count"),
            pending_amount=("pending_amount", lambda x: sum(x, Decimal("0.00"))),
        )
        .sort_values("overdue_since")
        .reset_index(drop=True)
    )


def insert_sample_data(today_: date | None = None) -> list[int]:
    """
    Insert 3 students with payment history (safe to run multiple times: adds new rows each time).
    """
    today_ = today_ or today()
    this_month_end = last_day_of_month(today_)

    # Student 1: three cycles overdue
    s1_admission = add_months(today_, -8)
    s1_paid = last_day_of_month(add_months(today_, -3))

    # Student 2: settled through the current month, due again soon
    s2_admission = add_months(today_, -4)

    # Student 3: admitted this month, nothing due yet
    s3_admission = today_ - timedelta(days=min(today_.day - 1, 5))

    samples = [
        (Student(None, "Ahmed Hassan", s1_admission, Decimal("400"), phone="03000000001"), s1_paid),
        (Student(None, "Mona Ali", s2_admission, Decimal("350"), phone="03000000002"), this_month_end),
        (Student(None, "Omar Samy", s3_admission, Decimal("400")), None),
    ]
    return [db.add_student(student, initial_paid_till=paid) for student, paid in samples]
