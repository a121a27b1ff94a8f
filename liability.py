"""
liability.py
Pending-month and pending-amount computation for a student.

Billing is by whole calendar month. A payment record settles every cycle up
to and including the month of its ``paid_through`` date; the first unpaid
cycle starts on the first day of the following month and counts in full as
soon as that day arrives.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from calendar_math import as_date, first_of_next_month, months_between
from errors import CancelBeforeAdmission, NegativeFee
from models import CENT, AnnotatedStudent, LiabilityView, PaymentRecord, Student


def normalize_fee(value) -> Decimal:
    """Convert a fee to Decimal via str() so 0.1-style floats stay exact."""
    if isinstance(value, bool):
        raise NegativeFee(value)
    try:
        fee = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise NegativeFee(value) from None
    if not fee.is_finite() or fee < 0:
        raise NegativeFee(value)
    return fee


def compute_liability(
    admission_date: date,
    paid_through: date | None,
    monthly_fee,
    today: date,
    cancel_date: date | None = None,
) -> LiabilityView:
    admission = as_date(admission_date, "admission_date")
    paid = as_date(paid_through, "paid_through") if paid_through is not None else None
    today = as_date(today, "today")
    fee = normalize_fee(monthly_fee)

    if cancel_date is not None:
        cancel = as_date(cancel_date, "cancel_date")
        if cancel < admission:
            raise CancelBeforeAdmission(admission, cancel)
        # no accrual after the cancellation month
        today = min(today, cancel)

    if admission > today:
        return LiabilityView(0, Decimal("0.00"))

    next_due = first_of_next_month(paid or admission)
    if today < next_due:
        months = 0
    else:
        months = months_between(next_due, today) + 1

    amount = (fee * months).quantize(CENT, rounding=ROUND_HALF_UP)
    return LiabilityView(months, amount)


def effective_paid_through(payments: Iterable[PaymentRecord]) -> date | None:
    """Latest paid_through across records, regardless of insertion order."""
    dates = [as_date(p.paid_through, "paid_through") for p in payments]
    return max(dates) if dates else None


def annotate_student(
    student: Student, payments: Iterable[PaymentRecord], today: date
) -> AnnotatedStudent:
    own = [p for p in payments if p.student_id == student.id]
    paid_till = effective_paid_through(own)
    # annotated rows are sorted and exported, so they carry plain dates only
    student = replace(
        student,
        admission_date=as_date(student.admission_date, "admission_date"),
        cancel_date=as_date(student.cancel_date, "cancel_date") if student.cancel_date else None,
    )
    view = compute_liability(
        student.admission_date,
        paid_till,
        student.monthly_fee,
        today,
        cancel_date=student.cancel_date,
    )
    return AnnotatedStudent(
        student=student,
        paid_till=paid_till,
        pending_months=view.pending_months,
        pending_amount=view.pending_amount,
    )


def annotate_roster(
    students: Iterable[Student], payments: Iterable[PaymentRecord], today: date
) -> list[AnnotatedStudent]:
    by_student: dict[int | None, list[PaymentRecord]] = defaultdict(list)
    for p in payments:
        by_student[p.student_id].append(p)
    return [annotate_student(s, by_student.get(s.id, []), today) for s in students]
