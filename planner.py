"""
planner.py
Propose the new paid-through date for a payment covering N months.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from calendar_math import add_months, as_date, first_of_month, last_day_of_month
from errors import MonthsToClearOutOfRange
from liability import normalize_fee
from models import CENT, CLEAR_MONTHS, AnnotatedStudent


@dataclass(frozen=True)
class PaymentPlan:
    paid_through: date
    months: int
    amount: Decimal


def plan_paid_through(
    admission_date: date,
    paid_through: date | None,
    months_to_clear: int,
    today: date,
) -> date:
    """
    Result is always a month-end date, the form compute_liability expects
    as a baseline.
    """
    if isinstance(months_to_clear, bool) or not isinstance(months_to_clear, int) or months_to_clear < 1:
        raise MonthsToClearOutOfRange(months_to_clear)

    admission = as_date(admission_date, "admission_date")
    paid = as_date(paid_through, "paid_through") if paid_through is not None else None
    today = as_date(today, "today")

    month = first_of_month(paid or admission)
    if month <= today:
        # start from the next unpaid cycle
        month = add_months(month, 1)
    month = add_months(month, months_to_clear - 1)
    return last_day_of_month(month)


def plan_for_student(student: AnnotatedStudent, months_to_clear, today: date) -> PaymentPlan:
    """months_to_clear is a month count or a CLEAR_MONTHS key such as "1 year"."""
    if isinstance(months_to_clear, str):
        if months_to_clear not in CLEAR_MONTHS:
            raise MonthsToClearOutOfRange(months_to_clear)
        months_to_clear = CLEAR_MONTHS[months_to_clear]
    paid_through = plan_paid_through(
        student.student.admission_date, student.paid_till, months_to_clear, today
    )
    fee = normalize_fee(student.student.monthly_fee)
    amount = (fee * months_to_clear).quantize(CENT, rounding=ROUND_HALF_UP)
    return PaymentPlan(paid_through=paid_through, months=months_to_clear, amount=amount)
