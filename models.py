"""
models.py
Domain dataclasses (students, payment records, derived liability) and presets.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from calendar_math import as_date

CURRENCY_PLACES = 2
CENT = Decimal(1).scaleb(-CURRENCY_PLACES)

# Quick-clear buttons offered when recording a payment
CLEAR_MONTHS = {
    "3 months": 3,
    "6 months": 6,
    "1 year": 12,
}

# Look-ahead days for reminder windows; None means overdue students only
REMINDER_WINDOWS = {
    "all_pending": None,
    "1_week": 7,
    "2_weeks": 14,
    "1_month": 30,
}


@dataclass(frozen=True)
class Student:
    id: int | None
    name: str
    admission_date: date
    monthly_fee: Decimal
    address: str | None = None
    phone: str | None = None
    cancel_date: date | None = None
    age: int | None = None
    student_class: int | None = None


@dataclass(frozen=True)
class PaymentRecord:
    id: int | None
    student_id: int
    paid_through: date  # settled up to and including this date's month


@dataclass(frozen=True)
class LiabilityView:
    pending_months: int
    pending_amount: Decimal


@dataclass(frozen=True)
class AnnotatedStudent:
    student: Student
    paid_till: date | None
    pending_months: int
    pending_amount: Decimal

    @property
    def id(self) -> int | None:
        return self.student.id

    @property
    def name(self) -> str:
        return self.student.name

    @property
    def baseline(self) -> date:
        """Date the next billing cycle is counted from."""
        return as_date(self.paid_till or self.student.admission_date)

    @property
    def is_pending(self) -> bool:
        return self.pending_months > 0


@dataclass(frozen=True)
class ReminderWindow:
    days: int | None = None  # None: ALL_PENDING

    def __post_init__(self):
        if self.days is not None and self.days not in (7, 14, 30):
            raise ValueError(f"reminder window must be 7, 14 or 30 days, got {self.days!r}")

    @classmethod
    def all_pending(cls) -> "ReminderWindow":
        return cls(None)

    @classmethod
    def due_within(cls, days: int) -> "ReminderWindow":
        return cls(days)

    @classmethod
    def from_key(cls, key: str) -> "ReminderWindow":
        if key not in REMINDER_WINDOWS:
            raise ValueError(f"unknown reminder window: {key!r}")
        days = REMINDER_WINDOWS[key]
        return cls.all_pending() if days is None else cls.due_within(days)
