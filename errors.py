"""
errors.py
Validation failures raised at the edge of the fee engine.
"""

from __future__ import annotations


class FeeTrackerError(ValueError):
    """Base class for every rejected input."""


class InvalidDate(FeeTrackerError):
    def __init__(self, value, field: str = "date"):
        self.value = value
        self.field = field
        super().__init__(f"{field} is not a valid calendar date: {value!r}")


class NegativeFee(FeeTrackerError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"monthly fee must be a non-negative amount, got {value!r}")


class MonthsToClearOutOfRange(FeeTrackerError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"months to clear must be an integer >= 1, got {value!r}")


class CancelBeforeAdmission(FeeTrackerError):
    def __init__(self, admission_date, cancel_date):
        self.admission_date = admission_date
        self.cancel_date = cancel_date
        super().__init__(
            f"cancellation date {cancel_date} is before admission date {admission_date}"
        )
