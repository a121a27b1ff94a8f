from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from errors import CancelBeforeAdmission, InvalidDate, NegativeFee
from liability import annotate_roster, compute_liability, effective_paid_through, normalize_fee
from models import LiabilityView, PaymentRecord, Student


@pytest.mark.parametrize(
    "admission, paid_through, today, months",
    [
        # first cycle not yet due (due 2024-02-01)
        (date(2024, 1, 15), None, date(2024, 1, 20), 0),
        (date(2024, 1, 15), None, date(2024, 3, 10), 2),
        (date(2023, 9, 1), date(2024, 3, 31), date(2024, 3, 31), 0),
        (date(2024, 1, 15), None, date(2024, 2, 1), 1),
        (date(2024, 1, 15), None, date(2024, 1, 31), 0),
        (date(2023, 11, 20), date(2023, 12, 31), date(2024, 2, 29), 2),
    ],
)
def test_pending_months(admission, paid_through, today, months):
    view = compute_liability(admission, paid_through, Decimal("400"), today)
    assert view.pending_months == months
    assert view.pending_amount == Decimal("400") * months


def test_scenario_amount_is_two_decimal_places():
    view = compute_liability(date(2024, 1, 15), None, 400, date(2024, 3, 10))
    assert view == LiabilityView(2, Decimal("800.00"))
    assert str(view.pending_amount) == "800.00"


def test_fee_waiver_owes_nothing():
    view = compute_liability(date(2023, 1, 1), None, 0, date(2024, 6, 1))
    assert view.pending_months == 17
    assert view.pending_amount == Decimal("0.00")


def test_admission_in_future_owes_nothing_even_with_earlier_payment():
    view = compute_liability(date(2024, 9, 1), date(2024, 1, 31), 400, date(2024, 6, 1))
    assert view.pending_months == 0
    assert view.pending_amount == 0


@pytest.mark.parametrize(
    "fee, months_owed_today, expected",
    [
        (Decimal("333.335"), date(2024, 2, 5), Decimal("333.34")),
        (Decimal("0.005"), date(2024, 2, 5), Decimal("0.01")),
        (Decimal("33.333"), date(2024, 4, 5), Decimal("100.00")),
        (0.1, date(2024, 4, 5), Decimal("0.30")),
        ("1250.50", date(2024, 3, 1), Decimal("2501.00")),
    ],
)
def test_amount_rounds_half_up(fee, months_owed_today, expected):
    view = compute_liability(date(2024, 1, 10), None, fee, months_owed_today)
    assert view.pending_amount == expected


def test_amount_is_months_times_fee_across_a_year():
    fee = Decimal("1234.56")
    today = date(2024, 1, 1)
    while today < date(2025, 1, 1):
        view = compute_liability(date(2023, 12, 15), None, fee, today)
        assert view.pending_amount == (fee * view.pending_months).quantize(Decimal("0.01"))
        today += timedelta(days=9)


def test_pending_months_never_decrease_as_time_passes():
    previous = 0
    today = date(2023, 12, 1)
    for _ in range(120):
        view = compute_liability(date(2024, 1, 15), date(2024, 2, 29), 400, today)
        assert view.pending_months >= previous
        previous = view.pending_months
        today += timedelta(days=5)
    assert previous > 0


def test_same_inputs_same_result():
    args = (date(2024, 1, 15), date(2024, 2, 29), Decimal("400"), date(2024, 8, 3))
    assert compute_liability(*args) == compute_liability(*args)


def test_time_of_day_is_ignored():
    view = compute_liability(
        datetime(2024, 1, 15, 23, 0), None, 400, datetime(2024, 2, 1, 0, 0, 1)
    )
    assert view.pending_months == 1


def test_cancellation_stops_accrual():
    view = compute_liability(
        date(2024, 1, 15), None, 400, date(2024, 12, 1), cancel_date=date(2024, 3, 20)
    )
    assert view.pending_months == 2


def test_future_cancellation_has_no_effect_yet():
    view = compute_liability(
        date(2024, 1, 15), None, 400, date(2024, 3, 10), cancel_date=date(2024, 9, 1)
    )
    assert view.pending_months == 2


def test_cancel_before_admission_rejected():
    with pytest.raises(CancelBeforeAdmission):
        compute_liability(date(2024, 3, 1), None, 400, date(2024, 5, 1), cancel_date=date(2024, 2, 1))


@pytest.mark.parametrize("fee", [-1, Decimal("-0.01"), "-5", "abc", "NaN", True, None])
def test_bad_fee_rejected(fee):
    with pytest.raises(NegativeFee):
        compute_liability(date(2024, 1, 1), None, fee, date(2024, 5, 1))


def test_bad_dates_rejected():
    with pytest.raises(InvalidDate):
        compute_liability("2024-01-15", None, 400, date(2024, 5, 1))
    with pytest.raises(InvalidDate):
        compute_liability(date(2024, 1, 15), "soon", 400, date(2024, 5, 1))


def test_normalize_fee_keeps_decimal_exact():
    assert normalize_fee(0.1) == Decimal("0.1")
    assert normalize_fee(" 400 ") == Decimal("400")
    assert normalize_fee(Decimal("12.50")) == Decimal("12.50")


def test_effective_paid_through_is_latest_not_last_created():
    records = [
        PaymentRecord(1, 7, date(2024, 5, 31)),
        PaymentRecord(2, 7, date(2024, 3, 31)),
    ]
    assert effective_paid_through(records) == date(2024, 5, 31)
    assert effective_paid_through([]) is None


def test_annotate_roster_groups_payments_by_student():
    students = [
        Student(1, "Asha", date(2024, 1, 10), Decimal("400")),
        Student(2, "Bilal", date(2024, 1, 10), Decimal("250")),
        Student(3, "Chand", date(2024, 1, 10), Decimal("300")),
    ]
    payments = [
        PaymentRecord(1, 1, date(2024, 4, 30)),
        PaymentRecord(2, 2, date(2024, 2, 29)),
        PaymentRecord(3, 1, date(2024, 2, 29)),
    ]
    asha, bilal, chand = annotate_roster(students, payments, date(2024, 5, 15))

    assert asha.paid_till == date(2024, 4, 30)
    assert (asha.pending_months, asha.pending_amount) == (1, Decimal("400.00"))
    assert bilal.paid_till == date(2024, 2, 29)
    assert (bilal.pending_months, bilal.pending_amount) == (3, Decimal("750.00"))
    assert chand.paid_till is None
    assert chand.pending_months == 4
    assert chand.baseline == date(2024, 1, 10)
