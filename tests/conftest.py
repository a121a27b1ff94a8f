from datetime import date
from decimal import Decimal

import pytest

import db
from liability import annotate_student
from models import PaymentRecord, Student


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "fees.db")
    db.init_db()
    return db


@pytest.fixture
def make_student():
    """Build an AnnotatedStudent from plain values."""
    counter = iter(range(1, 1000))

    def _make(name, admission, today, paid_till=None, fee="400", phone=None, cancel_date=None):
        sid = next(counter)
        student = Student(
            id=sid,
            name=name,
            admission_date=admission,
            monthly_fee=Decimal(fee),
            phone=phone,
            cancel_date=cancel_date,
        )
        payments = [PaymentRecord(None, sid, paid_till)] if paid_till else []
        return annotate_student(student, payments, today)

    return _make


@pytest.fixture
def today():
    return date(2024, 4, 28)
