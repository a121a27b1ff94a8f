"""
reminders.py
Pick which students to remind and in what order. Filtering and sorting only;
composing and sending messages happens downstream.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from calendar_math import as_date, first_of_next_month
from models import AnnotatedStudent, ReminderWindow

logger = logging.getLogger(__name__)

PENDING_SORTS = ("amount", "longest_pending")


def _urgency_key(s: AnnotatedStudent):
    # unpaid the longest first; name and id keep ties stable
    return (s.baseline, s.name.lower(), s.id is None, s.id or 0)


def _resolve_window(window) -> ReminderWindow:
    if isinstance(window, ReminderWindow):
        return window
    if isinstance(window, str):
        return ReminderWindow.from_key(window)
    raise ValueError(f"unsupported reminder window: {window!r}")


def next_due_date(student: AnnotatedStudent) -> date:
    return first_of_next_month(student.baseline)


def search_by_name(students: Iterable[AnnotatedStudent], term: str | None) -> list[AnnotatedStudent]:
    term = (term or "").strip().lower()
    if not term:
        return list(students)
    return [s for s in students if term in s.name.lower()]


def _is_cancelled(student: AnnotatedStudent, today: date) -> bool:
    cancel = student.student.cancel_date
    return cancel is not None and as_date(cancel) <= today


def select_for_reminder(
    students: Iterable[AnnotatedStudent],
    window,
    today: date,
    search: str | None = None,
) -> list[AnnotatedStudent]:
    """
    Overdue students are always selected. A DUE_WITHIN window also selects
    students whose next due date falls in [today, today + days], so they can
    be warned before the cycle starts. Cancelled students only get the
    overdue treatment.
    """
    window = _resolve_window(window)
    today = as_date(today, "today")
    candidates = search_by_name(students, search)

    horizon = today + timedelta(days=window.days) if window.days is not None else None
    selected = []
    for s in candidates:
        if s.is_pending:
            selected.append(s)
        elif horizon is not None and not _is_cancelled(s, today):
            if today <= next_due_date(s) <= horizon:
                selected.append(s)

    selected.sort(key=_urgency_key)
    logger.debug(
        "Reminder window %s: %d of %d students selected",
        window.days if window.days is not None else "all_pending",
        len(selected),
        len(candidates),
    )
    return selected


def pending_students(
    students: Iterable[AnnotatedStudent],
    sort_by: str = "amount",
    search: str | None = None,
) -> list[AnnotatedStudent]:
    if sort_by not in PENDING_SORTS:
        raise ValueError(f"sort_by must be one of {PENDING_SORTS}, got {sort_by!r}")
    rows = [s for s in search_by_name(students, search) if s.is_pending]
    if sort_by == "amount":
        rows.sort(key=lambda s: (-s.pending_amount, _urgency_key(s)))
    else:
        rows.sort(key=_urgency_key)
    return rows
