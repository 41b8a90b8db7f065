# peoplehub/analytics/overview.py
#
# Home-screen counters and the left-employees list.

import logging
from datetime import date, timedelta
from typing import Optional

import pandas as pd

from peoplehub.analytics.collation import hebrew_sort_key
from peoplehub.analytics.filters import active_employees
from peoplehub.analytics.references import ReferenceData, resolve_name
from peoplehub.analytics.scores import tenure_months

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 7


def _parse(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def next_occurrence(original: date, today: date) -> date:
    """The next yearly recurrence of original's month/day on or after today. 29 Feb rolls to 1 Mar."""
    def in_year(year: int) -> date:
        try:
            return original.replace(year=year)
        except ValueError:
            return date(year, 3, 1)

    upcoming = in_year(today.year)
    if upcoming < today:
        upcoming = in_year(today.year + 1)
    return upcoming


def _upcoming(employees, date_field: str, today: date, years_key: str) -> list[dict]:
    window_end = today + timedelta(days=UPCOMING_WINDOW_DAYS)
    rows = []
    for emp in employees:
        original = _parse(getattr(emp, date_field))
        if original is None:
            continue
        upcoming = next_occurrence(original, today)
        if upcoming > window_end:
            continue
        rows.append({
            "id":         emp.id,
            "full_name":  emp.full_name,
            "date":       upcoming.isoformat(),
            "days_until": (upcoming - today).days,
            years_key:    upcoming.year - original.year,
        })
    return sorted(rows, key=lambda r: r["days_until"])


def headcount_overview(employees, today: Optional[date] = None) -> dict:
    today = today or date.today()
    active = active_employees(employees)

    hired_this_month = []
    for emp in active:
        started = _parse(emp.start_date)
        if started and started.year == today.year and started.month == today.month:
            hired_this_month.append({"id": emp.id, "full_name": emp.full_name, "start_date": emp.start_date})

    birthdays     = _upcoming(active, "birth_date", today, "upcoming_age")
    anniversaries = _upcoming(active, "start_date", today, "years_at_work")
    # A hire from this week is not an anniversary
    anniversaries = [a for a in anniversaries if a["years_at_work"] > 0]

    return {
        "total_employees":             len(active),
        "upcoming_birthdays":          birthdays,
        "hired_this_month":            hired_this_month,
        "upcoming_work_anniversaries": anniversaries,
    }


def left_employees(employees, refs: ReferenceData, search: str = "", today: Optional[date] = None) -> list[dict]:
    """Employees flagged as left, with tenure in months, sorted by name."""
    today = today or date.today()
    needle = search.strip().lower()

    rows = []
    for emp in employees:
        if not emp.is_left:
            continue
        if needle and needle not in (emp.full_name or "").lower():
            continue
        rows.append({
            "id":             emp.id,
            "full_name":      emp.full_name,
            # Stale role ids still show something identifiable
            "role_name":      resolve_name(refs.roles, emp.job_role_id, emp.job_role_id or "-"),
            "start_date":     emp.start_date,
            "left_date":      emp.left_date,
            "left_reason":    emp.left_reason,
            "left_notes":     emp.left_notes,
            "tenure_months":  tenure_months(emp.start_date, emp.left_date or today.isoformat()),
        })

    logger.debug("Left employees: %d rows (search=%r)", len(rows), search)
    return sorted(rows, key=lambda r: hebrew_sort_key(r["full_name"]))
