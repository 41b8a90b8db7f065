"""
test_overview.py: home-screen counters and the left-employees list.
"""

from datetime import date

from peoplehub.analytics.overview import headcount_overview, left_employees, next_occurrence

from conftest import TODAY


class TestHeadcountOverview:

    def test_counts_active_only(self, employees):
        assert headcount_overview(employees, TODAY)["total_employees"] == 3

    def test_upcoming_birthday(self, employees):
        birthdays = headcount_overview(employees, TODAY)["upcoming_birthdays"]
        assert [(b["id"], b["days_until"], b["upcoming_age"]) for b in birthdays] == [("e1", 3, 35)]

    def test_hired_this_month(self, employees):
        hired = headcount_overview(employees, TODAY)["hired_this_month"]
        assert [h["id"] for h in hired] == ["e3"]

    def test_work_anniversaries(self, make_employee):
        staff = [
            make_employee(id="old", start_date="2020-06-20"),
            make_employee(id="new", start_date="2025-06-16"),
            make_employee(id="far", start_date="2020-09-01"),
        ]
        anniversaries = headcount_overview(staff, TODAY)["upcoming_work_anniversaries"]
        assert [(a["id"], a["years_at_work"], a["days_until"]) for a in anniversaries] == [("old", 5, 5)]

    def test_today_is_inside_the_window(self, make_employee):
        staff = [make_employee(id="b", birth_date="1990-06-15")]
        birthdays = headcount_overview(staff, TODAY)["upcoming_birthdays"]
        assert birthdays[0]["days_until"] == 0

    def test_leap_day_rolls_to_march(self):
        assert next_occurrence(date(2000, 2, 29), date(2025, 2, 25)) == date(2025, 3, 1)
        assert next_occurrence(date(2000, 2, 29), date(2028, 2, 25)) == date(2028, 2, 29)


class TestLeftEmployees:

    def test_only_left_records(self, employees, refs):
        rows = left_employees(employees, refs, today=TODAY)
        assert [r["id"] for r in rows] == ["e4"]
        assert rows[0]["role_name"] == "מפתח"
        assert rows[0]["tenure_months"] == 28
        assert rows[0]["left_reason"] == "שכר"

    def test_search_by_name(self, employees, refs):
        assert len(left_employees(employees, refs, search="רות")) == 1
        assert left_employees(employees, refs, search="xyz") == []

    def test_stale_role_shows_raw_id(self, make_employee, refs):
        rows = left_employees(
            [make_employee(is_left=True, job_role_id="gone"), make_employee(is_left=True)], refs,
        )
        assert sorted(r["role_name"] for r in rows) == ["-", "gone"]

    def test_still_employed_tenure_runs_to_today(self, make_employee, refs):
        rows = left_employees([make_employee(is_left=True, start_date="2025-01-10")], refs, today=TODAY)
        assert rows[0]["tenure_months"] == 5
