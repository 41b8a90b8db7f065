"""
test_filters.py: the shared filter pipeline.

Every multi-select criterion treats an empty set as "no constraint".
"""

from peoplehub.analytics.filters import FilterCriteria, active_employees, filter_employees


def ids(rows):
    return [emp.id for emp in rows]


class TestDefaults:

    def test_no_criteria_returns_active_employees(self, employees):
        assert ids(filter_employees(employees)) == ["e1", "e2", "e3"]

    def test_include_left(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(include_left=True))) == ["e1", "e2", "e3", "e4"]

    def test_empty_sets_pass_through(self, employees):
        criteria = FilterCriteria(project_ids=frozenset(), criticalities=frozenset(), our_sourcing=frozenset())
        assert ids(filter_employees(employees, criteria)) == ["e1", "e2", "e3"]

    def test_idempotent(self, employees):
        criteria = FilterCriteria(project_ids=frozenset({"p1"}), search="כהן")
        once = filter_employees(employees, criteria)
        assert filter_employees(once, criteria) == once

    def test_active_employees(self, employees):
        assert ids(active_employees(employees)) == ["e1", "e2", "e3"]


class TestSetCriteria:

    def test_project_in_set(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(project_ids=frozenset({"p1"})))) == ["e1", "e2"]

    def test_null_field_fails_a_set_criterion(self, employees):
        # e2 has no criticality at all
        assert ids(filter_employees(employees, FilterCriteria(criticalities=frozenset({4, 0})))) == ["e1", "e3"]

    def test_null_flag_counts_as_false(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(our_sourcing=frozenset({False})))) == ["e2", "e3"]
        assert ids(filter_employees(employees, FilterCriteria(revolving_door=frozenset({True})))) == ["e2"]

    def test_replacement_needed(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(replacement_needed=frozenset({"yes"})))) == ["e1"]

    def test_criteria_and_together(self, employees):
        criteria = FilterCriteria(project_ids=frozenset({"p1"}), role_ids=frozenset({"r2"}))
        assert ids(filter_employees(employees, criteria)) == ["e2"]


class TestTextAndDates:

    def test_search_matches_name_id_number_and_city(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(search="לוי"))) == ["e2"]
        assert ids(filter_employees(employees, FilterCriteria(search="1234"))) == ["e1"]
        assert ids(filter_employees(employees, FilterCriteria(search="חיפה"))) == ["e1"]

    def test_search_is_case_insensitive(self, make_employee):
        emp = make_employee(full_name="Dana Cohen")
        assert filter_employees([emp], FilterCriteria(search="dana")) == [emp]

    def test_blank_search_is_no_constraint(self, employees):
        assert len(filter_employees(employees, FilterCriteria(search="   "))) == 3

    def test_city_substring(self, employees):
        assert ids(filter_employees(employees, FilterCriteria(city="אביב"))) == ["e2"]

    def test_start_date_range_inclusive(self, employees):
        criteria = FilterCriteria(start_date_from="2025-03-10", start_date_to="2025-06-01")
        assert ids(filter_employees(employees, criteria)) == ["e1", "e3"]

    def test_missing_start_date_fails_date_range(self, make_employee):
        emp = make_employee(start_date=None)
        assert filter_employees([emp], FilterCriteria(start_date_from="2000-01-01")) == []
