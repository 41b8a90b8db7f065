# peoplehub/analytics/filters.py
#
# The filter pipeline shared by every dashboard screen.
#
# Convention for every multi-select criterion: an EMPTY set means
# "no constraint", never "match nothing". All criteria AND together.

from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(frozen=True)
class FilterCriteria:
    project_ids:        frozenset = field(default_factory=frozenset)
    branch_ids:         frozenset = field(default_factory=frozenset)
    role_ids:           frozenset = field(default_factory=frozenset)
    company_ids:        frozenset = field(default_factory=frozenset)
    seniority_ids:      frozenset = field(default_factory=frozenset)
    attrition_risks:    frozenset = field(default_factory=frozenset)   # ints 0-5
    criticalities:      frozenset = field(default_factory=frozenset)   # ints 0-5
    our_sourcing:       frozenset = field(default_factory=frozenset)   # {True, False}
    revolving_door:     frozenset = field(default_factory=frozenset)
    replacement_needed: frozenset = field(default_factory=frozenset)   # "yes"/"no"/"undecided"

    search: str = ""                        # name / id number / city
    city:   str = ""                        # city substring
    start_date_from: Optional[str] = None   # inclusive, ISO
    start_date_to:   Optional[str] = None   # inclusive, ISO

    include_left: bool = False


def _in_set(values: frozenset, getter: Callable) -> Callable:
    def predicate(emp) -> bool:
        value = getter(emp)
        return value is not None and value in values
    return predicate


def _flag_in_set(values: frozenset, getter: Callable) -> Callable:
    # A null flag counts as False
    return lambda emp: (getter(emp) is True) in values


def _contains(needle: str, *getters: Callable) -> Callable:
    needle = needle.lower()

    def predicate(emp) -> bool:
        for getter in getters:
            value = getter(emp)
            if value and needle in str(value).lower():
                return True
        return False
    return predicate


def build_predicates(criteria: FilterCriteria) -> list[Callable]:
    """Only the criteria that actually constrain end up in the list."""
    predicates = []

    if not criteria.include_left:
        predicates.append(lambda emp: not emp.is_left)

    set_criteria = [
        (criteria.project_ids,        lambda e: e.project_id),
        (criteria.branch_ids,         lambda e: e.branch_id),
        (criteria.role_ids,           lambda e: e.job_role_id),
        (criteria.company_ids,        lambda e: e.employing_company_id),
        (criteria.seniority_ids,      lambda e: e.seniority_level_id),
        (criteria.attrition_risks,    lambda e: e.attrition_risk),
        (criteria.criticalities,      lambda e: e.unit_criticality),
        (criteria.replacement_needed, lambda e: e.replacement_needed),
    ]
    for values, getter in set_criteria:
        if values:
            predicates.append(_in_set(values, getter))

    if criteria.our_sourcing:
        predicates.append(_flag_in_set(criteria.our_sourcing, lambda e: e.our_sourcing))
    if criteria.revolving_door:
        predicates.append(_flag_in_set(criteria.revolving_door, lambda e: e.revolving_door))

    search = criteria.search.strip()
    if search:
        predicates.append(_contains(search, lambda e: e.full_name, lambda e: e.id_number, lambda e: e.city))

    city = criteria.city.strip()
    if city:
        predicates.append(_contains(city, lambda e: e.city))

    # ISO strings compare correctly as plain strings, no timezone parsing
    if criteria.start_date_from:
        start_from = criteria.start_date_from
        predicates.append(lambda e: bool(e.start_date) and e.start_date >= start_from)
    if criteria.start_date_to:
        start_to = criteria.start_date_to
        predicates.append(lambda e: bool(e.start_date) and e.start_date <= start_to)

    return predicates


def filter_employees(employees, criteria: Optional[FilterCriteria] = None) -> list:
    """Apply every active criterion; all() stops at the first failing predicate."""
    predicates = build_predicates(criteria or FilterCriteria())
    return [emp for emp in employees if all(p(emp) for p in predicates)]


def active_employees(employees) -> list:
    return [emp for emp in employees if not emp.is_left]
