# peoplehub/analytics/drilldown.py

import logging
from datetime import date
from typing import Optional

from peoplehub.analytics.buckets import find_range
from peoplehub.analytics.collation import hebrew_sort_key
from peoplehub.analytics.dimensions import derive_label, get_dimension
from peoplehub.analytics.references import ReferenceData, UNASSIGNED
from peoplehub.analytics.scores import attention_score, estimated_salary, organization_experience_years, salary_gap

logger = logging.getLogger(__name__)

EMPLOYEE_FIELDS = [
    "id", "full_name", "id_number", "city", "start_date", "birth_date",
    "cost", "real_market_salary", "professional_experience_years",
    "unit_criticality", "attrition_risk", "company_attrition_risk",
    "our_sourcing", "revolving_door", "replacement_needed",
    "attrition_risk_reason", "retention_plan", "company_retention_plan",
    "commander_summary_and_status", "is_left", "left_date", "left_reason",
]


def enrich_row(emp, refs: ReferenceData, today: Optional[date] = None) -> dict:
    """Flatten one employee into a table row with every reference resolved."""
    row = {name: getattr(emp, name, None) for name in EMPLOYEE_FIELDS}

    salary = estimated_salary(emp.cost)
    gap    = salary_gap(emp)

    row.update({
        "role_name":              refs.role_name(emp),
        "seniority_name":         refs.seniority_name(emp),
        "branch_name":            refs.branch_name(emp),
        "project_name":           refs.project_name(emp, UNASSIGNED),
        "company_name":           refs.company_name(emp),
        "leaving_reason_name":    refs.leaving_reason_name(emp),
        "performance_level_name": refs.performance_level_name(emp),
        "attention_score":        attention_score(emp),
        "organization_experience_years": organization_experience_years(emp.start_date, today),
        "estimated_salary":       round(salary) if salary is not None else None,
        "salary_gap":             round(gap) if gap is not None else None,
    })
    return row


def sort_rows_by_name(rows: list[dict]) -> list[dict]:
    return sorted(rows, key=lambda r: hebrew_sort_key(r["full_name"]))


def select_members(employees, dimension: str, label: str, refs: ReferenceData) -> list:
    """
    The exact employees behind one chart segment.
    Bucketed dimensions match by [min, max) membership, not by label text.
    """
    dim = get_dimension(dimension)

    if dim.is_bucketed:
        band = find_range(dim.ranges, label)
        if band is None:
            return []
        members = []
        for emp in employees:
            value = dim.value_of(emp)
            if value is not None and band.contains(value):
                members.append(emp)
        return members

    return [emp for emp in employees if derive_label(dimension, emp, refs) == label]


def drill_down(employees, dimension: str, label: str, refs: ReferenceData) -> list[dict]:
    """Enriched rows for a clicked segment, sorted by full name (Hebrew collation)."""
    members = select_members(employees, dimension, label, refs)
    if not members:
        logger.info("Drill-down %s=%r matched no employees", dimension, label)
    return sort_rows_by_name([enrich_row(emp, refs) for emp in members])
