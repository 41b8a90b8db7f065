# peoplehub/analytics/dimensions.py
#
# One label function per chart dimension. The chart builders and the
# drill-down selector both go through this registry, so a clicked label
# always selects exactly the employees that produced it.

from dataclasses import dataclass
from typing import Callable, Optional

from peoplehub.analytics.buckets import SALARY_GAP_RANGES, SALARY_RANGES, BucketRange, open_ended
from peoplehub.analytics.references import (
    UNASSIGNED,
    UNDEFINED,
    ReferenceData,
    attrition_risk_label,
    criticality_label,
)
from peoplehub.analytics.scores import attention_score, estimated_salary, salary_gap


@dataclass(frozen=True)
class Dimension:
    name: str
    # (employee, refs) -> label, or None when the employee is not part of this dimension
    label_of: Callable[[object, ReferenceData], Optional[str]]
    # Bucketed dimensions: the raw value and the bands it is cut into
    value_of: Optional[Callable[[object], Optional[float]]] = None
    ranges: Optional[tuple[BucketRange, ...]] = None

    @property
    def is_bucketed(self) -> bool:
        return self.ranges is not None


def _bucketed(name: str, value_of: Callable, ranges) -> Dimension:
    ranges = open_ended(ranges)

    def label_of(emp, refs):
        value = value_of(emp)
        if value is None:
            return None
        for r in ranges:
            if r.contains(value):
                return r.label
        return None

    return Dimension(name=name, label_of=label_of, value_of=value_of, ranges=ranges)


def _leaving_reason_label(emp, refs: ReferenceData) -> Optional[str]:
    # Only employees with a leaving reason take part in this chart
    if not emp.leaving_reason_id:
        return None
    return refs.leaving_reason_name(emp)


DIMENSIONS: dict[str, Dimension] = {
    d.name: d for d in [
        Dimension("project",         lambda e, refs: refs.project_name(e, UNASSIGNED)),
        Dimension("role",            lambda e, refs: refs.role_name(e)),
        Dimension("branch",          lambda e, refs: refs.branch_name(e)),
        Dimension("company",         lambda e, refs: refs.company_name(e)),
        Dimension("seniority",       lambda e, refs: refs.seniority_name(e)),
        Dimension("city",            lambda e, refs: e.city or UNDEFINED),
        Dimension("criticality",     lambda e, refs: criticality_label(e.unit_criticality)),
        Dimension("attrition_risk",  lambda e, refs: attrition_risk_label(e.attrition_risk)),
        Dimension("attention_score", lambda e, refs: str(attention_score(e))),
        Dimension("leaving_reason",  _leaving_reason_label),
        _bucketed("salary",     lambda e: estimated_salary(e.cost), SALARY_RANGES),
        _bucketed("salary_gap", salary_gap,                          SALARY_GAP_RANGES),
    ]
}


def get_dimension(name: str) -> Dimension:
    if name not in DIMENSIONS:
        raise ValueError(f"Unknown dimension: {name}. Available: {list(DIMENSIONS.keys())}")
    return DIMENSIONS[name]


def derive_label(name: str, emp, refs: ReferenceData) -> Optional[str]:
    return get_dimension(name).label_of(emp, refs)


def label_fn(name: str, refs: ReferenceData) -> Callable:
    """Bind refs so the result plugs straight into group_and_reduce as key_fn."""
    dimension = get_dimension(name)
    return lambda emp: dimension.label_of(emp, refs)
