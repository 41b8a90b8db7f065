# peoplehub/analytics/dashboard.py
#
# Builds every chart of the analytics screen from one filtered snapshot.
#
# Each chart is a ChartSpec: which dimension labels the employees, how each
# group reduces, and the call-site post-processing (zero filtering, sorting,
# top-N). Charts the caller's access level does not allow are never computed.

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Optional

from peoplehub.analytics.aggregator import (
    Reduce,
    drop_zeros,
    group_and_reduce,
    sort_by_value,
    top_n,
)
from peoplehub.analytics.buckets import bucketize
from peoplehub.analytics.collation import hebrew_sort_key
from peoplehub.analytics.dimensions import get_dimension, label_fn
from peoplehub.analytics.drilldown import drill_down, enrich_row
from peoplehub.analytics.filters import FilterCriteria, filter_employees
from peoplehub.analytics.references import (
    ReferenceData,
    attrition_risk_domain,
    criticality_domain,
)
from peoplehub.analytics.scores import estimated_salary, salary_gap
from peoplehub.analytics.trends import TrendMode, monthly_series, months_since, trailing_months
from peoplehub.auth import AccessContext
from peoplehub.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Access(IntEnum):
    USER        = 0
    MANAGER     = 1
    SUPER_ADMIN = 2


def access_level(access: AccessContext) -> Access:
    if access.is_super_admin:
        return Access.SUPER_ADMIN
    if access.is_manager:
        return Access.MANAGER
    return Access.USER


# Minimum access needed to see (and drill into) a dimension
DIMENSION_ACCESS = {
    "criticality":     Access.MANAGER,
    "attrition_risk":  Access.MANAGER,
    "attention_score": Access.MANAGER,
    "salary":          Access.SUPER_ADMIN,
    "salary_gap":      Access.SUPER_ADMIN,
}

# Detail-row fields hidden below a given access level
ROW_FIELD_ACCESS = {
    "cost":               Access.MANAGER,
    "real_market_salary": Access.MANAGER,
    "estimated_salary":   Access.SUPER_ADMIN,
    "salary_gap":         Access.SUPER_ADMIN,
}


def redact_row(row: dict, access: AccessContext) -> dict:
    level = access_level(access)
    return {k: v for k, v in row.items() if level >= ROW_FIELD_ACCESS.get(k, Access.USER)}


@dataclass(frozen=True)
class ChartSpec:
    name:        str
    dimension:   str
    reduce:      Reduce = Reduce.COUNT
    field:       Optional[str] = None
    domain:      Optional[str] = None     # "criticality" | "attrition_risk"
    drop_zeros:  bool = False
    sort:        Optional[str] = None     # "value" | "label_numeric"
    limit:       Optional[str] = None     # Settings attribute holding the limit
    access:      Access = Access.USER


CHARTS = [
    ChartSpec("by_project",         "project"),
    ChartSpec("by_role",            "role"),
    ChartSpec("by_branch",          "branch"),
    ChartSpec("by_seniority",       "seniority"),
    ChartSpec("by_company",         "company"),
    ChartSpec("by_city",            "city", sort="value", limit="city_chart_limit"),
    ChartSpec("experience_by_role", "role", reduce=Reduce.MEAN, field="professional_experience_years", sort="value"),
    ChartSpec("leaving_reason",     "leaving_reason", sort="value"),

    # Managers
    ChartSpec("cost_by_project", "project", reduce=Reduce.SUM, field="cost", drop_zeros=True, sort="value", access=Access.MANAGER),
    ChartSpec("cost_by_branch",  "branch",  reduce=Reduce.SUM, field="cost", drop_zeros=True, sort="value", access=Access.MANAGER),
    ChartSpec("cost_by_company", "company", reduce=Reduce.SUM, field="cost", drop_zeros=True, sort="value", access=Access.MANAGER),
    ChartSpec("criticality",     "criticality",     domain="criticality",    access=Access.MANAGER),
    ChartSpec("attrition_risk",  "attrition_risk",  domain="attrition_risk", access=Access.MANAGER),
    ChartSpec("attention_score", "attention_score", sort="label_numeric",    access=Access.MANAGER),
]

DOMAINS = {
    "criticality":    criticality_domain,
    "attrition_risk": attrition_risk_domain,
}


def build_chart(chart: ChartSpec, employees, refs: ReferenceData, settings: Settings) -> list[dict]:
    domain = DOMAINS[chart.domain]() if chart.domain else None
    points = group_and_reduce(
        employees,
        label_fn(chart.dimension, refs),
        reduce=chart.reduce,
        field=chart.field,
        fixed_domain=domain,
    )

    if chart.drop_zeros:
        points = drop_zeros(points)
    if chart.sort == "value":
        points = sort_by_value(points)
    elif chart.sort == "label_numeric":
        points = sorted(points, key=lambda p: int(p["label"]), reverse=True)
    if chart.limit:
        points = top_n(points, getattr(settings, chart.limit))

    return [{**p, "dimension": chart.dimension} for p in points]


def super_admin_metrics(employees) -> dict:
    gaps = [g for g in (salary_gap(emp) for emp in employees) if g is not None]
    return {
        "total_cost":               float(sum(emp.cost or 0 for emp in employees)),
        "total_estimated_salary":   float(sum(estimated_salary(emp.cost) or 0 for emp in employees)),
        "total_real_market_salary": float(sum(emp.real_market_salary or 0 for emp in employees)),
        "revolving_door_count":     sum(1 for emp in employees if emp.revolving_door is True),
        "avg_salary_gap":           sum(gaps) / len(gaps) if gaps else 0.0,
        "employee_count":           len(employees),
    }


@dataclass
class DashboardViewModel:
    """
    Everything the analytics screen renders, plus the exact filtered snapshot
    the charts were built from. Drill-downs run against that snapshot, never
    against a re-filtered live set.
    """
    snapshot:       tuple
    refs:           ReferenceData
    access:         AccessContext
    total_count:    int
    filtered_count: int
    charts:         dict = field(default_factory=dict)
    super_admin_metrics: Optional[dict] = None

    def can_view(self, dimension: str, access: Optional[AccessContext] = None) -> bool:
        return access_level(access or self.access) >= DIMENSION_ACCESS.get(dimension, Access.USER)

    def drill_down(self, dimension: str, label: str, access: Optional[AccessContext] = None) -> list[dict]:
        """
        Rows behind one chart segment. Gating and redaction follow the caller's
        access when given, otherwise the access the dashboard was built for.
        """
        access = access or self.access
        get_dimension(dimension)   # ValueError on unknown names
        if not self.can_view(dimension, access):
            raise PermissionError(f"Dimension '{dimension}' is not available at this access level")
        rows = drill_down(self.snapshot, dimension, label, self.refs)
        return [redact_row(row, access) for row in rows]

    def to_dict(self) -> dict:
        return {
            "total_count":         self.total_count,
            "filtered_count":      self.filtered_count,
            "charts":              self.charts,
            "super_admin_metrics": self.super_admin_metrics,
        }


def compute_dashboard(
    employees,
    refs: ReferenceData,
    criteria: Optional[FilterCriteria],
    access: AccessContext,
    today: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> DashboardViewModel:
    if not access.signed_in:
        raise PermissionError("Sign in to view analytics")

    settings = settings or get_settings()
    today = today or date.today()
    level = access_level(access)

    snapshot = tuple(filter_employees(employees, criteria))
    logger.debug("Dashboard: %d of %d employees after filtering", len(snapshot), len(employees))

    charts = {}
    for chart in CHARTS:
        if level < chart.access:
            logger.debug("Skipping gated chart %s", chart.name)
            continue
        charts[chart.name] = build_chart(chart, snapshot, refs, settings)

    charts["hiring_trend"] = monthly_series(
        snapshot,
        trailing_months(today, settings.hiring_trend_months),
        mode=TrendMode.POINT_IN_MONTH,
    )
    charts["seniority_trend"] = monthly_series(
        snapshot,
        months_since(settings.seniority_trend_epoch, today),
        mode=TrendMode.CUMULATIVE,
        category_fn=label_fn("seniority", refs),
        categories=[s.name for s in refs.seniority_levels],
    )

    metrics = None
    if level >= Access.SUPER_ADMIN:
        salary_dim = get_dimension("salary")
        gap_dim    = get_dimension("salary_gap")
        charts["salary"]     = bucketize([salary_dim.value_of(e) for e in snapshot], salary_dim.ranges)
        charts["salary_gap"] = bucketize([gap_dim.value_of(e) for e in snapshot], gap_dim.ranges)
        metrics = super_admin_metrics(snapshot)

    return DashboardViewModel(
        snapshot=snapshot,
        refs=refs,
        access=access,
        total_count=len(employees),
        filtered_count=len(snapshot),
        charts=charts,
        super_admin_metrics=metrics,
    )


ATTENTION_SORT_KEYS = {
    "attention_score", "full_name", "role_name", "seniority_name", "branch_name",
    "project_name", "unit_criticality", "attrition_risk", "estimated_salary", "start_date",
}


def attention_table(
    employees,
    refs: ReferenceData,
    criteria: Optional[FilterCriteria] = None,
    sort_key: str = "attention_score",
    descending: bool = True,
) -> list[dict]:
    """
    The employees-needing-attention table: enriched rows, sortable by column.
    Nulls always sort last, whichever the direction.
    """
    if sort_key not in ATTENTION_SORT_KEYS:
        raise ValueError(f"Cannot sort by '{sort_key}'. Options: {sorted(ATTENTION_SORT_KEYS)}")

    rows = [enrich_row(emp, refs) for emp in filter_employees(employees, criteria)]

    present = [r for r in rows if r[sort_key] is not None]
    missing = [r for r in rows if r[sort_key] is None]

    if present and isinstance(present[0][sort_key], str):
        present.sort(key=lambda r: hebrew_sort_key(r[sort_key]), reverse=descending)
    else:
        present.sort(key=lambda r: r[sort_key], reverse=descending)

    return present + missing
