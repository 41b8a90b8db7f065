# peoplehub/analytics/references.py
#
# Foreign-key → display name resolution against the small lookup tables.
# A missing or stale id never raises: it degrades to a sentinel label the
# caller picks for its UI context.

from dataclasses import dataclass, field
from typing import Optional

# ── Sentinels ──
UNDEFINED  = "לא מוגדר"   # chart buckets for unset category
UNASSIGNED = "לא משויך"   # project charts
DASH       = "-"          # detail table cells

CRITICALITY_LABELS = {
    0: "0 - אינו חשוב לארגון",
    1: "1 - די חשוב לארגון",
    2: "2 - חשוב לארגון",
    3: "3 - חשוב מאוד לארגון",
    4: "4 - קריטי לארגון",
    5: "5 - קריטי מאוד לארגון",
}

ATTRITION_RISK_LABELS = {
    0: "0 - בטוח נשאר",
    1: "1 - סיכוי קטן מאוד לעזיבה",
    2: "2 - סיכוי קטן לעזיבה",
    3: "3 - סיכוי סביר לעזיבה",
    4: "4 - סיכוי גבוה לעזיבה",
    5: "5 - בטוח יעזוב",
}

RISK_LEVELS = range(0, 6)


def resolve_name(table, ref_id: Optional[str], sentinel: str = UNDEFINED) -> str:
    """
    Look up the display name for ref_id in a table of {id, name} entities.
    Returns sentinel for null ids, unknown ids, or a missing table.
    """
    if not ref_id or not table:
        return sentinel
    for entity in table:
        if entity.id == ref_id:
            return entity.name or sentinel
    return sentinel


def _level_label(labels: dict, value) -> str:
    if value is None:
        return UNDEFINED
    try:
        level = int(value)
    except (TypeError, ValueError):
        return str(value)
    return labels.get(level, str(level))


def criticality_label(value) -> str:
    return _level_label(CRITICALITY_LABELS, value)


def attrition_risk_label(value) -> str:
    return _level_label(ATTRITION_RISK_LABELS, value)


def criticality_domain() -> list[str]:
    """Canonical chart order: levels 0-5, then the undefined bucket."""
    return [CRITICALITY_LABELS[i] for i in RISK_LEVELS] + [UNDEFINED]


def attrition_risk_domain() -> list[str]:
    return [ATTRITION_RISK_LABELS[i] for i in RISK_LEVELS] + [UNDEFINED]


@dataclass(frozen=True)
class ReferenceData:
    """All lookup tables, as fetched together with the employee snapshot."""
    projects:           list = field(default_factory=list)
    branches:           list = field(default_factory=list)
    roles:              list = field(default_factory=list)
    companies:          list = field(default_factory=list)
    seniority_levels:   list = field(default_factory=list)
    leaving_reasons:    list = field(default_factory=list)
    performance_levels: list = field(default_factory=list)

    def project_name(self, emp, sentinel: str = UNASSIGNED) -> str:
        return resolve_name(self.projects, emp.project_id, sentinel)

    def branch_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.branches, emp.branch_id, sentinel)

    def role_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.roles, emp.job_role_id, sentinel)

    def company_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.companies, emp.employing_company_id, sentinel)

    def seniority_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.seniority_levels, emp.seniority_level_id, sentinel)

    def leaving_reason_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.leaving_reasons, emp.leaving_reason_id, sentinel)

    def performance_level_name(self, emp, sentinel: str = UNDEFINED) -> str:
        return resolve_name(self.performance_levels, emp.performance_level_id, sentinel)
