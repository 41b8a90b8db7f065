import uuid
from typing import Optional
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


class ReferenceEntity(SQLModel):
    # Small lookup tables, referenced from Employee by id
    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    description: Optional[str] = None


class Project(ReferenceEntity, table=True):
    __tablename__ = "projects"


class Branch(ReferenceEntity, table=True):
    __tablename__ = "branches"


class JobRole(ReferenceEntity, table=True):
    __tablename__ = "job_roles"


class EmployingCompany(ReferenceEntity, table=True):
    __tablename__ = "employing_companies"


class SeniorityLevel(ReferenceEntity, table=True):
    __tablename__ = "seniority_levels"


class LeavingReason(ReferenceEntity, table=True):
    __tablename__ = "leaving_reasons"


class PerformanceLevel(ReferenceEntity, table=True):
    __tablename__ = "performance_levels"


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    # Identity
    id: str = Field(default_factory=_new_id, primary_key=True)
    full_name: str = ""
    id_number: Optional[str] = None

    # Org structure (foreign keys into the reference tables)
    project_id:           Optional[str] = Field(default=None, index=True)
    branch_id:            Optional[str] = None
    job_role_id:          Optional[str] = None
    employing_company_id: Optional[str] = None
    seniority_level_id:   Optional[str] = None
    leaving_reason_id:    Optional[str] = None
    performance_level_id: Optional[str] = None

    # Dates are ISO strings (YYYY-MM-DD) and compared as strings
    start_date: Optional[str] = None
    birth_date: Optional[str] = None
    city:       Optional[str] = None

    # Financial
    cost:                    Optional[float] = None   # monthly all-in employer cost
    real_market_salary:      Optional[float] = None
    salary_raise_date:       Optional[str] = None
    salary_raise_percentage: Optional[float] = None

    # Experience
    professional_experience_years: Optional[float] = None

    # Risk & criticality (0-5 or null)
    unit_criticality:       Optional[int] = None
    attrition_risk:         Optional[int] = None
    company_attrition_risk: Optional[int] = None

    # Flags
    our_sourcing:   Optional[bool] = None
    revolving_door: Optional[bool] = None

    # Performance
    performance_update_date: Optional[str] = None

    # Free text
    attrition_risk_reason:        Optional[str] = None
    retention_plan:               Optional[str] = None
    company_retention_plan:       Optional[str] = None
    commander_summary_and_status: Optional[str] = None
    replacement_needed:           Optional[str] = None   # "yes" / "no" / "undecided"

    # Lifecycle: left employees are flagged, never deleted
    is_left:    bool = Field(default=False, index=True)
    left_date:  Optional[str] = None
    left_reason: Optional[str] = None
    left_notes: Optional[str] = None
