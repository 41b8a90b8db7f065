"""
conftest.py: shared fixtures for the PeopleHub test suite.

The employee fixture is a small, hand-checked organisation:

    e1  דנה כהן     active  project אלפא  role מפתח  criticality 4 × risk 3 = 12
    e2  אבי לוי     active  project אלפא  role בודק  criticality ?  × risk 2 = 0
    e3  משה ישראלי  active  no project   role מפתח  criticality 0 × risk 0 = 0
    e4  רות שמש     left    project בטא   role מפתח  leaving reason שכר

TODAY pins every date-relative calculation.
"""

import os
from datetime import date

# Before any peoplehub import: the module-level engine must never touch a file
os.environ.setdefault("PEOPLEHUB_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from peoplehub.analytics.references import ReferenceData
from peoplehub.auth import AccessContext
from peoplehub.config import Settings
from peoplehub.models import (
    Branch,
    Employee,
    EmployingCompany,
    JobRole,
    LeavingReason,
    PerformanceLevel,
    Project,
    SeniorityLevel,
)

TODAY = date(2025, 6, 15)


# ---------------------------------------------------------------------------
# Reference tables
# ---------------------------------------------------------------------------

@pytest.fixture
def reference_rows():
    return {
        "projects":           [Project(id="p1", name="אלפא"), Project(id="p2", name="בטא")],
        "branches":           [Branch(id="b1", name="תל אביב")],
        "job_roles":          [JobRole(id="r1", name="מפתח"), JobRole(id="r2", name="בודק")],
        "employing_companies": [EmployingCompany(id="c1", name="חברה א")],
        "seniority_levels":   [SeniorityLevel(id="s1", name="ג'וניור"), SeniorityLevel(id="s2", name="סניור")],
        "leaving_reasons":    [LeavingReason(id="lr1", name="שכר")],
        "performance_levels": [PerformanceLevel(id="pl1", name="גבוה")],
    }


@pytest.fixture
def refs(reference_rows):
    return ReferenceData(
        projects=reference_rows["projects"],
        branches=reference_rows["branches"],
        roles=reference_rows["job_roles"],
        companies=reference_rows["employing_companies"],
        seniority_levels=reference_rows["seniority_levels"],
        leaving_reasons=reference_rows["leaving_reasons"],
        performance_levels=reference_rows["performance_levels"],
    )


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------

@pytest.fixture
def make_employee():
    """Factory: Employee with every optional field empty unless overridden."""
    def _make(**overrides):
        fields = {"full_name": "עובד", "is_left": False}
        fields.update(overrides)
        return Employee(**fields)
    return _make


@pytest.fixture
def employees(make_employee):
    return [
        make_employee(
            id="e1", full_name="דנה כהן", id_number="123456789",
            project_id="p1", job_role_id="r1", branch_id="b1", employing_company_id="c1",
            seniority_level_id="s1", performance_level_id="pl1", city="חיפה",
            cost=14000.0, real_market_salary=9000.0, professional_experience_years=5.0,
            unit_criticality=4, attrition_risk=3, start_date="2025-03-10",
            birth_date="1990-06-18", our_sourcing=True, revolving_door=False,
            replacement_needed="yes",
        ),
        make_employee(
            id="e2", full_name="אבי לוי", id_number="987654321",
            project_id="p1", job_role_id="r2", branch_id="b1", employing_company_id="c1",
            seniority_level_id="s2", city="תל אביב",
            cost=30800.0, professional_experience_years=10.0,
            attrition_risk=2, start_date="2024-11-01", birth_date="1985-01-01",
            revolving_door=True, replacement_needed="no",
        ),
        make_employee(
            id="e3", full_name="משה ישראלי",
            job_role_id="r1", real_market_salary=12000.0, professional_experience_years=3.0,
            unit_criticality=0, attrition_risk=0, start_date="2025-06-01",
        ),
        make_employee(
            id="e4", full_name="רות שמש",
            project_id="p2", job_role_id="r1", leaving_reason_id="lr1",
            cost=20000.0, unit_criticality=5, attrition_risk=5,
            start_date="2023-01-15", is_left=True, left_date="2025-05-31", left_reason="שכר",
        ),
    ]


@pytest.fixture
def by_id(employees):
    return {emp.id: emp for emp in employees}


# ---------------------------------------------------------------------------
# Access contexts
# ---------------------------------------------------------------------------

@pytest.fixture
def user_access():
    return AccessContext.from_role("user")


@pytest.fixture
def manager_access():
    return AccessContext.from_role("manager")


@pytest.fixture
def admin_access():
    return AccessContext.from_role("super_admin")


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    """Fresh in-memory SQLite shared across connections for one test."""
    import peoplehub.models  # noqa: F401
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(engine, employees, reference_rows):
    # Copies: committing expires instances, and the fixtures stay usable in the test
    def copy(row):
        return type(row)(**row.model_dump())

    with Session(engine) as session:
        for rows in reference_rows.values():
            session.add_all([copy(row) for row in rows])
        session.add_all([copy(emp) for emp in employees])
        session.commit()
    return engine
