# peoplehub/store.py
#
# The record store: "fetch every row of a named collection" and
# "update fields of a row by id". Nothing else touches the tables at runtime.

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from peoplehub.analytics.references import ReferenceData
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

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "employees":           Employee,
    "projects":            Project,
    "branches":            Branch,
    "job_roles":           JobRole,
    "employing_companies": EmployingCompany,
    "seniority_levels":    SeniorityLevel,
    "leaving_reasons":     LeavingReason,
    "performance_levels":  PerformanceLevel,
}

# ReferenceData field → collection
REFERENCE_COLLECTIONS = {
    "projects":           "projects",
    "branches":           "branches",
    "roles":              "job_roles",
    "companies":          "employing_companies",
    "seniority_levels":   "seniority_levels",
    "leaving_reasons":    "leaving_reasons",
    "performance_levels": "performance_levels",
}


def model_for(collection: str):
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}. Options: {list(COLLECTIONS.keys())}")
    return COLLECTIONS[collection]


class RecordStore:
    def __init__(self, engine):
        self.engine = engine

    def fetch_all(self, collection: str) -> list:
        model = model_for(collection)
        with Session(self.engine) as session:
            # Rows stay readable after close: nothing is committed, so nothing expires
            rows = session.exec(select(model)).all()
        return list(rows)

    def update_fields(self, collection: str, record_id: str, fields: dict) -> bool:
        """Partial update. Unknown field names raise; a missing row or DB failure returns False."""
        model = model_for(collection)
        unknown = [name for name in fields if name not in model.model_fields or name == "id"]
        if unknown:
            raise ValueError(f"Cannot update {collection}: unknown fields {unknown}")

        with Session(self.engine) as session:
            try:
                row = session.get(model, record_id)
                if row is None:
                    logger.warning("update_fields: no %s row with id %s", collection, record_id)
                    return False
                for name, value in fields.items():
                    setattr(row, name, value)
                session.add(row)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("update_fields failed for %s/%s", collection, record_id)
                return False

        logger.info("Updated %s/%s: %s", collection, record_id, sorted(fields))
        return True


def mark_as_left(
    store: RecordStore,
    employee_id: str,
    left_date: Optional[str] = None,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
) -> bool:
    return store.update_fields("employees", employee_id, {
        "is_left":     True,
        "left_date":   left_date or date.today().isoformat(),
        "left_reason": reason,
        "left_notes":  notes,
    })


def restore_employee(store: RecordStore, employee_id: str) -> bool:
    return store.update_fields("employees", employee_id, {
        "is_left":     False,
        "left_date":   None,
        "left_reason": None,
        "left_notes":  None,
    })


def load_snapshot(store: RecordStore) -> tuple[list, ReferenceData]:
    """
    Employees plus every lookup table. A failed fetch is logged and leaves that
    collection empty, so the dashboard renders its empty form instead of failing.
    """
    def safe_fetch(collection: str) -> list:
        try:
            return store.fetch_all(collection)
        except SQLAlchemyError:
            logger.exception("Fetching %s failed, continuing with an empty collection", collection)
            return []

    employees = safe_fetch("employees")
    refs = ReferenceData(**{name: safe_fetch(coll) for name, coll in REFERENCE_COLLECTIONS.items()})

    logger.info("Loaded snapshot: %d employees", len(employees))
    return employees, refs
