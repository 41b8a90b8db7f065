# peoplehub/api/analytics_routes.py

import logging
import math
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from peoplehub.analytics.dashboard import (
    ROW_FIELD_ACCESS,
    DashboardViewModel,
    access_level,
    attention_table,
    compute_dashboard,
    redact_row,
)
from peoplehub.analytics.filters import FilterCriteria
from peoplehub.analytics.overview import headcount_overview, left_employees
from peoplehub.api.deps import get_access, get_store
from peoplehub.auth import AccessContext
from peoplehub.config import get_settings
from peoplehub.store import RecordStore, load_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

# snapshot_id → view model, oldest evicted first.
# Sync routes run on the threadpool; every access goes through _snapshots_lock.
_snapshots: "OrderedDict[str, DashboardViewModel]" = OrderedDict()
_snapshots_lock = threading.Lock()


def remember_snapshot(view: DashboardViewModel) -> str:
    snapshot_id = uuid.uuid4().hex
    limit = get_settings().snapshot_cache_size
    with _snapshots_lock:
        _snapshots[snapshot_id] = view
        while len(_snapshots) > limit:
            _snapshots.popitem(last=False)
    return snapshot_id


def recall_snapshot(snapshot_id: str) -> Optional[DashboardViewModel]:
    with _snapshots_lock:
        try:
            _snapshots.move_to_end(snapshot_id)
        except KeyError:
            return None
        return _snapshots[snapshot_id]


def clear_snapshots():
    with _snapshots_lock:
        _snapshots.clear()


def json_safe(value):
    """Open-ended bucket bounds are ±inf, which JSON cannot carry; send null instead."""
    if isinstance(value, float) and math.isinf(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


class CriteriaRequest(BaseModel):
    project_ids:        list[str] = []
    branch_ids:         list[str] = []
    role_ids:           list[str] = []
    company_ids:        list[str] = []
    seniority_ids:      list[str] = []
    attrition_risks:    list[int] = Field(default=[], description="Levels 0-5")
    criticalities:      list[int] = Field(default=[], description="Levels 0-5")
    our_sourcing:       list[bool] = []
    revolving_door:     list[bool] = []
    replacement_needed: list[str] = []
    search:             str = ""
    city:               str = ""
    start_date_from:    Optional[str] = None
    start_date_to:      Optional[str] = None
    include_left:       bool = False

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(
            project_ids=frozenset(self.project_ids),
            branch_ids=frozenset(self.branch_ids),
            role_ids=frozenset(self.role_ids),
            company_ids=frozenset(self.company_ids),
            seniority_ids=frozenset(self.seniority_ids),
            attrition_risks=frozenset(self.attrition_risks),
            criticalities=frozenset(self.criticalities),
            our_sourcing=frozenset(self.our_sourcing),
            revolving_door=frozenset(self.revolving_door),
            replacement_needed=frozenset(self.replacement_needed),
            search=self.search,
            city=self.city,
            start_date_from=self.start_date_from,
            start_date_to=self.start_date_to,
            include_left=self.include_left,
        )


class DrillDownRequest(BaseModel):
    snapshot_id: str
    dimension:   str
    label:       str


class AttentionRequest(BaseModel):
    criteria:   CriteriaRequest = CriteriaRequest()
    sort_key:   str = "attention_score"
    descending: bool = True


@router.post("/dashboard")
def dashboard_endpoint(
    request: CriteriaRequest,
    access: AccessContext = Depends(get_access),
    store: RecordStore = Depends(get_store),
):
    employees, refs = load_snapshot(store)
    view = compute_dashboard(employees, refs, request.to_criteria(), access)
    snapshot_id = remember_snapshot(view)
    logger.info(
        "Dashboard built: %d/%d employees", view.filtered_count, view.total_count,
        extra={"snapshot_id": snapshot_id},
    )
    return json_safe({"snapshot_id": snapshot_id, **view.to_dict()})


@router.post("/drilldown")
def drilldown_endpoint(request: DrillDownRequest, access: AccessContext = Depends(get_access)):
    view = recall_snapshot(request.snapshot_id)
    if view is None:
        raise HTTPException(
            status_code=404,
            detail="Dashboard snapshot expired. Reload the dashboard and click the chart again."
        )
    # The snapshot was built for one caller; a weaker role cannot reuse it
    if access_level(access) < access_level(view.access):
        raise HTTPException(status_code=403, detail="Snapshot was built for a different access level.")

    try:
        rows = view.drill_down(request.dimension, request.label, access)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return json_safe({"dimension": request.dimension, "label": request.label, "count": len(rows), "employees": rows})


@router.post("/attention")
def attention_endpoint(
    request: AttentionRequest,
    access: AccessContext = Depends(get_access),
    store: RecordStore = Depends(get_store),
):
    if access_level(access) < ROW_FIELD_ACCESS.get(request.sort_key, 0):
        raise HTTPException(status_code=403, detail=f"Cannot sort by '{request.sort_key}' at this access level.")

    employees, refs = load_snapshot(store)
    try:
        rows = attention_table(
            employees, refs, request.criteria.to_criteria(),
            sort_key=request.sort_key, descending=request.descending,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"count": len(rows), "employees": [redact_row(row, access) for row in rows]}


@router.get("/overview")
def overview_endpoint(access: AccessContext = Depends(get_access), store: RecordStore = Depends(get_store)):
    employees, _ = load_snapshot(store)
    return headcount_overview(employees)


@router.get("/left")
def left_endpoint(
    search: str = "",
    access: AccessContext = Depends(get_access),
    store: RecordStore = Depends(get_store),
):
    employees, refs = load_snapshot(store)
    rows = left_employees(employees, refs, search=search)
    return {"count": len(rows), "employees": rows}
