# peoplehub/api/employee_routes.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from peoplehub.api.deps import get_store, require_manager
from peoplehub.auth import AccessContext
from peoplehub.store import RecordStore, mark_as_left, restore_employee

router = APIRouter(prefix="/api/employees", tags=["Employees"])


class LeaveRequest(BaseModel):
    left_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    reason:    Optional[str] = None
    notes:     Optional[str] = None


@router.post("/{employee_id}/leave")
def leave_endpoint(
    employee_id: str,
    request: LeaveRequest,
    access: AccessContext = Depends(require_manager),
    store: RecordStore = Depends(get_store),
):
    if not mark_as_left(store, employee_id, request.left_date, request.reason, request.notes):
        raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found or could not be updated.")
    return {"status": "left", "id": employee_id}


@router.post("/{employee_id}/restore")
def restore_endpoint(
    employee_id: str,
    access: AccessContext = Depends(require_manager),
    store: RecordStore = Depends(get_store),
):
    if not restore_employee(store, employee_id):
        raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found or could not be updated.")
    return {"status": "active", "id": employee_id}
