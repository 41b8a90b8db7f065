# peoplehub/api/deps.py

from typing import Optional

from fastapi import Depends, Header, HTTPException

from peoplehub.auth import AccessContext
from peoplehub.database import engine
from peoplehub.store import RecordStore


def get_store() -> RecordStore:
    return RecordStore(engine)


def get_access(x_user_role: Optional[str] = Header(default=None)) -> AccessContext:
    """The gateway in front of this service authenticates and forwards the caller's role."""
    if not x_user_role:
        raise HTTPException(status_code=401, detail="Not signed in. Missing X-User-Role header.")
    try:
        return AccessContext.from_role(x_user_role)
    except ValueError as e:
        raise HTTPException(status_code=403, detail=str(e))


def require_manager(access: AccessContext = Depends(get_access)) -> AccessContext:
    if not access.is_manager:
        raise HTTPException(status_code=403, detail="Managers only.")
    return access
