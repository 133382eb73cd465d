"""
Aggregate security status.

Recomputed from the store on every request; nothing is cached or logged.
"""

from fastapi import APIRouter, Depends

from guard.api.deps import get_store
from guard.logic import get_security_status
from guard.schemas import SecurityStatus
from guard.store import SecurityStore

router = APIRouter(prefix="/status", tags=["status"])


@router.get("", response_model=SecurityStatus)
def read_status(store: SecurityStore = Depends(get_store)):
    return get_security_status(store)
