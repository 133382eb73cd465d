from typing import List

from fastapi import APIRouter, Depends, Request

from guard.api.deps import client_ip, get_applier, get_store
from guard.logic import bulk_service_action, control_service, get_services
from guard.schemas import BulkActionRequest, ServiceControlRequest, ServiceView
from guard.store import SecurityStore
from guard.system_changes import SystemChangeApplier

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=List[ServiceView])
def list_services(store: SecurityStore = Depends(get_store)):
    return get_services(store)


@router.post("/bulk-action", response_model=List[ServiceView])
def bulk_action(
    body: BulkActionRequest,
    request: Request,
    store: SecurityStore = Depends(get_store),
    applier: SystemChangeApplier = Depends(get_applier),
):
    """stop-all / disable-all / reset-all across every managed service."""
    return bulk_service_action(store, applier, body.action, ip_address=client_ip(request))


@router.post("/{service_id}/control", response_model=ServiceView)
def control(
    service_id: int,
    body: ServiceControlRequest,
    request: Request,
    store: SecurityStore = Depends(get_store),
    applier: SystemChangeApplier = Depends(get_applier),
):
    return control_service(store, applier, service_id, body.action, ip_address=client_ip(request))
