from fastapi import APIRouter, Depends, Request

from guard.api.deps import client_ip, get_applier, get_store
from guard.logic import block_all_remote_access, toggle_remote_access
from guard.schemas import RemoteAccessToggle, SettingsView
from guard.store import SecurityStore
from guard.system_changes import SystemChangeApplier

router = APIRouter(prefix="/remote-access", tags=["remote-access"])


@router.post("/toggle", response_model=SettingsView)
def toggle(
    body: RemoteAccessToggle,
    request: Request,
    store: SecurityStore = Depends(get_store),
    applier: SystemChangeApplier = Depends(get_applier),
):
    """Allow or block one of rdp / ssh / vnc."""
    return toggle_remote_access(store, applier, body.service, body.enabled, ip_address=client_ip(request))


@router.post("/block-all", response_model=SettingsView)
def block_all(
    request: Request,
    store: SecurityStore = Depends(get_store),
    applier: SystemChangeApplier = Depends(get_applier),
):
    return block_all_remote_access(store, applier, ip_address=client_ip(request))
