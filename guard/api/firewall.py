from typing import List

from fastapi import APIRouter, Depends, Request

from guard.api.deps import client_ip, get_applier, get_store
from guard.logic import get_firewall_rules, toggle_firewall_profile
from guard.schemas import FirewallRuleView, FirewallToggle, SettingsView
from guard.store import SecurityStore
from guard.system_changes import SystemChangeApplier

router = APIRouter(prefix="/firewall", tags=["firewall"])


@router.get("/rules", response_model=List[FirewallRuleView])
def list_rules(store: SecurityStore = Depends(get_store)):
    return get_firewall_rules(store)


@router.post("/toggle", response_model=SettingsView)
def toggle(
    body: FirewallToggle,
    request: Request,
    store: SecurityStore = Depends(get_store),
    applier: SystemChangeApplier = Depends(get_applier),
):
    """Turn the domain / private / public profile on or off."""
    return toggle_firewall_profile(store, applier, body.profile, body.enabled, ip_address=client_ip(request))
