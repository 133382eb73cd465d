"""
Control logic layer.

Every mutating operation follows the same steps:
1. Validate the input (ValidationError, nothing changed)
2. Apply the mutation to the store (NotFoundError, nothing changed)
3. Append exactly one activity log entry
4. Hand the change to the system applier, best effort

The store lock is held across steps 1-3 so a read-modify-write sequence never
interleaves with another request.
"""

import logging
from typing import List, Optional, Sequence

from guard.errors import ValidationError, NotFoundError
from guard.models import LogStatus, RuleAction, ServiceStatus, StartupType
from guard.schemas import (
    ActivityLogCreate,
    ActivityLogView,
    FirewallRuleView,
    SecurityStatus,
    ServiceUpdate,
    ServiceView,
    SettingsUpdate,
    SettingsView,
)
from guard.store import DEFAULT_LOG_LIMIT, DEFAULT_LOG_OFFSET, SecurityStore
from guard.system_changes import SystemChangeApplier, apply_best_effort

logger = logging.getLogger(__name__)

REMOTE_ACCESS_FIELDS = {
    "rdp": "rdp_enabled",
    "ssh": "ssh_enabled",
    "vnc": "vnc_enabled",
}

REMOTE_ACCESS_PORTS = {
    "rdp": 3389,
    "ssh": 22,
    "vnc": 5900,
}

FIREWALL_PROFILE_FIELDS = {
    "domain": "firewall_domain_enabled",
    "private": "firewall_private_enabled",
    "public": "firewall_public_enabled",
}

# action -> (status, startup_type); None leaves the field unchanged
SERVICE_TRANSITIONS = {
    "start": (ServiceStatus.RUNNING, None),
    "stop": (ServiceStatus.STOPPED, None),
    "enable": (None, StartupType.AUTOMATIC),
    "disable": (ServiceStatus.STOPPED, StartupType.DISABLED),
}

PAST_TENSE = {
    "allow": "allowed",
    "block": "blocked",
    "start": "started",
    "stop": "stopped",
    "enable": "enabled",
    "disable": "disabled",
}

# reset-all matches disable-all until a distinct default configuration exists
BULK_TRANSITIONS = {
    "stop-all": (ServiceStatus.STOPPED, None),
    "disable-all": (ServiceStatus.STOPPED, StartupType.DISABLED),
    "reset-all": (ServiceStatus.STOPPED, StartupType.DISABLED),
}

COMPONENT_REMOTE_ACCESS = "Remote Access"
COMPONENT_FIREWALL = "Firewall"
COMPONENT_SERVICE = "Service"
COMPONENT_SERVICES = "Services"
COMPONENT_SETTINGS = "Security Settings"

# ============================================================================
# HELPERS
# ============================================================================

def _log(store: SecurityStore, action: str, component: str, details: str,
         ip_address: Optional[str] = None) -> ActivityLogView:
    entry = store.create_activity_log(ActivityLogCreate(
        action=action,
        component=component,
        status=LogStatus.SUCCESS,
        details=details,
        ip_address=ip_address,
    ))
    logger.info(f"{component}: {action} - {details}")
    return entry


def bulk_log_action(action: str) -> str:
    """'stop-all' -> 'STOP_ALL'"""
    return action.upper().replace("-", "_")

def parse_int_param(raw: Optional[str], default: int, minimum: int = 0) -> int:
    """Lenient query parsing: anything non-numeric or below `minimum` gives `default`."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    if value < minimum:
        return default
    return value

# ============================================================================
# SETTINGS
# ============================================================================

def get_settings(store: SecurityStore) -> SettingsView:
    return store.get_security_settings()


def update_settings(store: SecurityStore, changes: SettingsUpdate,
                    ip_address: Optional[str] = None) -> SettingsView:
    with store.locked():
        updated = store.update_security_settings(changes)
        _log(store, "UPDATED", COMPONENT_SETTINGS,
             "Security settings updated successfully", ip_address)
    return updated

# ============================================================================
# REMOTE ACCESS
# ============================================================================

def toggle_remote_access(store: SecurityStore, applier: SystemChangeApplier,
                         service: str, enabled: bool,
                         ip_address: Optional[str] = None) -> SettingsView:
    if service not in REMOTE_ACCESS_FIELDS:
        raise ValidationError("Invalid service type")

    port = REMOTE_ACCESS_PORTS[service]
    verb = "allow" if enabled else "block"
    with store.locked():
        updated = store.update_security_settings(
            SettingsUpdate(**{REMOTE_ACCESS_FIELDS[service]: enabled})
        )
        _log(store, "ENABLED" if enabled else "BLOCKED", COMPONENT_REMOTE_ACCESS,
             f"{service.upper()} {PAST_TENSE[verb]} on port {port}", ip_address)

    apply_best_effort(applier, f"port:{port}", verb)
    return updated


def block_all_remote_access(store: SecurityStore, applier: SystemChangeApplier,
                            ip_address: Optional[str] = None) -> SettingsView:
    with store.locked():
        updated = store.update_security_settings(
            SettingsUpdate(**{field: False for field in REMOTE_ACCESS_FIELDS.values()})
        )
        _log(store, "BLOCKED", COMPONENT_REMOTE_ACCESS,
             "All remote access connections blocked", ip_address)

    for port in REMOTE_ACCESS_PORTS.values():
        apply_best_effort(applier, f"port:{port}", "block")
    return updated

# ============================================================================
# FIREWALL
# ============================================================================

def get_firewall_rules(store: SecurityStore) -> List[FirewallRuleView]:
    return store.get_firewall_rules()


def toggle_firewall_profile(store: SecurityStore, applier: SystemChangeApplier,
                            profile: str, enabled: bool,
                            ip_address: Optional[str] = None) -> SettingsView:
    if profile not in FIREWALL_PROFILE_FIELDS:
        raise ValidationError("Invalid firewall profile")

    state = "enabled" if enabled else "disabled"
    with store.locked():
        updated = store.update_security_settings(
            SettingsUpdate(**{FIREWALL_PROFILE_FIELDS[profile]: enabled})
        )
        _log(store, state.upper(), COMPONENT_FIREWALL,
             f"{profile} firewall profile {state}", ip_address)

    apply_best_effort(applier, f"firewall:{profile}", "on" if enabled else "off")
    return updated

# ============================================================================
# SERVICES
# ============================================================================

def get_services(store: SecurityStore) -> List[ServiceView]:
    return store.get_services()


def control_service(store: SecurityStore, applier: SystemChangeApplier,
                    service_id: int, action: str,
                    ip_address: Optional[str] = None) -> ServiceView:
    """
    Apply start/stop/enable/disable to one service.

    | action  | status  | startup_type |
    |---------|---------|--------------|
    | start   | running | unchanged    |
    | stop    | stopped | unchanged    |
    | enable  | -       | automatic    |
    | disable | stopped | disabled     |
    """
    if action not in SERVICE_TRANSITIONS:
        raise ValidationError("Invalid service action")

    status, startup_type = SERVICE_TRANSITIONS[action]
    with store.locked():
        service = store.get_service(service_id)
        if service is None:
            raise NotFoundError("Service not found")

        updated = store.update_service(service_id, ServiceUpdate(
            status=status,
            startup_type=startup_type,
        ))
        _log(store, action.upper(), COMPONENT_SERVICE,
             f"{service.display_name} {PAST_TENSE[action]} successfully", ip_address)

    apply_best_effort(applier, f"service:{service.name}", action)
    return updated


def bulk_service_action(store: SecurityStore, applier: SystemChangeApplier,
                        action: str, ip_address: Optional[str] = None) -> List[ServiceView]:
    """Apply one bulk action to every managed service; logged once for the batch."""
    if action not in BULK_TRANSITIONS:
        raise ValidationError("Invalid bulk action")

    status, startup_type = BULK_TRANSITIONS[action]
    with store.locked():
        updated = [
            store.update_service(service.id, ServiceUpdate(status=status, startup_type=startup_type))
            for service in store.get_services()
        ]
        _log(store, bulk_log_action(action), COMPONENT_SERVICES,
             f"Bulk action {action} applied to all remote services", ip_address)

    for service in updated:
        apply_best_effort(applier, f"service:{service.name}", action)
    return updated

# ============================================================================
# ACTIVITY LOG
# ============================================================================

def list_activity_logs(store: SecurityStore, limit: Optional[str] = None,
                       offset: Optional[str] = None,
                       category: Optional[str] = None) -> List[ActivityLogView]:
    return store.get_activity_logs(
        limit=parse_int_param(limit, DEFAULT_LOG_LIMIT, minimum=1),
        offset=parse_int_param(offset, DEFAULT_LOG_OFFSET),
        category=category,
    )

# ============================================================================
# AGGREGATE STATUS
# ============================================================================

def compute_security_status(settings: SettingsView, services: Sequence[ServiceView],
                            rules: Sequence[FirewallRuleView]) -> SecurityStatus:
    """
    Score: 30 if remote access blocked, 25 if all firewall profiles on,
    20 if every service stopped, plus 5 per active block rule (max 25).
    """
    remote_access_blocked = not (settings.rdp_enabled or settings.ssh_enabled or settings.vnc_enabled)
    firewall_active = (
        settings.firewall_domain_enabled
        and settings.firewall_private_enabled
        and settings.firewall_public_enabled
    )
    services_stopped = all(s.status == ServiceStatus.STOPPED for s in services)
    active_block_rules = sum(1 for r in rules if r.action == RuleAction.BLOCK and r.is_active)

    score = 0
    if remote_access_blocked:
        score += 30
    if firewall_active:
        score += 25
    if services_stopped:
        score += 20
    score += min(active_block_rules * 5, 25)

    return SecurityStatus(
        remote_access_blocked=remote_access_blocked,
        firewall_active=firewall_active,
        services_stopped=services_stopped,
        security_score=score,
        active_block_rules=active_block_rules,
        system_online=True,
    )


def get_security_status(store: SecurityStore) -> SecurityStatus:
    with store.locked():
        settings = store.get_security_settings()
        services = store.get_services()
        rules = store.get_firewall_rules()
    return compute_security_status(settings, services, rules)
