"""
Pydantic views and request bodies for the control API.

Every entity leaving the store is one of the *View models below, built from
the ORM row while its session is still open, so callers never hold a live row.
Wire names are camelCase.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, Field
from pydantic.alias_generators import to_camel

from guard.models import ServiceStatus, StartupType, Protocol, Direction, RuleAction, LogStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PatchModel(CamelModel):
    """Partial update: unknown keys are rejected, omitted keys are left alone"""
    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


# ============================================================================
# ENTITY VIEWS
# ============================================================================

class SettingsView(CamelModel):
    id: int
    rdp_enabled: bool
    ssh_enabled: bool
    vnc_enabled: bool
    firewall_domain_enabled: bool
    firewall_private_enabled: bool
    firewall_public_enabled: bool
    last_updated: datetime


class ServiceView(CamelModel):
    id: int
    name: str
    display_name: str
    description: str
    status: ServiceStatus
    startup_type: StartupType


class FirewallRuleView(CamelModel):
    id: int
    name: str
    port: int
    protocol: Protocol
    direction: Direction
    action: RuleAction
    is_active: bool


class ActivityLogView(CamelModel):
    id: int
    timestamp: datetime
    action: str
    component: str
    status: LogStatus
    details: str
    ip_address: Optional[str] = None


class SecurityStatus(CamelModel):
    """Derived on every read, never stored"""
    remote_access_blocked: bool
    firewall_active: bool
    services_stopped: bool
    security_score: int
    active_block_rules: int
    system_online: bool = True


# ============================================================================
# STORE INPUTS
# ============================================================================

class SettingsUpdate(PatchModel):
    # echoed back from GET /settings; accepted and dropped
    id: Optional[Any] = Field(default=None, exclude=True)
    last_updated: Optional[Any] = Field(default=None, exclude=True)

    rdp_enabled: Optional[StrictBool] = None
    ssh_enabled: Optional[StrictBool] = None
    vnc_enabled: Optional[StrictBool] = None
    firewall_domain_enabled: Optional[StrictBool] = None
    firewall_private_enabled: Optional[StrictBool] = None
    firewall_public_enabled: Optional[StrictBool] = None


class ServiceUpdate(PatchModel):
    display_name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ServiceStatus] = None
    startup_type: Optional[StartupType] = None


class FirewallRuleCreate(CamelModel):
    name: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    protocol: Protocol
    direction: Direction = Direction.INBOUND
    action: RuleAction = RuleAction.BLOCK
    is_active: StrictBool = True


class FirewallRuleUpdate(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    protocol: Optional[Protocol] = None
    direction: Optional[Direction] = None
    action: Optional[RuleAction] = None
    is_active: Optional[StrictBool] = None


class ActivityLogCreate(CamelModel):
    action: str
    component: str
    status: LogStatus = LogStatus.SUCCESS
    details: str
    ip_address: Optional[str] = None


# ============================================================================
# REQUEST BODIES
# ============================================================================

class RemoteAccessToggle(BaseModel):
    service: str
    enabled: StrictBool


class FirewallToggle(BaseModel):
    profile: str
    enabled: StrictBool


class ServiceControlRequest(BaseModel):
    action: str


class BulkActionRequest(BaseModel):
    action: str
