from sqlalchemy import Column, Integer, String, Enum, Boolean, DateTime, Text
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
import enum

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores no tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _values(enum_cls):
    return [member.value for member in enum_cls]

# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class ServiceStatus(str, enum.Enum):
    """Managed service run state"""
    RUNNING = "running"
    STOPPED = "stopped"

class StartupType(str, enum.Enum):
    """Managed service startup mode"""
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    DISABLED = "disabled"

class Protocol(str, enum.Enum):
    TCP = "tcp"
    UDP = "udp"

class Direction(str, enum.Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"

class RuleAction(str, enum.Enum):
    """Firewall rule verdict"""
    ALLOW = "allow"
    BLOCK = "block"

class LogStatus(str, enum.Enum):
    """Outcome recorded on an activity log entry"""
    SUCCESS = "success"
    ERROR = "error"

# ============================================================================
# CORE MODEL DEFINITIONS
# ============================================================================

SETTINGS_ID = 1


class SecuritySettings(Base):
    """Singleton row holding the remote access and firewall profile flags"""
    __tablename__ = "security_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ID)

    # Remote access
    rdp_enabled = Column(Boolean, nullable=False, default=False)
    ssh_enabled = Column(Boolean, nullable=False, default=False)
    vnc_enabled = Column(Boolean, nullable=False, default=False)

    # Firewall profiles
    firewall_domain_enabled = Column(Boolean, nullable=False, default=True)
    firewall_private_enabled = Column(Boolean, nullable=False, default=True)
    firewall_public_enabled = Column(Boolean, nullable=False, default=True)

    last_updated = Column(DateTime, default=utcnow)


class ManagedService(Base):
    """Windows service whose state the dashboard controls"""
    __tablename__ = "services"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    display_name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    status = Column(Enum(ServiceStatus, values_callable=_values), nullable=False)
    startup_type = Column(Enum(StartupType, values_callable=_values), nullable=False)


class FirewallRule(Base):
    """Port-level firewall rule"""
    __tablename__ = "firewall_rules"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    port = Column(Integer, nullable=False)
    protocol = Column(Enum(Protocol, values_callable=_values), nullable=False)
    direction = Column(Enum(Direction, values_callable=_values), nullable=False)
    action = Column(Enum(RuleAction, values_callable=_values), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class ActivityLog(Base):
    """Append-only audit trail of every applied change"""
    __tablename__ = "activity_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow)
    action = Column(String, nullable=False)  # ENABLED, BLOCKED, STOP_ALL, ...
    component = Column(String, nullable=False)  # Remote Access, Firewall, Service, ...
    status = Column(Enum(LogStatus, values_callable=_values), nullable=False)
    details = Column(Text, nullable=False)
    ip_address = Column(String)
