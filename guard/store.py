"""
In-memory security state store.

Owns every entity of the service: the settings singleton, the managed
services, firewall rules and the activity log. Backed by an in-memory SQLite
database that lives exactly as long as the store object.

All access goes through one reentrant lock. The tables share a single SQLite
connection, so two overlapping sessions would interleave their transactions;
holding the lock for the whole session keeps one writer at a time.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guard.config import LOG_PAGE_SIZE
from guard.database import create_memory_engine, init_db, make_session_factory
from guard.errors import InternalError, NotFoundError, ValidationError
from guard.models import (
    SETTINGS_ID,
    ActivityLog,
    Direction,
    FirewallRule,
    ManagedService,
    Protocol,
    RuleAction,
    SecuritySettings,
    ServiceStatus,
    StartupType,
    utcnow,
)
from guard.schemas import (
    ActivityLogCreate,
    ActivityLogView,
    FirewallRuleCreate,
    FirewallRuleUpdate,
    FirewallRuleView,
    ServiceUpdate,
    ServiceView,
    SettingsUpdate,
    SettingsView,
)

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = LOG_PAGE_SIZE
DEFAULT_LOG_OFFSET = 0
# SQLite INTEGER upper bound; larger page values are past the end anyway
MAX_SQL_INT = 2**63 - 1

# Dashboard log filters and the components each one covers
LOG_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "firewall": ("Firewall",),
    "services": ("Service", "Services"),
    "connections": ("Remote Access",),
}

DEFAULT_SERVICES = [
    {
        "name": "TermService",
        "display_name": "Terminal Services",
        "description": "Remote Desktop Protocol service",
    },
    {
        "name": "RemoteRegistry",
        "display_name": "Remote Registry",
        "description": "Remote registry access service",
    },
    {
        "name": "RasMan",
        "display_name": "Remote Access Manager",
        "description": "VPN and dial-up connection manager",
    },
]

DEFAULT_FIREWALL_RULES = [
    ("Block RDP TCP", 3389, Protocol.TCP),
    ("Block RDP UDP", 3389, Protocol.UDP),
    ("Block SSH", 22, Protocol.TCP),
    ("Block VNC", 5900, Protocol.TCP),
]


def category_components(category: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Map a log category to its components; None or 'all' means no filter."""
    if category is None or category == "all":
        return None
    try:
        return LOG_CATEGORIES[category]
    except KeyError:
        raise ValidationError(f"Invalid log category: {category}")


class SecurityStore:
    """
    Sole owner of the security state.

    Reads return detached pydantic views; updates take pydantic partials and
    raise NotFoundError for unknown ids.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or create_memory_engine()
        init_db(self.engine)
        self._session_factory = make_session_factory(self.engine)
        self._lock = threading.RLock()
        self._seed_defaults()

    # ========================================================================
    # SESSION / LOCKING
    # ========================================================================

    @contextmanager
    def locked(self) -> Iterator["SecurityStore"]:
        """Hold the store lock across several calls (read-modify-log sequences)."""
        with self._lock:
            yield self

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("Store operation failed")
                raise InternalError("Store operation failed") from exc
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def _seed_defaults(self):
        with self._session() as db:
            if db.get(SecuritySettings, SETTINGS_ID) is None:
                db.add(SecuritySettings(id=SETTINGS_ID, last_updated=utcnow()))

            if not db.scalars(select(ManagedService)).first():
                for spec in DEFAULT_SERVICES:
                    db.add(ManagedService(
                        status=ServiceStatus.STOPPED,
                        startup_type=StartupType.DISABLED,
                        **spec,
                    ))

            if not db.scalars(select(FirewallRule)).first():
                for name, port, protocol in DEFAULT_FIREWALL_RULES:
                    db.add(FirewallRule(
                        name=name,
                        port=port,
                        protocol=protocol,
                        direction=Direction.INBOUND,
                        action=RuleAction.BLOCK,
                        is_active=True,
                    ))
        logger.debug("Store seeded with default settings, services and firewall rules")

    # ========================================================================
    # SECURITY SETTINGS
    # ========================================================================

    def get_security_settings(self) -> SettingsView:
        with self._session() as db:
            return SettingsView.model_validate(db.get(SecuritySettings, SETTINGS_ID))

    def update_security_settings(self, changes: SettingsUpdate) -> SettingsView:
        """Merge `changes` onto the singleton and stamp last_updated."""
        with self._session() as db:
            current = db.get(SecuritySettings, SETTINGS_ID)
            merged = SettingsView.model_validate(current).model_dump()
            merged.update(changes.changes())
            merged["last_updated"] = utcnow()

            # every column is rewritten in the same flush
            for field, value in merged.items():
                setattr(current, field, value)
            db.flush()
            return SettingsView.model_validate(current)

    # ========================================================================
    # SERVICES
    # ========================================================================

    def get_services(self) -> List[ServiceView]:
        with self._session() as db:
            rows = db.scalars(select(ManagedService).order_by(ManagedService.id)).all()
            return [ServiceView.model_validate(row) for row in rows]

    def get_service(self, service_id: int) -> Optional[ServiceView]:
        with self._session() as db:
            row = db.get(ManagedService, service_id)
            return ServiceView.model_validate(row) if row else None

    def update_service(self, service_id: int, changes: ServiceUpdate) -> ServiceView:
        with self._session() as db:
            row = db.get(ManagedService, service_id)
            if row is None:
                raise NotFoundError(f"Service with id {service_id} not found")
            for field, value in changes.changes().items():
                setattr(row, field, value)
            db.flush()
            return ServiceView.model_validate(row)

    # ========================================================================
    # FIREWALL RULES
    # ========================================================================

    def get_firewall_rules(self) -> List[FirewallRuleView]:
        with self._session() as db:
            rows = db.scalars(select(FirewallRule).order_by(FirewallRule.id)).all()
            return [FirewallRuleView.model_validate(row) for row in rows]

    def create_firewall_rule(self, rule: FirewallRuleCreate) -> FirewallRuleView:
        with self._session() as db:
            row = FirewallRule(**rule.model_dump())
            db.add(row)
            db.flush()
            return FirewallRuleView.model_validate(row)

    def update_firewall_rule(self, rule_id: int, changes: FirewallRuleUpdate) -> FirewallRuleView:
        with self._session() as db:
            row = db.get(FirewallRule, rule_id)
            if row is None:
                raise NotFoundError(f"Firewall rule with id {rule_id} not found")
            for field, value in changes.changes().items():
                setattr(row, field, value)
            db.flush()
            return FirewallRuleView.model_validate(row)

    def delete_firewall_rule(self, rule_id: int) -> None:
        with self._session() as db:
            row = db.get(FirewallRule, rule_id)
            if row is None:
                raise NotFoundError(f"Firewall rule with id {rule_id} not found")
            db.delete(row)

    # ========================================================================
    # ACTIVITY LOG
    # ========================================================================

    def get_activity_logs(
        self,
        limit: int = DEFAULT_LOG_LIMIT,
        offset: int = DEFAULT_LOG_OFFSET,
        category: Optional[str] = None,
    ) -> List[ActivityLogView]:
        """Newest first (timestamp, then id, descending)."""
        components = category_components(category)
        stmt = select(ActivityLog).order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        if components is not None:
            stmt = stmt.where(ActivityLog.component.in_(components))
        stmt = stmt.offset(min(max(offset, 0), MAX_SQL_INT)).limit(min(max(limit, 0), MAX_SQL_INT))
        with self._session() as db:
            return [ActivityLogView.model_validate(row) for row in db.scalars(stmt).all()]

    def count_activity_logs(self, category: Optional[str] = None) -> int:
        components = category_components(category)
        stmt = select(func.count(ActivityLog.id))
        if components is not None:
            stmt = stmt.where(ActivityLog.component.in_(components))
        with self._session() as db:
            return int(db.scalar(stmt) or 0)

    def create_activity_log(self, entry: ActivityLogCreate) -> ActivityLogView:
        with self._session() as db:
            row = ActivityLog(timestamp=utcnow(), **entry.model_dump())
            db.add(row)
            db.flush()
            return ActivityLogView.model_validate(row)
