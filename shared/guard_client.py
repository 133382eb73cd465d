"""
HTTP client for the SecureGuard control API.

Every call returns `(ok, payload, error)`: `ok` is True for 2xx answers,
`payload` is the decoded JSON (or `{"raw": text}`), `error` is a short
"HTTP <code>: <message>" string for failures and None otherwise.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from guard.config import API_PREFIX, BASE_URL
from guard.startup_profile import validate_client_profile

logger = logging.getLogger(__name__)

ApiResult = Tuple[bool, Any, Optional[str]]


class GuardClient:
    def __init__(self, base_url: str = BASE_URL, timeout: float = 10, session=None):
        validate_client_profile(base_url)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def call_api(self, method: str, path: str, **kwargs) -> ApiResult:
        resp = self._session.request(method, f"{self.base_url}{API_PREFIX}{path}", timeout=self.timeout, **kwargs)
        content_type = resp.headers.get("content-type", "")
        if content_type.startswith("text/csv"):
            payload = resp.text
        else:
            try:
                payload = resp.json()
            except Exception:
                payload = {"raw": resp.text}

        if 200 <= resp.status_code < 300:
            return True, payload, None

        if isinstance(payload, dict):
            error = payload.get("message") or payload.get("detail") or payload.get("raw")
        else:
            error = str(payload)
        logger.debug(f"{method} {path} failed: HTTP {resp.status_code}: {error}")
        return False, payload, f"HTTP {resp.status_code}: {error}"

    # Settings
    def get_settings(self) -> ApiResult:
        return self.call_api("GET", "/settings")

    def update_settings(self, **changes: bool) -> ApiResult:
        """Keyword names are wire names, e.g. update_settings(rdpEnabled=False)."""
        return self.call_api("PATCH", "/settings", json=changes)

    # Remote access
    def toggle_remote_access(self, service: str, enabled: bool) -> ApiResult:
        return self.call_api("POST", "/remote-access/toggle", json={"service": service, "enabled": enabled})

    def block_all_remote_access(self) -> ApiResult:
        return self.call_api("POST", "/remote-access/block-all")

    # Firewall
    def get_firewall_rules(self) -> ApiResult:
        return self.call_api("GET", "/firewall/rules")

    def toggle_firewall(self, profile: str, enabled: bool) -> ApiResult:
        return self.call_api("POST", "/firewall/toggle", json={"profile": profile, "enabled": enabled})

    # Services
    def get_services(self) -> ApiResult:
        return self.call_api("GET", "/services")

    def control_service(self, service_id: int, action: str) -> ApiResult:
        return self.call_api("POST", f"/services/{service_id}/control", json={"action": action})

    def bulk_service_action(self, action: str) -> ApiResult:
        return self.call_api("POST", "/services/bulk-action", json={"action": action})

    # Activity log
    def get_logs(self, limit: Optional[int] = None, offset: Optional[int] = None,
                 category: Optional[str] = None) -> ApiResult:
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if category is not None:
            params["category"] = category
        return self.call_api("GET", "/logs", params=params)

    def export_logs(self, category: Optional[str] = None) -> ApiResult:
        params = {"category": category} if category is not None else {}
        return self.call_api("GET", "/logs/export", params=params)

    # Status
    def get_status(self) -> ApiResult:
        return self.call_api("GET", "/status")
