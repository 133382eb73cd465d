"""
HTTP tests for the control API.

Tests:
- Read endpoints and camelCase wire format
- Mutations return the updated resource and write one log entry
- 400 / 404 / 500 error shapes with no state change
- Log pagination, categories and CSV export
"""
import pytest
from fastapi.testclient import TestClient

from guard.models import ActivityLog
from tests.conftest import API, log_count


class TestReads:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["api_prefix"] == API

    def test_settings_wire_format(self, client):
        data = client.get(f"{API}/settings").json()
        assert set(data) == {
            "id", "rdpEnabled", "sshEnabled", "vncEnabled", "firewallDomainEnabled",
            "firewallPrivateEnabled", "firewallPublicEnabled", "lastUpdated",
        }

    def test_services(self, client):
        data = client.get(f"{API}/services").json()
        assert len(data) == 3
        assert data[0] == {
            "id": 1,
            "name": "TermService",
            "displayName": "Terminal Services",
            "description": "Remote Desktop Protocol service",
            "status": "stopped",
            "startupType": "disabled",
        }

    def test_firewall_rules(self, client):
        data = client.get(f"{API}/firewall/rules").json()
        assert len(data) == 4
        assert data[2] == {
            "id": 3, "name": "Block SSH", "port": 22, "protocol": "tcp",
            "direction": "inbound", "action": "block", "isActive": True,
        }

    def test_status(self, client, store):
        data = client.get(f"{API}/status").json()
        assert data == {
            "remoteAccessBlocked": True,
            "firewallActive": True,
            "servicesStopped": True,
            "securityScore": 95,
            "activeBlockRules": 4,
            "systemOnline": True,
        }
        assert log_count(store) == 0


class TestSettingsPatch:
    def test_patch_merges(self, client, store):
        resp = client.patch(f"{API}/settings", json={"rdpEnabled": True})
        assert resp.status_code == 200
        assert resp.json()["rdpEnabled"] is True
        assert resp.json()["firewallDomainEnabled"] is True

        entry = store.get_activity_logs(limit=1)[0]
        assert (entry.action, entry.component) == ("UPDATED", "Security Settings")

    def test_full_object_round_trip(self, client, store):
        settings = client.get(f"{API}/settings").json()
        settings["rdpEnabled"] = True
        resp = client.patch(f"{API}/settings", json=settings)
        assert resp.status_code == 200
        assert resp.json()["rdpEnabled"] is True
        assert resp.json()["id"] == 1
        assert log_count(store) == 1

    def test_empty_patch_is_logged(self, client, store):
        resp = client.patch(f"{API}/settings", json={})
        assert resp.status_code == 200
        assert resp.json()["rdpEnabled"] is False
        assert log_count(store) == 1

    @pytest.mark.parametrize("body", [{"rdpEnabled": "yes"}, {"telnetEnabled": True}])
    def test_schema_violation(self, client, store, body):
        before = store.get_security_settings()
        resp = client.patch(f"{API}/settings", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid security settings data"}
        assert store.get_security_settings() == before
        assert log_count(store) == 0


class TestRemoteAccess:
    def test_toggle(self, client, store):
        resp = client.post(f"{API}/remote-access/toggle", json={"service": "ssh", "enabled": True})
        assert resp.status_code == 200
        data = resp.json()
        assert (data["rdpEnabled"], data["sshEnabled"], data["vncEnabled"]) == (False, True, False)

        logs = client.get(f"{API}/logs").json()
        assert len(logs) == 1
        assert logs[0]["action"] == "ENABLED"
        assert logs[0]["details"] == "SSH allowed on port 22"
        assert logs[0]["ipAddress"] == "testclient"

    def test_toggle_invalid_service(self, client, store):
        resp = client.post(f"{API}/remote-access/toggle", json={"service": "ftp", "enabled": True})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid service type"}
        assert log_count(store) == 0

    def test_toggle_missing_enabled(self, client, store):
        resp = client.post(f"{API}/remote-access/toggle", json={"service": "rdp"})
        assert resp.status_code == 400
        assert "message" in resp.json()
        assert log_count(store) == 0

    def test_block_all(self, client, store, applier):
        client.post(f"{API}/remote-access/toggle", json={"service": "rdp", "enabled": True})
        resp = client.post(f"{API}/remote-access/block-all")
        assert resp.status_code == 200
        data = resp.json()
        assert not (data["rdpEnabled"] or data["sshEnabled"] or data["vncEnabled"])
        assert log_count(store) == 2
        assert ("port:5900", "block") in applier.calls


class TestFirewall:
    def test_toggle(self, client, store):
        resp = client.post(f"{API}/firewall/toggle", json={"profile": "public", "enabled": False})
        assert resp.status_code == 200
        assert resp.json()["firewallPublicEnabled"] is False
        assert client.get(f"{API}/status").json()["firewallActive"] is False
        assert store.get_activity_logs()[0].action == "DISABLED"

    def test_invalid_profile(self, client, store):
        resp = client.post(f"{API}/firewall/toggle", json={"profile": "work", "enabled": True})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid firewall profile"}
        assert log_count(store) == 0


class TestServices:
    def test_control(self, client, store):
        resp = client.post(f"{API}/services/1/control", json={"action": "start"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"
        assert resp.json()["startupType"] == "disabled"

        entry = store.get_activity_logs()[0]
        assert entry.action == "START"
        assert entry.details == "Terminal Services started successfully"

    @pytest.mark.parametrize("action, details", [
        ("stop", "Remote Registry stopped successfully"),
        ("enable", "Remote Registry enabled successfully"),
        ("disable", "Remote Registry disabled successfully"),
    ])
    def test_control_details_wording(self, client, store, action, details):
        client.post(f"{API}/services/2/control", json={"action": action})
        assert store.get_activity_logs()[0].details == details

    def test_control_unknown_id(self, client, store):
        before = client.get(f"{API}/services").json()
        resp = client.post(f"{API}/services/999/control", json={"action": "stop"})
        assert resp.status_code == 404
        assert resp.json() == {"message": "Service not found"}
        assert client.get(f"{API}/services").json() == before
        assert log_count(store) == 0

    def test_control_invalid_action(self, client, store):
        resp = client.post(f"{API}/services/1/control", json={"action": "pause"})
        assert resp.status_code == 400
        assert log_count(store) == 0

    def test_control_non_numeric_id(self, client):
        resp = client.post(f"{API}/services/abc/control", json={"action": "stop"})
        assert resp.status_code == 400

    def test_bulk_stop_all(self, client, store):
        client.post(f"{API}/services/1/control", json={"action": "enable"})
        client.post(f"{API}/services/1/control", json={"action": "start"})

        resp = client.post(f"{API}/services/bulk-action", json={"action": "stop-all"})
        assert resp.status_code == 200
        data = resp.json()
        assert [s["status"] for s in data] == ["stopped"] * 3
        assert data[0]["startupType"] == "automatic"
        assert store.get_activity_logs()[0].action == "STOP_ALL"
        assert log_count(store) == 3

    def test_bulk_invalid(self, client, store):
        resp = client.post(f"{API}/services/bulk-action", json={"action": "nuke-all"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid bulk action"}
        assert log_count(store) == 0


class TestLogs:
    def _make_logs(self, client, n):
        for i in range(n):
            client.post(f"{API}/firewall/toggle", json={"profile": "domain", "enabled": i % 2 == 0})

    def test_limit_and_order(self, client):
        self._make_logs(client, 12)
        logs = client.get(f"{API}/logs", params={"limit": 10, "offset": 0}).json()
        assert len(logs) == 10
        ids = [log["id"] for log in logs]
        assert ids == sorted(ids, reverse=True)
        timestamps = [log["timestamp"] for log in logs]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_offset_past_end(self, client):
        self._make_logs(client, 2)
        resp = client.get(f"{API}/logs", params={"offset": 50})
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.parametrize("param", ["offset", "limit"])
    def test_huge_numbers_do_not_overflow(self, client, param):
        self._make_logs(client, 2)
        resp = client.get(f"{API}/logs", params={param: "99999999999999999999"})
        assert resp.status_code == 200
        assert len(resp.json()) == (0 if param == "offset" else 2)

    def test_bad_numbers_fall_back(self, client):
        self._make_logs(client, 3)
        resp = client.get(f"{API}/logs", params={"limit": "many", "offset": "first"})
        assert resp.status_code == 200
        assert len(resp.json()) == 3

    def test_category(self, client):
        self._make_logs(client, 2)
        client.post(f"{API}/remote-access/block-all")
        data = client.get(f"{API}/logs", params={"category": "connections"}).json()
        assert [log["component"] for log in data] == ["Remote Access"]

    def test_unknown_category(self, client):
        resp = client.get(f"{API}/logs", params={"category": "kernel"})
        assert resp.status_code == 400

    def test_export_csv(self, client):
        client.post(f"{API}/services/bulk-action", json={"action": "reset-all"})
        resp = client.get(f"{API}/logs/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "security-logs-" in resp.headers["content-disposition"]

        lines = resp.text.strip().split("\n")
        assert lines[0] == "Timestamp,Action,Component,Status,Details"
        assert len(lines) == 2
        assert lines[1].endswith('"RESET_ALL","Services","success","Bulk action reset-all applied to all remote services"')


class TestUnexpectedErrors:
    def test_internal_error_is_generic(self, app, store, monkeypatch):
        def boom():
            raise RuntimeError("database exploded at 0xdeadbeef")

        monkeypatch.setattr(store, "get_security_settings", boom)
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get(f"{API}/settings")
        assert resp.status_code == 500
        assert resp.json() == {"message": "Internal server error"}
        assert "0xdeadbeef" not in resp.text

    def test_database_failure_is_internal_error(self, app, store):
        ActivityLog.__table__.drop(store.engine)
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get(f"{API}/logs")
        assert resp.status_code == 500
        assert resp.json() == {"message": "Store operation failed"}
