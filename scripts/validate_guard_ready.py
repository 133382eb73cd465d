"""
Validate that a running SecureGuard service answers every read endpoint and,
with --exercise, that a block-all mutation lands in the activity log.

Usage:
    python scripts/validate_guard_ready.py --base-url http://127.0.0.1:5000 [--exercise] [--output report.json]
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from guard import config
from shared.guard_client import GuardClient


class GuardValidationError(RuntimeError):
    pass


def expect(result, what: str) -> Any:
    ok, payload, error = result
    if not ok:
        raise GuardValidationError(f"{what} failed: {error}")
    return payload


def run_validation(client: GuardClient, exercise: bool = False) -> dict[str, Any]:
    report: dict[str, Any] = {"base_url": client.base_url, "checks": []}

    settings = expect(client.get_settings(), "GET /settings")
    report["checks"].append({"name": "settings", "ok": True, "lastUpdated": settings.get("lastUpdated")})

    rules = expect(client.get_firewall_rules(), "GET /firewall/rules")
    report["checks"].append({"name": "firewall_rules", "ok": True, "count": len(rules)})

    services = expect(client.get_services(), "GET /services")
    report["checks"].append({"name": "services", "ok": True, "count": len(services)})

    status = expect(client.get_status(), "GET /status")
    if not status.get("systemOnline"):
        raise GuardValidationError("Status reports systemOnline=false")
    report["checks"].append({"name": "status", "ok": True, "securityScore": status.get("securityScore")})

    logs = expect(client.get_logs(limit=10), "GET /logs")
    report["checks"].append({"name": "logs", "ok": True, "count": len(logs)})

    if exercise:
        before = logs[0]["id"] if logs else 0
        updated = expect(client.block_all_remote_access(), "POST /remote-access/block-all")
        if updated["rdpEnabled"] or updated["sshEnabled"] or updated["vncEnabled"]:
            raise GuardValidationError("Remote access still enabled after block-all")
        latest = expect(client.get_logs(limit=1), "GET /logs")
        if not latest or latest[0]["id"] <= before or latest[0]["action"] != "BLOCKED":
            raise GuardValidationError("block-all did not produce a BLOCKED log entry")
        report["checks"].append({"name": "block_all_logged", "ok": True, "logId": latest[0]["id"]})

    return report


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate SecureGuard control service readiness")
    parser.add_argument("--base-url", default=config.BASE_URL, help="Service base URL")
    parser.add_argument("--exercise", action="store_true", help="Also run block-all and check the log")
    parser.add_argument("--output", default="", help="Optional JSON report output path")
    args = parser.parse_args()

    try:
        report = run_validation(GuardClient(args.base_url), exercise=args.exercise)
    except GuardValidationError as exc:
        print(f"NOT READY: {exc}")
        sys.exit(1)

    pretty = json.dumps(report, indent=2, default=str)
    print(pretty)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as handle:
            handle.write(pretty)
            handle.write("\n")


if __name__ == "__main__":
    main()
