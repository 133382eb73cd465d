from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass
class StartupProfile:
    role: str
    host: str
    port: int


def _require_valid_port(port: int, field_name: str = "port") -> None:
    if int(port) < 1 or int(port) > 65535:
        raise ValueError(f"{field_name} must be in range 1..65535")


def _require_non_empty_host(host: str) -> None:
    if not str(host or "").strip():
        raise ValueError("host is required")


def validate_guard_profile(profile: StartupProfile, applier: str = "noop", apply_script: str | None = None) -> None:
    _require_non_empty_host(profile.host)
    _require_valid_port(profile.port)
    if applier not in {"noop", "script"}:
        raise ValueError(f"applier must be 'noop' or 'script', got '{applier}'")
    if applier == "script" and not str(apply_script or "").strip():
        raise ValueError("SECUREGUARD_APPLY_SCRIPT is required when applier is 'script'")


def validate_client_profile(base_url: str) -> None:
    parsed = urlparse(str(base_url or "").strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("base_url must be a valid http(s) URL")
