"""
System change appliers.

The control logic hands every successful mutation to an applier so a real
machine could follow the simulated state. Appliers are best effort: the
caller logs a failed ChangeResult and carries on, the API outcome and the
activity log do not depend on it.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeResult:
    ok: bool
    message: str = ""


class SystemChangeApplier(Protocol):
    def apply(self, target: str, desired_state: str) -> ChangeResult:
        ...


class NoopApplier:
    """Default applier: the machine is never touched."""

    def apply(self, target: str, desired_state: str) -> ChangeResult:
        logger.debug(f"Simulated system change: {target} -> {desired_state}")
        return ChangeResult(ok=True, message="simulated")


@dataclass
class RecordingApplier:
    """Keeps every requested change in memory; handy for dry runs and tests."""

    calls: List[tuple] = field(default_factory=list)

    def apply(self, target: str, desired_state: str) -> ChangeResult:
        self.calls.append((target, desired_state))
        return ChangeResult(ok=True, message="recorded")


class ScriptApplier:
    """
    Runs an external script as `<script> <target> <desired_state>`.

    The script itself (netsh / sc / reg calls on Windows) is outside this
    project. Non-zero exit codes and OS errors come back as failed results.
    """

    def __init__(self, script_path: str, timeout_seconds: Optional[float] = None):
        if not str(script_path or "").strip():
            raise ValueError("script_path is required for the script applier")
        self.script_path = script_path
        self.timeout_seconds = timeout_seconds

    def apply(self, target: str, desired_state: str) -> ChangeResult:
        cmd = [self.script_path, target, desired_state]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            return ChangeResult(ok=False, message=f"{' '.join(cmd)}: {exc}")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            stdout = (result.stdout or "").strip()
            msg = stderr or stdout or "Unknown error from apply script"
            return ChangeResult(ok=False, message=f"exit code {result.returncode}: {msg}")

        return ChangeResult(ok=True, message=(result.stdout or "").strip())


def build_applier(kind: str = "noop", script_path: Optional[str] = None) -> SystemChangeApplier:
    kind = (kind or "noop").strip().lower()
    if kind == "noop":
        return NoopApplier()
    if kind == "script":
        return ScriptApplier(script_path or "")
    raise ValueError(f"Unknown applier kind: {kind}")


def apply_best_effort(applier: SystemChangeApplier, target: str, desired_state: str) -> ChangeResult:
    """Invoke the applier and swallow its outcome after logging it."""
    try:
        result = applier.apply(target, desired_state)
    except Exception as exc:
        logger.warning(f"System change {target} -> {desired_state} raised: {exc}")
        return ChangeResult(ok=False, message=str(exc))

    if not result.ok:
        logger.warning(f"System change {target} -> {desired_state} failed: {result.message}")
    return result
