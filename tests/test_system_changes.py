import logging
import stat
import sys

import pytest

from guard.system_changes import (
    ChangeResult,
    NoopApplier,
    RecordingApplier,
    ScriptApplier,
    apply_best_effort,
    build_applier,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a /bin/sh script")


def _script(tmp_path, body: str):
    path = tmp_path / "apply.sh"
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IEXEC)
    return str(path)


def test_noop_applier_succeeds():
    assert NoopApplier().apply("port:3389", "block").ok


def test_build_applier():
    assert isinstance(build_applier("noop"), NoopApplier)
    assert isinstance(build_applier("script", "/opt/secureguard/apply.cmd"), ScriptApplier)
    with pytest.raises(ValueError):
        build_applier("script")
    with pytest.raises(ValueError):
        build_applier("powershell")


def test_missing_script_is_a_failed_result(tmp_path):
    result = ScriptApplier(str(tmp_path / "missing.sh")).apply("port:22", "block")
    assert not result.ok


@posix_only
def test_script_receives_target_and_state(tmp_path):
    applier = ScriptApplier(_script(tmp_path, 'echo "$1=$2"'))
    assert applier.apply("firewall:public", "on") == ChangeResult(ok=True, message="firewall:public=on")


@posix_only
def test_script_non_zero_exit(tmp_path):
    applier = ScriptApplier(_script(tmp_path, 'echo "access denied" >&2; exit 5'))
    result = applier.apply("service:RasMan", "stop")
    assert not result.ok
    assert result.message == "exit code 5: access denied"


def test_best_effort_swallows_exceptions(caplog):
    class Broken:
        def apply(self, target, desired_state):
            raise OSError("no admin rights")

    with caplog.at_level(logging.WARNING, logger="guard.system_changes"):
        result = apply_best_effort(Broken(), "port:5900", "block")
    assert not result.ok
    assert "no admin rights" in caplog.text


def test_best_effort_passes_through_success():
    recorder = RecordingApplier()
    assert apply_best_effort(recorder, "service:TermService", "disable").ok
    assert recorder.calls == [("service:TermService", "disable")]
