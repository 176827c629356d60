import pytest

from flow_export_mcp.backends.command import CommandBackend
from flow_export_mcp.backends.shell import ShellBackend
from flow_export_mcp.core.errors import HookExecutionError
from flow_export_mcp.core.hooks import Hook


def test_command_round_trips_record():
    backend = CommandBackend("cat")
    assert backend.execute({"a": 1, "b": "x"}) == {"a": 1, "b": "x"}


def test_command_requires_program():
    with pytest.raises(ValueError):
        CommandBackend("   ")


def test_shell_script_with_shebang_replaces_record():
    script = "#!/bin/sh\ncat > /dev/null\nprintf '{\"replaced\": true}'\n"
    assert ShellBackend(script).execute({"a": 1}) == {"replaced": True}


def test_shell_script_without_shebang_runs_under_sh():
    assert ShellBackend("cat").execute({"k": [1, 2]}) == {"k": [1, 2]}


@pytest.mark.parametrize(
    "script",
    [
        "cat > /dev/null; exit 3",
        "cat > /dev/null; echo not-json",
        "cat > /dev/null; echo '[1, 2]'",
    ],
)
def test_shell_failures_surface_as_hook_errors(script):
    hook = Hook(name="broken", backend=ShellBackend(script))
    with pytest.raises(HookExecutionError) as exc:
        hook.execute({"a": 1})
    assert exc.value.hook_name == "broken"


def test_timeout_is_a_failure():
    hook = Hook(name="slow", backend=CommandBackend("sleep 5", timeout=0.2))
    with pytest.raises(HookExecutionError) as exc:
        hook.execute({})
    assert "TimeoutExpired" in exc.value.reason


def test_shell_interpreter_from_shebang():
    assert ShellBackend("#!/usr/bin/env bash -e\ncat").interpreter == ["/usr/bin/env", "bash", "-e"]
    assert ShellBackend("cat").interpreter == ["/bin/sh"]
