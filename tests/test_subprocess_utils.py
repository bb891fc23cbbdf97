import sys

import pytest

from deploy_action.subprocess_utils import run_command


def test_capture_mode_returns_stdout() -> None:
    result = run_command([sys.executable, "-c", "print('done')"], timeout=30)

    assert result.returncode == 0
    assert result.stdout.strip() == "done"


def test_non_zero_exit_includes_stderr_summary() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

    with pytest.raises(RuntimeError) as excinfo:
        run_command(cmd, timeout=30)

    message = str(excinfo.value)
    assert "exit=3" in message
    assert "boom" in message


def test_missing_command_raises_runtime_error() -> None:
    with pytest.raises(RuntimeError) as excinfo:
        run_command(["definitely-not-a-real-command-xyz"])

    assert "definitely-not-a-real-command-xyz" in str(excinfo.value)
