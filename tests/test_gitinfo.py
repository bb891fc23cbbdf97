import pytest

from deploy_action import gitinfo
from deploy_action.subprocess_utils import RunResult


def test_explicit_value_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_SHA", "from-env")

    assert gitinfo.resolve_commit_hash(" abc123 ") == "abc123"


def test_github_sha_then_ci_commit_sha(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CI_COMMIT_SHA", "gitlab-sha")
    assert gitinfo.resolve_commit_hash() == "gitlab-sha"

    monkeypatch.setenv("GITHUB_SHA", "github-sha")
    assert gitinfo.resolve_commit_hash() == "github-sha"


def test_falls_back_to_git_rev_parse(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(cmd, *, cwd=None, timeout=None):  # noqa: ANN001
        calls.append((cmd, cwd))
        return RunResult(returncode=0, stdout="f" * 40 + "\n", stderr="")

    monkeypatch.setattr(gitinfo, "run_command", fake_run)

    assert gitinfo.resolve_commit_hash(cwd="/repo") == "f" * 40
    assert calls == [(["git", "rev-parse", "HEAD"], "/repo")]


def test_git_failure_raises_value_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, *, cwd=None, timeout=None):  # noqa: ANN001
        raise RuntimeError("명령 실행 실패: git rev-parse HEAD (exit=128)")

    monkeypatch.setattr(gitinfo, "run_command", fake_run)

    with pytest.raises(ValueError):
        gitinfo.resolve_commit_hash()
