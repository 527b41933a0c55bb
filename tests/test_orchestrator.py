import asyncio
from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from steward_action.config import ActionConfig
from steward_action.errors import CacheError, ConnectivityError, LaunchFailure
from steward_action.orchestrator import run_action
from steward_action.repos import GitHubAppInfo
from steward_action.schemas import AuthUser
from steward_action.workspace import WorkspaceManager

USER = AuthUser(login="steward-bot", name="Steward Bot", email="bot@example.com")


@pytest.fixture(autouse=True)
def no_runner_files(monkeypatch):
    monkeypatch.delenv("GITHUB_PATH", raising=False)


def _cfg(tmp_path, **overrides) -> ActionConfig:
    base = dict(
        github_token="ghp_" + "x" * 36,
        github_repository="owner/repo",
        cache_ttl="2hours",
        cache_ttl_seconds=7200,
        timeout="30min",
        workspace_root=tmp_path / "scala-steward",
        cache_dir=tmp_path / "cache",
        bin_dir=tmp_path / "bin",
        cache_key="scala-steward-owner_repo",
    )
    base.update(overrides)
    return ActionConfig(**base)


class _Harness:
    """Patches every external step of run_action and keeps the mocks."""

    def __init__(self, launch_error=None, save_error=None, check_error=None):
        self.launch_error = launch_error
        self.save_error = save_error
        self.check_error = check_error

    def __enter__(self):
        self._stack = ExitStack()
        self.check = self._stack.enter_context(
            patch(
                "steward_action.orchestrator.check_artifact_registry",
                new=AsyncMock(side_effect=self.check_error),
            )
        )
        self.auth = self._stack.enter_context(
            patch("steward_action.orchestrator.get_auth_user", new=AsyncMock(return_value=USER))
        )
        self.coursier_cls = self._stack.enter_context(patch("steward_action.orchestrator.Coursier"))
        self.coursier = self.coursier_cls.return_value
        self.coursier.self_install = AsyncMock()
        self.coursier.install = MagicMock()
        self.coursier.launch = AsyncMock(side_effect=self.launch_error)
        self.mill_cls = self._stack.enter_context(patch("steward_action.orchestrator.Mill"))
        self.mill_cls.return_value.install = AsyncMock()
        self.save = self._stack.enter_context(
            patch.object(
                WorkspaceManager,
                "save_workspace_cache",
                autospec=True,
                side_effect=self.save_error,
            )
        )
        return self

    def __exit__(self, *exc):
        self._stack.close()
        return False


def test_successful_run(tmp_path, capsys):
    cfg = _cfg(tmp_path, other_args=["--foo", "bar"])
    with _Harness() as h:
        result = asyncio.run(run_action(cfg))

    assert result.ok
    assert result.workspace_dir == tmp_path / "scala-steward"
    assert h.save.call_count == 1
    assert [c.args[0] for c in h.coursier.install.call_args_list] == ["scalafmt", "scalafix"]
    h.mill_cls.return_value.install.assert_awaited_once()

    app, version, args = h.coursier.launch.await_args.args
    assert app == "scala-steward"
    assert version == ""
    assert args[:2] == ["--workspace", str(tmp_path / "scala-steward" / "workspace")]
    assert args[-2:] == ["--foo", "bar"]
    assert ["--vcs-login", "steward-bot"] == args[args.index("--vcs-login") : args.index("--vcs-login") + 2]
    assert (tmp_path / "scala-steward" / "repos.md").read_bytes() == b"owner/repo"

    out = capsys.readouterr().out
    assert "::add-mask::ghp_" in out
    assert "::error::" not in out


def test_launch_failure_still_saves_cache(tmp_path, capsys):
    with _Harness(launch_error=LaunchFailure("scala-steward", 1)) as h:
        result = asyncio.run(run_action(_cfg(tmp_path)))

    assert result.status == "FAIL"
    assert h.save.call_count == 1
    assert result.message == "scala-steward exited with code 1"
    assert "::error:: ✕ scala-steward exited with code 1" in capsys.readouterr().out


def test_launch_error_keeps_priority_over_save_error(tmp_path, capsys):
    with _Harness(
        launch_error=LaunchFailure("scala-steward", 2),
        save_error=CacheError("disk full"),
    ) as h:
        result = asyncio.run(run_action(_cfg(tmp_path)))

    assert h.save.call_count == 1
    assert result.status == "FAIL"
    assert result.errors == ["scala-steward exited with code 2"]
    assert result.warnings == ["disk full"]
    out = capsys.readouterr().out
    assert out.index("::error::") < out.index("::warning::")


def test_save_failure_alone_is_a_warning(tmp_path, capsys):
    with _Harness(save_error=CacheError("read-only cache")):
        result = asyncio.run(run_action(_cfg(tmp_path)))

    assert result.ok
    assert result.warnings == ["read-only cache"]
    out = capsys.readouterr().out
    assert "::warning:: ✕ read-only cache" in out
    assert "::error::" not in out


def test_failure_before_launch_skips_everything_after(tmp_path, capsys):
    with _Harness(check_error=ConnectivityError("repo1.maven.org", "timed out")) as h:
        result = asyncio.run(run_action(_cfg(tmp_path)))

    assert result.status == "FAIL"
    assert "Unable to connect to Maven Central" in result.message
    h.coursier_cls.assert_not_called()
    h.auth.assert_not_awaited()
    assert h.save.call_count == 0
    assert result.workspace_dir is None


def test_app_mode_run(tmp_path):
    cfg = _cfg(tmp_path, github_app=GitHubAppInfo(id="42", key="PEM-CONTENT"))
    with _Harness() as h:
        result = asyncio.run(run_action(cfg))

    assert result.ok
    root = tmp_path / "scala-steward"
    assert (root / "repos.md").read_bytes() == b""
    args = h.coursier.launch.await_args.args[2]
    i = args.index("--github-app-id")
    assert args[i : i + 4] == ["--github-app-id", "42", "--github-app-key-file", str(root / "github-app.pem")]
    assert (root / "github-app.pem").read_text() == "PEM-CONTENT\n"


def test_debug_env_passed_to_launch(tmp_path, capsys):
    with _Harness() as h:
        asyncio.run(run_action(_cfg(tmp_path, debug=True)))

    env = h.coursier.launch.await_args.kwargs["env"]
    assert env["LOG_LEVEL"] == "TRACE"
    assert env["ROOT_LOG_LEVEL"] == "TRACE"
    assert env["PATH"].startswith(str(tmp_path / "bin"))
    assert "::debug::Debug mode activated" in capsys.readouterr().out


def test_missing_repos_file_fails_before_workspace(tmp_path):
    with _Harness() as h:
        result = asyncio.run(run_action(_cfg(tmp_path, repos_file=tmp_path / "missing.md")))

    assert result.status == "FAIL"
    assert "repos-file" in result.message
    assert not (tmp_path / "scala-steward").exists()
    assert h.save.call_count == 0


def test_token_is_redacted_from_failure(tmp_path):
    cfg = _cfg(tmp_path)
    with _Harness(launch_error=LaunchFailure(cfg.github_token, 1)):
        result = asyncio.run(run_action(cfg))
    assert cfg.github_token not in result.message
    assert "[REDACTED]" in result.message


def test_no_repository_fails_before_launch(tmp_path, capsys):
    with _Harness() as h:
        result = asyncio.run(run_action(_cfg(tmp_path, github_repository="")))

    assert result.status == "FAIL"
    assert "No repository to update" in result.message
    h.coursier.launch.assert_not_awaited()
    assert not (tmp_path / "scala-steward" / "repos.md").exists()
    assert "::error:: ✕ No repository to update" in capsys.readouterr().out
