import os
from pathlib import Path

import pytest

from steward_action.config import ActionConfig
from steward_action.launch_args import (
    SBT_OPTS,
    GitHubAppArgs,
    LaunchEnv,
    LaunchOptions,
    build_launch_args,
    options_from_config,
)
from steward_action.repos import GitHubAppInfo
from steward_action.schemas import AuthUser

WS = Path("/home/runner/scala-steward")


def _options(**overrides) -> LaunchOptions:
    base = dict(
        workspace_dir=WS,
        author_email="bot@example.com",
        author_name="Bot",
        vcs_login="bot",
    )
    base.update(overrides)
    return LaunchOptions(**base)


def _contains_run(haystack: list[str], needle: list[str]) -> bool:
    n = len(needle)
    return any(haystack[i : i + n] == needle for i in range(len(haystack) - n + 1))


def test_minimal_arguments_in_order():
    args = build_launch_args(_options())
    assert args == [
        "--workspace", str(WS / "workspace"),
        "--repos-file", str(WS / "repos.md"),
        "--git-ask-pass", str(WS / "askpass.sh"),
        "--git-author-email", "bot@example.com",
        "--git-author-name", "Bot",
        "--vcs-login", "bot",
        "--env-var", SBT_OPTS,
        "--do-not-fork",
        "--disable-sandbox",
    ]


def test_github_app_pair_is_contiguous():
    args = build_launch_args(
        _options(github_app=GitHubAppArgs(id="42", key_file=Path("/tmp/key.pem")))
    )
    assert _contains_run(
        args, ["--github-app-id", "42", "--github-app-key-file", "/tmp/key.pem"]
    )


def test_no_github_app_flags_without_app():
    args = build_launch_args(_options())
    assert "--github-app-id" not in args
    assert "--github-app-key-file" not in args


@pytest.mark.parametrize("on", [True, False])
def test_boolean_flags(on):
    args = build_launch_args(_options(sign_commits=on, ignore_opts_files=on))
    expected = 1 if on else 0
    assert args.count("--sign-commits") == expected
    assert args.count("--ignore-opts-files") == expected
    assert "" not in args


def test_value_flags_only_when_present():
    args = build_launch_args(
        _options(
            timeout="30min",
            vcs_api_host="https://api.github.com",
            signing_key="ABCDEF",
            cache_ttl="2hours",
            scalafix_migrations="migrations/scalafix.conf",
            artifact_migrations="",
            repo_config=".github/.scala-steward.conf",
        )
    )
    assert _contains_run(args, ["--process-timeout", "30min"])
    assert _contains_run(args, ["--vcs-api-host", "https://api.github.com"])
    assert _contains_run(args, ["--git-author-signing-key", "ABCDEF"])
    assert _contains_run(args, ["--cache-ttl", "2hours"])
    assert _contains_run(args, ["--scalafix-migrations", "migrations/scalafix.conf"])
    assert _contains_run(args, ["--repo-config", ".github/.scala-steward.conf"])
    assert "--artifact-migrations" not in args
    assert "" not in args


def test_other_args_appended_last_in_order():
    args = build_launch_args(
        _options(
            other_args=("--foo", "bar", "--baz"),
            github_app=GitHubAppArgs(id="42", key_file=Path("/tmp/key.pem")),
        )
    )
    assert args[-3:] == ["--foo", "bar", "--baz"]
    assert args.index("--github-app-id") < args.index("--foo")


def test_launch_env_debug_levels():
    assert LaunchEnv().as_env() == {}
    env = LaunchEnv(debug=True).as_env()
    assert env == {"LOG_LEVEL": "TRACE", "ROOT_LOG_LEVEL": "TRACE"}


def test_launch_env_prefixes_path():
    env = LaunchEnv(bin_dir=Path("/opt/bin")).as_env(path="/usr/bin")
    assert env["PATH"] == os.pathsep.join(["/opt/bin", "/usr/bin"])
    assert "LOG_LEVEL" not in env


def test_launch_env_does_not_touch_process_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    LaunchEnv(debug=True).as_env()
    assert "LOG_LEVEL" not in os.environ


def test_options_from_config_falls_back_to_user():
    cfg = ActionConfig(
        github_token="t",
        github_repository="owner/repo",
        sign_commits=True,
        other_args=["--foo"],
        github_app=GitHubAppInfo(id="7", key="k"),
    )
    user = AuthUser(login="bot", name="Bot Name", email="bot@example.com")
    opts = options_from_config(cfg, WS, user, app_key_file=WS / "github-app.pem")

    assert opts.author_email == "bot@example.com"
    assert opts.author_name == "Bot Name"
    assert opts.vcs_login == "bot"
    assert opts.sign_commits is True
    assert opts.other_args == ("--foo",)
    assert opts.github_app == GitHubAppArgs(id="7", key_file=WS / "github-app.pem")


def test_options_from_config_prefers_inputs():
    cfg = ActionConfig(
        github_token="t",
        github_repository="owner/repo",
        author_email="me@example.com",
        author_name="Me",
    )
    user = AuthUser(login="bot", name="Bot", email="bot@example.com")
    opts = options_from_config(cfg, WS, user)
    assert opts.author_email == "me@example.com"
    assert opts.author_name == "Me"
    assert opts.github_app is None
