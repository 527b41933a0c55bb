"""Scala Steward launch arguments.

CONTRACT
- Inputs: LaunchOptions (resolved configuration), LaunchEnv
- Outputs (required):
  - build_launch_args(): flat, ordered list[str] of flags
  - LaunchEnv.as_env(): extra environment for the Scala Steward process
- Invariants:
  - Boolean flags appear bare and once when on, not at all when off
  - Value flags appear as [flag, value] only when value is non-empty
  - GitHub App flags appear together or not at all
  - other-args tokens come last, in order
  - No empty-string token is ever emitted
- Failure:
  - None (pure projection)
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config import ActionConfig
from .schemas import AuthUser
from .workspace import ASKPASS_FILE, REPOS_FILE, WORKSPACE_DIR

SBT_OPTS = "SBT_OPTS=-Xmx2048m -Xss8m -XX:MaxMetaspaceSize=512m"
TRACE = "TRACE"


@dataclass(frozen=True)
class GitHubAppArgs:
    id: str
    key_file: Path


@dataclass(frozen=True)
class LaunchOptions:
    workspace_dir: Path
    author_email: str
    author_name: str
    vcs_login: str
    timeout: str = ""
    vcs_api_host: str = ""
    ignore_opts_files: bool = False
    sign_commits: bool = False
    signing_key: str = ""
    cache_ttl: str = ""
    scalafix_migrations: str = ""
    artifact_migrations: str = ""
    repo_config: str = ""
    github_app: GitHubAppArgs | None = None
    other_args: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class LaunchEnv:
    """Environment handed to the Scala Steward process, never to os.environ."""

    debug: bool = False
    bin_dir: Path | None = None

    def as_env(self, path: str | None = None) -> dict[str, str]:
        env: dict[str, str] = {}
        if self.debug:
            env["LOG_LEVEL"] = TRACE
            env["ROOT_LOG_LEVEL"] = TRACE
        if self.bin_dir is not None:
            current = os.environ.get("PATH", "") if path is None else path
            env["PATH"] = os.pathsep.join(p for p in (str(self.bin_dir), current) if p)
        return env


def _value(flag: str, value: str | Path | None) -> list[str]:
    text = str(value) if value is not None else ""
    return [flag, text] if text else []


def _switch(flag: str, on: bool) -> list[str]:
    return [flag] if on else []


def _flatten(fragments: Iterable[Sequence[str]]) -> list[str]:
    return [token for fragment in fragments for token in fragment if token]


def github_app_args(app: GitHubAppArgs | None) -> list[str]:
    if app is None:
        return []
    return ["--github-app-id", app.id, "--github-app-key-file", str(app.key_file)]


def build_launch_args(options: LaunchOptions) -> list[str]:
    ws = options.workspace_dir
    return _flatten(
        [
            _value("--workspace", ws / WORKSPACE_DIR),
            _value("--repos-file", ws / REPOS_FILE),
            _value("--git-ask-pass", ws / ASKPASS_FILE),
            _value("--git-author-email", options.author_email),
            _value("--git-author-name", options.author_name),
            _value("--vcs-login", options.vcs_login),
            ["--env-var", SBT_OPTS],
            _value("--process-timeout", options.timeout),
            _value("--vcs-api-host", options.vcs_api_host),
            _switch("--ignore-opts-files", options.ignore_opts_files),
            _switch("--sign-commits", options.sign_commits),
            _value("--git-author-signing-key", options.signing_key),
            _value("--cache-ttl", options.cache_ttl),
            _value("--scalafix-migrations", options.scalafix_migrations),
            _value("--artifact-migrations", options.artifact_migrations),
            _value("--repo-config", options.repo_config),
            ["--do-not-fork"],
            ["--disable-sandbox"],
            github_app_args(options.github_app),
            list(options.other_args),
        ]
    )


def options_from_config(
    cfg: ActionConfig,
    workspace_dir: Path,
    user: AuthUser,
    app_key_file: Path | None = None,
) -> LaunchOptions:
    """Resolve launch options, falling back to the token's account for authorship."""
    app = None
    if cfg.github_app is not None and app_key_file is not None:
        app = GitHubAppArgs(id=cfg.github_app.id, key_file=app_key_file)
    return LaunchOptions(
        workspace_dir=workspace_dir,
        author_email=cfg.author_email or user.email,
        author_name=cfg.author_name or user.name,
        vcs_login=user.login,
        timeout=cfg.timeout,
        vcs_api_host=cfg.github_api_url,
        ignore_opts_files=cfg.ignore_opts_files,
        sign_commits=cfg.sign_commits,
        signing_key=cfg.signing_key,
        cache_ttl=cfg.cache_ttl,
        scalafix_migrations=cfg.scalafix_migrations,
        artifact_migrations=cfg.artifact_migrations,
        repo_config=str(cfg.repo_config) if cfg.repo_config else "",
        github_app=app,
        other_args=tuple(cfg.other_args),
    )
