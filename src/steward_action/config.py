from __future__ import annotations

"""Configuration models.

CONTRACT
- Inputs: action inputs (INPUT_* environment variables), optional YAML inputs file
- Outputs (required):
  - Validated ActionConfig
- Invariants:
  - Environment inputs win over the inputs file, which wins over defaults
  - Boolean inputs are true only for 'true' (any case)
  - cache-ttl parses to seconds (None means no expiry)
- Failure:
  - Raises AuthError when no GitHub token is provided
  - Raises ConfigError on an invalid inputs file, TTL, app info or repo-config
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import AuthError, ConfigError
from .repos import GitHubAppInfo, load_github_app_info
from .util.actions import get_input, input_env_name, is_debug
from .util.paths import safe_filename

DEFAULT_REPO_CONFIG = ".github/.scala-steward.conf"

DEFAULTS: dict[str, str] = {
    "github-token": "",
    "github-repository": "",
    "repos-file": "",
    "github-app-id": "",
    "github-app-key": "",
    "repo-config": DEFAULT_REPO_CONFIG,
    "author-email": "",
    "author-name": "",
    "cache-ttl": "2hours",
    "timeout": "30min",
    "scala-steward-version": "",
    "sign-commits": "false",
    "signing-key": "",
    "ignore-opts-files": "false",
    "github-api-url": "https://api.github.com",
    "scalafix-migrations": "",
    "artifact-migrations": "",
    "other-args": "",
}

INPUTS_SCHEMA = {
    "type": "object",
    "propertyNames": {"enum": sorted(DEFAULTS)},
    "additionalProperties": {"type": ["string", "number", "boolean", "null"]},
}

_TTL_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([a-zA-Zµ]+)$")
_TTL_UNITS: dict[str, float] = {
    "ns": 1e-9, "nano": 1e-9, "nanos": 1e-9, "nanosecond": 1e-9, "nanoseconds": 1e-9,
    "us": 1e-6, "µs": 1e-6, "micro": 1e-6, "micros": 1e-6, "microsecond": 1e-6, "microseconds": 1e-6,
    "ms": 1e-3, "milli": 1e-3, "millis": 1e-3, "millisecond": 1e-3, "milliseconds": 1e-3,
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
}
_TTL_INFINITE = {"inf", "plusinf", "+inf"}


@dataclass(frozen=True)
class ActionConfig:
    github_token: str
    github_repository: str
    repos_file: Path | None = None
    github_app: GitHubAppInfo | None = None
    repo_config: Path | None = None
    author_email: str = ""
    author_name: str = ""
    cache_ttl: str = ""
    cache_ttl_seconds: int | None = None
    timeout: str = ""
    scala_steward_version: str = ""
    sign_commits: bool = False
    signing_key: str = ""
    ignore_opts_files: bool = False
    github_api_url: str = "https://api.github.com"
    scalafix_migrations: str = ""
    artifact_migrations: str = ""
    other_args: list[str] = field(default_factory=list)
    debug: bool = False
    workspace_root: Path = Path("scala-steward")
    cache_dir: Path = Path(".steward-cache")
    bin_dir: Path = Path(".steward-bin")
    cache_key: str = "scala-steward"

    def logs_dir(self) -> Path:
        return self.workspace_root / "logs"


def parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def parse_ttl(value: str) -> int | None:
    """Parse a duration like `2hours`, `1.5h`, `500ms` into whole seconds.

    Accepts what Scala Steward accepts for `--cache-ttl`. `Inf` and an empty
    value mean the local cache entry never expires.
    """
    text = value.strip()
    if not text or text.lower() in _TTL_INFINITE:
        return None
    m = _TTL_RE.match(text)
    if not m or m.group(2).lower() not in _TTL_UNITS:
        raise ConfigError(f"Invalid cache-ttl '{value}'. Use e.g. 90s, 30min, 1.5hours, 1d.")
    return int(float(m.group(1)) * _TTL_UNITS[m.group(2).lower()])


def split_args(value: str) -> list[str]:
    return value.split()


def cache_key_for(repository: str, workflow: str) -> str:
    parts = ["scala-steward", repository, workflow]
    return safe_filename("-".join(p for p in parts if p), default="scala-steward")


def load_inputs_file(path: Path) -> dict[str, str]:
    import jsonschema  # lazy import

    if not path.exists():
        raise ConfigError(f"Inputs file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid inputs file {path}: {e}") from e

    try:
        jsonschema.validate(instance=data, schema=INPUTS_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid inputs file schema: {e.message}") from e

    out: dict[str, str] = {}
    for name, raw in data.items():
        if raw is None:
            continue
        out[name] = str(raw).lower() if isinstance(raw, bool) else str(raw)
    return out


def _tool_root(env: Mapping[str, str], home: Path) -> Path:
    tool_cache = env.get("RUNNER_TOOL_CACHE")
    if tool_cache:
        return Path(tool_cache) / "steward-action"
    return home / ".cache" / "steward-action"


def _resolve_repo_config(value: str, cwd: Path) -> Path | None:
    path = Path(value)
    if not path.is_absolute():
        path = cwd / path
    if path.exists():
        return path
    if value != DEFAULT_REPO_CONFIG:
        raise ConfigError(f"Provided default repo conf file ({value}) does not exist")
    return None


def load_config(
    env: Mapping[str, str] | None = None,
    *,
    inputs_file: Path | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
    workspace_root: Path | None = None,
    cache_dir: Path | None = None,
    bin_dir: Path | None = None,
    require_token: bool = True,
) -> ActionConfig:
    env = os.environ if env is None else env
    cwd = cwd or Path.cwd()
    home = home or Path.home()
    file_inputs = load_inputs_file(inputs_file) if inputs_file else {}

    def inp(name: str) -> str:
        if env.get(input_env_name(name), "").strip():
            return get_input(name, env)
        return file_inputs.get(name, "").strip() or DEFAULTS[name]

    token = inp("github-token")
    if not token and require_token:
        raise AuthError("You need to provide a GitHub token in the `github-token` input")

    repository = inp("github-repository") or env.get("GITHUB_REPOSITORY", "")
    repos_file = inp("repos-file")
    cache_ttl = inp("cache-ttl")
    tool_root = _tool_root(env, home)

    return ActionConfig(
        github_token=token,
        github_repository=repository,
        repos_file=(cwd / repos_file) if repos_file else None,
        github_app=load_github_app_info(inp("github-app-id"), inp("github-app-key")),
        repo_config=_resolve_repo_config(inp("repo-config"), cwd),
        author_email=inp("author-email"),
        author_name=inp("author-name"),
        cache_ttl=cache_ttl,
        cache_ttl_seconds=parse_ttl(cache_ttl),
        timeout=inp("timeout"),
        scala_steward_version=inp("scala-steward-version"),
        sign_commits=parse_bool(inp("sign-commits")),
        signing_key=inp("signing-key"),
        ignore_opts_files=parse_bool(inp("ignore-opts-files")),
        github_api_url=inp("github-api-url"),
        scalafix_migrations=inp("scalafix-migrations"),
        artifact_migrations=inp("artifact-migrations"),
        other_args=split_args(inp("other-args")),
        debug=is_debug(env),
        workspace_root=workspace_root or home / "scala-steward",
        cache_dir=cache_dir or tool_root / "workspace-cache",
        bin_dir=bin_dir or tool_root / "bin",
        cache_key=cache_key_for(repository, env.get("GITHUB_WORKFLOW", "")),
    )


def describe(cfg: ActionConfig) -> dict[str, Any]:
    """Config summary safe to print (no token, no key)."""
    return {
        "github_repository": cfg.github_repository,
        "repos_file": str(cfg.repos_file) if cfg.repos_file else None,
        "github_app_id": cfg.github_app.id if cfg.github_app else None,
        "repo_config": str(cfg.repo_config) if cfg.repo_config else None,
        "cache_ttl": cfg.cache_ttl,
        "timeout": cfg.timeout,
        "scala_steward_version": cfg.scala_steward_version or "latest",
        "workspace_root": str(cfg.workspace_root),
        "cache_dir": str(cfg.cache_dir),
        "cache_key": cfg.cache_key,
        "debug": cfg.debug,
    }
