"""Repository list resolution.

CONTRACT
- Inputs: optional repos-file content, optional GitHub App info, current repository
- Outputs (required):
  - Exactly one RepositoryListSource variant
  - Its serialized bytes (the content of repos.md)
- Invariants:
  - Precedence: ExplicitFile > (Empty if app mode else SingleRepo)
  - ExplicitFile content is kept byte-for-byte
- Failure:
  - Raises ConfigError when only one of app id / app key is provided
  - Raises ConfigError when the configured repos file does not exist
  - Raises ConfigError when the single-repository fallback has no repository
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from .errors import ConfigError


@dataclass(frozen=True)
class GitHubAppInfo:
    id: str
    key: str


@dataclass(frozen=True)
class ExplicitFile:
    content: bytes


@dataclass(frozen=True)
class SingleRepo:
    repository: str


@dataclass(frozen=True)
class Empty:
    """App mode: Scala Steward discovers repos from the app installations."""


RepositoryListSource: TypeAlias = ExplicitFile | SingleRepo | Empty


def load_github_app_info(app_id: str, app_key: str) -> GitHubAppInfo | None:
    if not app_id and not app_key:
        return None
    if not app_id or not app_key:
        raise ConfigError(
            "`github-app-id` and `github-app-key` inputs have to be set together. "
            "One of them is missing"
        )
    return GitHubAppInfo(id=app_id, key=app_key)


def read_repos_file(path: Path | None) -> bytes | None:
    if path is None:
        return None
    if not path.is_file():
        raise ConfigError(f"The path indicated in `repos-file` ({path}) does not exist")
    return path.read_bytes()


def resolve_repos_source(
    repos_file: bytes | None,
    github_app: GitHubAppInfo | None,
    repository: str,
) -> RepositoryListSource:
    if repos_file is not None:
        return ExplicitFile(repos_file)
    if github_app is not None:
        return Empty()
    if not repository.strip():
        raise ConfigError(
            "No repository to update: set `github-repository`, `repos-file` or the GitHub App inputs"
        )
    return SingleRepo(repository.strip())


def to_bytes(source: RepositoryListSource) -> bytes:
    match source:
        case ExplicitFile(content=content):
            return content
        case SingleRepo(repository=repository):
            return repository.encode("utf-8")
        case Empty():
            return b""
    raise TypeError(f"Unknown repository list source: {source!r}")


def describe_source(source: RepositoryListSource) -> str:
    match source:
        case ExplicitFile(content=content):
            return f"repos file ({len(content)} bytes)"
        case SingleRepo(repository=repository):
            return f"single repository {repository}"
        case Empty():
            return "GitHub App installations"
    raise TypeError(f"Unknown repository list source: {source!r}")
