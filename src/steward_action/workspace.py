from __future__ import annotations

"""Workspace management.

CONTRACT
- Inputs: workspace root, repos list bytes, GitHub token, WorkspaceCache
- Outputs (required):
  - <root>/workspace/   Scala Steward scratch space (cached across runs)
  - <root>/repos.md     repos list, byte-for-byte
  - <root>/askpass.sh   git credential helper echoing the token (0755)
- Invariants:
  - Cache restore is best-effort: any CacheError is logged and treated as a miss
  - saving_cache() saves exactly once, after its body, whatever the body did
  - A save failure never replaces an error raised by the body
- Failure:
  - prepare()/write_app_key() raise WorkspaceIOError on filesystem errors
  - save_workspace_cache() raises CacheError
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .cache import WorkspaceCache
from .errors import CacheError, WorkspaceIOError
from .util.paths import ensure_dir, write_executable, write_private

REPOS_FILE = "repos.md"
ASKPASS_FILE = "askpass.sh"
WORKSPACE_DIR = "workspace"
APP_KEY_FILE = "github-app.pem"


def askpass_script(token: str) -> str:
    quoted = token.replace("'", "'\"'\"'")
    return f"#!/bin/sh\n\necho '{quoted}'\n"


@dataclass
class CacheSaveReport:
    attempted: bool = False
    error: CacheError | None = None


@dataclass
class WorkspaceManager:
    root: Path
    cache: WorkspaceCache

    def workspace_path(self, path: Path | None = None) -> Path:
        return (path or self.root) / WORKSPACE_DIR

    def prepare(self, repos_list: bytes, token: str) -> Path:
        try:
            ensure_dir(self.workspace_path())
            (self.root / REPOS_FILE).write_bytes(repos_list)
            write_executable(self.root / ASKPASS_FILE, askpass_script(token))
        except OSError as exc:
            raise WorkspaceIOError(f"Unable to prepare workspace in {self.root}: {exc}") from exc
        logger.info(f"Workspace prepared in {self.root}")
        return self.root

    def write_app_key(self, key: str) -> Path:
        try:
            ensure_dir(self.root)
            return write_private(self.root / APP_KEY_FILE, key.rstrip("\n") + "\n")
        except OSError as exc:
            raise WorkspaceIOError(f"Unable to write GitHub App key: {exc}") from exc

    def restore_workspace_cache(self, path: Path) -> bool:
        try:
            restored = self.cache.restore(self.workspace_path(path))
        except CacheError as exc:
            logger.warning(f"Ignoring workspace cache: {exc}")
            return False
        if not restored:
            logger.info(f"No workspace cache found for {self.cache.key}")
        return restored

    def save_workspace_cache(self, path: Path) -> None:
        self.cache.save(self.workspace_path(path))

    @contextmanager
    def saving_cache(self, path: Path) -> Iterator[CacheSaveReport]:
        """Run the body, then save the workspace cache no matter how it ended."""
        report = CacheSaveReport()
        try:
            yield report
        finally:
            report.attempted = True
            try:
                self.save_workspace_cache(path)
            except CacheError as exc:
                logger.warning(f"Workspace cache not saved: {exc}")
                report.error = exc
