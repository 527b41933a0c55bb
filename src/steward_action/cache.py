from __future__ import annotations

"""Workspace cache store.

CONTRACT
- Inputs: cache dir, cache key, TTL in seconds (None = never expires)
- Outputs (required):
  - <cache_dir>/<key>.tar.gz  (the cached directory tree)
  - <cache_dir>/<key>.json    (CacheManifest)
- Invariants:
  - One entry per key; save() replaces archive and manifest via temp file + rename
  - A failed restore leaves the destination as it was
  - restore() never extracts outside the destination
  - An entry older than the TTL is a miss
- Failure:
  - Raises CacheError on unreadable/corrupt entries and on IO errors
"""

import shutil
import tarfile
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .errors import CacheError
from .schemas import CacheManifest
from .util.paths import ensure_dir


@dataclass(frozen=True)
class WorkspaceCache:
    cache_dir: Path
    key: str
    ttl_seconds: int | None = None

    def archive_path(self) -> Path:
        return self.cache_dir / f"{self.key}.tar.gz"

    def manifest_path(self) -> Path:
        return self.cache_dir / f"{self.key}.json"

    def lookup(self, now: float | None = None) -> CacheManifest | None:
        """Return the live manifest for this key, or None on miss/expiry."""
        if not (self.manifest_path().exists() and self.archive_path().exists()):
            return None
        try:
            manifest = CacheManifest.model_validate_json(
                self.manifest_path().read_text(encoding="utf-8")
            )
        except (OSError, ValidationError) as exc:
            raise CacheError(f"Unreadable cache manifest {self.manifest_path()}: {exc}") from exc

        if self.ttl_seconds is not None:
            age = (now if now is not None else time.time()) - manifest.created_at
            if age > self.ttl_seconds:
                logger.info(f"Cache entry {self.key} expired ({int(age)}s > {self.ttl_seconds}s)")
                return None
        return manifest

    def restore(self, dest: Path, now: float | None = None) -> bool:
        """Replace `dest` with the cached tree; `dest` is untouched unless extraction succeeds."""
        manifest = self.lookup(now)
        if manifest is None:
            return False
        staging: Path | None = None
        try:
            ensure_dir(dest.parent)
            staging = Path(tempfile.mkdtemp(dir=dest.parent, prefix=f".{dest.name}.restore-"))
            with tarfile.open(self.archive_path(), "r:gz") as tar:
                tar.extractall(staging, filter="data")
            if dest.exists():
                shutil.rmtree(dest)
            staging.rename(dest)
            staging = None
        except (tarfile.TarError, OSError) as exc:
            raise CacheError(f"Unable to restore cache {self.key}: {exc}") from exc
        finally:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
        logger.info(f"Restored {manifest.files} files from cache {self.key}")
        return True

    def _write_manifest(self, manifest: CacheManifest) -> None:
        tmp = self.manifest_path().with_suffix(".json.part")
        tmp.write_text(manifest.model_dump_json(indent=2) + "\n", encoding="utf-8")
        tmp.replace(self.manifest_path())

    def save(self, src: Path, now: float | None = None) -> CacheManifest:
        if not src.is_dir():
            raise CacheError(f"Nothing to cache: {src} is not a directory")

        tmp: Path | None = None
        try:
            ensure_dir(self.cache_dir)
            with tempfile.NamedTemporaryFile(
                dir=self.cache_dir, prefix=f"{self.key}.", suffix=".part", delete=False
            ) as tf:
                tmp = Path(tf.name)
            files = sum(1 for p in src.rglob("*") if p.is_file())
            with tarfile.open(tmp, "w:gz") as tar:
                tar.add(src, arcname=".")
            manifest = CacheManifest(
                key=self.key,
                created_at=now if now is not None else time.time(),
                size_bytes=tmp.stat().st_size,
                files=files,
            )
            # a stale manifest must never describe the new archive
            self.manifest_path().unlink(missing_ok=True)
            tmp.replace(self.archive_path())
            self._write_manifest(manifest)
        except (tarfile.TarError, OSError) as exc:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise CacheError(f"Unable to save cache {self.key}: {exc}") from exc

        logger.info(f"Saved {files} files to cache {self.key} ({manifest.size_bytes} bytes)")
        return manifest
