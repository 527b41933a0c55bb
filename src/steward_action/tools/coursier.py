"""Coursier: fetches, installs and launches JVM tools.

CONTRACT
- Inputs: bin dir (install target), logs dir
- Outputs (required):
  - self_install(): path to a runnable `cs`
  - install(tool): tool available in bin dir
  - launch(app, version, args): app run to completion with live output
- Invariants:
  - self_install() and install() are idempotent (no download/command when present)
  - launch() passes `args` through verbatim after `--`
- Failure:
  - Raises ToolInstallError when download or `cs install` fails
  - Raises LaunchFailure(app, exit_code) on a non-zero launch exit
"""

from __future__ import annotations

import gzip
import zlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import httpx
from loguru import logger

from ..errors import LaunchFailure, ToolInstallError
from ..util.paths import ensure_dir, make_executable
from ..util.redaction import Redactor
from ..util.shell import run_cmd, stream_cmd, which

COURSIER_LAUNCHER_URL = "https://github.com/coursier/launchers/raw/master/cs-x86_64-pc-linux.gz"
SNAPSHOTS_REPOSITORY = "sonatype:snapshots"


@dataclass
class Coursier:
    bin_dir: Path
    logs_dir: Path
    launcher_url: str = COURSIER_LAUNCHER_URL
    transport: httpx.AsyncBaseTransport | None = None
    install_timeout_s: int = 600

    def executable(self) -> str | None:
        return which("cs", [self.bin_dir])

    def _require_executable(self) -> str:
        cs = self.executable()
        if cs is None:
            raise ToolInstallError("Coursier is not installed (cs not found)")
        return cs

    async def self_install(self) -> Path:
        existing = self.executable()
        if existing:
            logger.info(f"Coursier already installed at {existing}")
            return Path(existing)

        ensure_dir(self.bin_dir)
        target = self.bin_dir / "cs"
        partial = self.bin_dir / "cs.part"
        logger.info(f"Downloading Coursier from {self.launcher_url}")
        try:
            async with httpx.AsyncClient(
                timeout=120, follow_redirects=True, transport=self.transport
            ) as client:
                response = await client.get(self.launcher_url)
                response.raise_for_status()
            partial.write_bytes(gzip.decompress(response.content))
            make_executable(partial)
            partial.replace(target)
        except (httpx.HTTPError, OSError, EOFError, zlib.error) as exc:
            partial.unlink(missing_ok=True)
            raise ToolInstallError(f"Unable to install Coursier: {exc}") from exc

        logger.info(f"Coursier installed at {target}")
        return target

    def install(self, tool: str) -> None:
        existing = which(tool, [self.bin_dir])
        if existing:
            logger.info(f"{tool} already installed at {existing}")
            return

        cs = self._require_executable()
        ensure_dir(self.bin_dir)
        res = run_cmd(
            cmd=[cs, "install", "--install-dir", str(self.bin_dir), "--contrib", tool],
            cwd=self.bin_dir,
            stdout_path=self.logs_dir / f"install_{tool}.stdout.log",
            stderr_path=self.logs_dir / f"install_{tool}.stderr.log",
            timeout_s=self.install_timeout_s,
        )
        if res.returncode != 0:
            details = Redactor().redact(res.stderr_tail())
            raise ToolInstallError(f"Unable to install {tool} (rc={res.returncode}): {details}")
        logger.info(f"{tool} installed in {self.bin_dir}")

    def launch_command(self, app: str, version: str, args: Sequence[str]) -> list[str]:
        cs = self._require_executable()
        coordinates = f"{app}:{version}" if version else app
        return [cs, "launch", "--contrib", "-r", SNAPSHOTS_REPOSITORY, coordinates, "--", *args]

    async def launch(
        self,
        app: str,
        version: str,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> None:
        cmd = self.launch_command(app, version, args)
        logger.info(f"Launching {app} {version or '(latest)'}")
        logger.debug(" ".join(cmd))
        rc = await stream_cmd(cmd, env=env)
        if rc != 0:
            raise LaunchFailure(app, rc)
