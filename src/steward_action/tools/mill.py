"""Mill launcher installation.

Scala Steward shells out to `mill` for Mill builds; the millw wrapper script
fetches the Mill version each repo pins.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx
from loguru import logger

from ..errors import ToolInstallError
from ..util.paths import ensure_dir, write_executable
from ..util.shell import which

MILLW_URL = "https://raw.githubusercontent.com/lefou/millw/0.4.12/millw"


@dataclass
class Mill:
    bin_dir: Path
    launcher_url: str = MILLW_URL
    transport: httpx.AsyncBaseTransport | None = None

    async def install(self) -> Path:
        existing = which("mill", [self.bin_dir])
        if existing:
            logger.info(f"mill already installed at {existing}")
            return Path(existing)

        ensure_dir(self.bin_dir)
        target = self.bin_dir / "mill"
        try:
            async with httpx.AsyncClient(
                timeout=60, follow_redirects=True, transport=self.transport
            ) as client:
                response = await client.get(self.launcher_url)
                response.raise_for_status()
            write_executable(target, response.text)
        except (httpx.HTTPError, OSError) as exc:
            raise ToolInstallError(f"Unable to install mill: {exc}") from exc

        logger.info(f"mill installed at {target}")
        return target
