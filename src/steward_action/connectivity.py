"""Artifact registry reachability check.

CONTRACT
- Inputs: registry URL (Maven Central by default)
- Outputs:
  - None when the registry answers with a status below 400
- Invariants:
  - Single HEAD request, no retries
- Failure:
  - Raises ConnectivityError(host, cause) otherwise
"""

from __future__ import annotations

import httpx
from loguru import logger

from .errors import ConnectivityError

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2/"


async def check_artifact_registry(
    url: str = MAVEN_CENTRAL_URL,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    host = httpx.URL(url).host
    try:
        async with httpx.AsyncClient(
            timeout=30, follow_redirects=True, transport=transport
        ) as client:
            response = await client.head(url)
    except httpx.HTTPError as exc:
        raise ConnectivityError(host, str(exc) or type(exc).__name__) from exc

    if response.status_code >= 400:
        raise ConnectivityError(host, f"HTTP {response.status_code}")
    logger.info(f"Maven Central is reachable ({host})")
