from __future__ import annotations

"""Environment health checks.

CONTRACT
- Inputs: environment mapping, tool bin dir
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - Checks: Maven Central reachable, git binary, java, coursier, mill, token input
  - Does not modify system state (read-only checks)
- Failure:
  - Returns DoctorReport with ok=False if critical checks fail (Maven Central, git)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx

from .connectivity import check_artifact_registry
from .errors import ConnectivityError
from .util.actions import get_input
from .util.shell import run_cmd, which


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


async def doctor_report(
    bin_dir: Path,
    env: Mapping[str, str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DoctorReport:
    env = os.environ if env is None else env
    items: list[DoctorItem] = []
    ok = True

    # Critical: nothing works without the registry
    try:
        await check_artifact_registry(transport=transport)
        items.append(DoctorItem("maven central", "OK", "reachable"))
    except ConnectivityError as e:
        ok = False
        items.append(DoctorItem("maven central", "FAIL", str(e)))

    git_bin = which("git")
    if git_bin:
        items.append(DoctorItem("git binary", "OK", git_bin))
    else:
        ok = False
        items.append(DoctorItem("git binary", "FAIL", "git not found in PATH"))

    java_bin = which("java")
    if java_bin:
        res = run_cmd(["java", "-version"], cwd=Path.cwd(), timeout_s=10)
        version = res.stderr_tail(lines=1) or java_bin
        status = "OK" if res.returncode == 0 else "WARN"
        items.append(DoctorItem("java", status, version))
    else:
        items.append(DoctorItem("java", "WARN", "java not found; coursier will need to fetch a JVM"))

    cs_bin = which("cs", [bin_dir])
    if cs_bin:
        items.append(DoctorItem("coursier", "OK", cs_bin))
    else:
        items.append(DoctorItem("coursier", "INFO", f"cs not found; will be installed into {bin_dir}"))

    mill_bin = which("mill", [bin_dir])
    if mill_bin:
        items.append(DoctorItem("mill", "OK", mill_bin))
    else:
        items.append(DoctorItem("mill", "INFO", "mill not found; millw will be installed"))

    if get_input("github-token", env):
        items.append(DoctorItem("github token", "OK", "github-token input is set"))
    else:
        items.append(DoctorItem("github token", "WARN", "github-token input is empty"))

    return DoctorReport(ok=ok, items=items)
