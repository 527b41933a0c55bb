from __future__ import annotations

"""Shell command execution.

CONTRACT
- Inputs: Command (list of args or string), cwd, env overlay, timeout
- Outputs (required):
  - run_cmd(): CmdResult(returncode, stdout_path, stderr_path)
  - stream_cmd(): exit code of a process whose output goes straight to ours
- Invariants:
  - run_cmd writes stdout/stderr to files
  - env is merged over os.environ, never replaces it
  - Respects timeout_s in run_cmd (rc=124 when exceeded)
- Failure:
  - Neither helper raises on non-zero exit; callers inspect the return code
"""

import asyncio
import os
import subprocess
import tempfile
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path


def which(cmd: str, extra_dirs: Sequence[Path] = ()) -> str | None:
    dirs = [str(d) for d in extra_dirs] + os.environ.get("PATH", "").split(os.pathsep)
    for p in dirs:
        if not p:
            continue
        candidate = Path(p) / cmd
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


def merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if not env:
        return None
    return os.environ | dict(env)


@dataclass(frozen=True)
class CmdResult:
    cmd: str
    returncode: int
    stdout_path: Path
    stderr_path: Path
    elapsed_s: float
    stdout_bytes: int
    stderr_bytes: int

    @property
    def stdout_text(self) -> str:
        if not self.stdout_path.exists():
            return ""
        return self.stdout_path.read_text(encoding="utf-8", errors="replace")

    def stderr_tail(self, lines: int = 20) -> str:
        if not self.stderr_path.exists():
            return ""
        text = self.stderr_path.read_text(encoding="utf-8", errors="replace")
        return "\n".join(text.strip().splitlines()[-lines:])


def run_cmd(
    cmd: str | list[str],
    cwd: Path,
    stdout_path: Path | None = None,
    stderr_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout_s: float | None = None,
) -> CmdResult:
    """Run a command and store stdout/stderr to files.

    CONTRACT:
    - Accepts cmd as str (run with shell=True) or list[str] (run with shell=False).
    - Always writes stdout/stderr files (creates temp if not provided).
    - Never raises for non-zero exit; caller inspects return code.
    - Records duration and output size.
    """
    if stdout_path is None:
        tf_out = tempfile.NamedTemporaryFile(delete=False, prefix="steward_stdout_")
        stdout_path = Path(tf_out.name)
        tf_out.close()
    if stderr_path is None:
        tf_err = tempfile.NamedTemporaryFile(delete=False, prefix="steward_stderr_")
        stderr_path = Path(tf_err.name)
        tf_err.close()

    stdout_path.parent.mkdir(parents=True, exist_ok=True)
    stderr_path.parent.mkdir(parents=True, exist_ok=True)

    use_shell = isinstance(cmd, str)

    start_t = time.time()
    with (
        stdout_path.open("w", encoding="utf-8") as out_f,
        stderr_path.open("w", encoding="utf-8") as err_f,
    ):
        try:
            p = subprocess.run(
                cmd,
                cwd=str(cwd),
                shell=use_shell,
                env=merged_env(env),
                stdout=out_f,
                stderr=err_f,
                timeout=timeout_s,
                text=True,
            )
            rc = p.returncode
        except subprocess.TimeoutExpired:
            rc = 124
            err_f.write("\nTimeout expired.\n")
        except OSError as e:
            rc = 127 if isinstance(e, FileNotFoundError) else 1
            err_f.write(f"\nException: {e}\n")

    end_t = time.time()

    out_b = stdout_path.stat().st_size if stdout_path.exists() else 0
    err_b = stderr_path.stat().st_size if stderr_path.exists() else 0

    return CmdResult(
        cmd=cmd if isinstance(cmd, str) else " ".join(cmd),
        returncode=rc,
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        elapsed_s=end_t - start_t,
        stdout_bytes=out_b,
        stderr_bytes=err_b,
    )


async def stream_cmd(
    cmd: Sequence[str],
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """Run a long-lived command with inherited stdio and return its exit code.

    Output is not captured: the runner log shows it live. A missing
    executable is reported as exit code 127, like a shell would.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            env=merged_env(env),
        )
    except FileNotFoundError:
        return 127
    return await process.wait()
