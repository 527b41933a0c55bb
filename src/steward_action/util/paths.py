from __future__ import annotations

"""Path utilities.

CONTRACT
- Inputs: strings (names) or paths
- Outputs:
  - safe_filename() returns sanitized string (no path separators)
  - ensure_dir() creates directory tree
  - write_executable() / write_private() write a file with fixed permissions
- Invariants:
  - safe_filename removes dangerous chars `[^A-Za-z0-9_.-]`
  - write_private files are never group/world readable
- Failure:
  - Raises OSError on permission/disk issues
"""

import os
import re
import stat
from pathlib import Path

_SAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")

EXEC_MODE = 0o755
PRIVATE_MODE = 0o600


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def safe_filename(name: str, *, default: str = "item") -> str:
    cleaned = _SAFE_FILENAME_RE.sub("_", name).strip("._-")
    return cleaned or default


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def write_executable(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    path.chmod(EXEC_MODE)
    return path


def write_private(path: Path, content: str) -> Path:
    # Created with the final mode so the secret is never briefly readable.
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PRIVATE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    path.chmod(PRIVATE_MODE)
    return path


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Path utilities")
    parser.add_argument("--safe-filename", help="Sanitize a filename")
    args = parser.parse_args()

    if args.safe_filename:
        print(safe_filename(args.safe_filename))
    else:
        parser.print_help()
        sys.exit(1)
