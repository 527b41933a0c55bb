"""GitHub Actions runner interface.

CONTRACT
- Inputs: process environment (INPUT_* variables, GITHUB_* files)
- Outputs:
  - get_input() returns the trimmed input value ('' when unset)
  - Workflow commands (`::error::`, `::warning::`, `::debug::`, `::group::`,
    `::add-mask::`) printed on stdout
- Invariants:
  - Messages are escaped so a multi-line message stays one command
  - Nothing here exits the process; callers own the exit code
- Failure:
  - add_path() raises OSError if GITHUB_PATH is set but not writable
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

FAILURE_GLYPH = "✕"


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, env: Mapping[str, str] | None = None) -> str:
    source = os.environ if env is None else env
    return source.get(input_env_name(name), "").strip()


def is_debug(env: Mapping[str, str] | None = None) -> bool:
    source = os.environ if env is None else env
    return bool(source.get("RUNNER_DEBUG"))


def escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def issue(command: str, message: str = "", stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    out.write(f"::{command}::{escape_data(message)}\n")
    out.flush()


def set_failed(message: str, stream: TextIO | None = None) -> None:
    """Report the run as failed with the leading failure glyph."""
    issue("error", f" {FAILURE_GLYPH} {message}", stream)


def warning(message: str, stream: TextIO | None = None) -> None:
    issue("warning", f" {FAILURE_GLYPH} {message}", stream)


def debug(message: str, stream: TextIO | None = None) -> None:
    issue("debug", message, stream)


def set_secret(value: str, stream: TextIO | None = None) -> None:
    if value:
        issue("add-mask", value, stream)


@contextmanager
def group(title: str, stream: TextIO | None = None) -> Iterator[None]:
    issue("group", title, stream)
    try:
        yield
    finally:
        issue("endgroup", "", stream)


def add_path(path: Path, env: Mapping[str, str] | None = None) -> None:
    """Prepend `path` to PATH for later workflow steps (no-op outside a runner)."""
    source = os.environ if env is None else env
    path_file = source.get("GITHUB_PATH")
    if not path_file:
        return
    with Path(path_file).open("a", encoding="utf-8") as f:
        f.write(f"{path}\n")
