"""CLI entrypoint.

Primary mode:
- steward-action run

Utilities:
- steward-action doctor
- steward-action repos
- steward-action args

CONTRACT
- Inputs: Command line arguments (parsed by Typer), INPUT_* environment variables
- Outputs (required):
  - Exit code 0 on success, 1 on a failed run, 2 on failed doctor checks
  - Console output (stdout/stderr) describing progress/results
- Invariants:
  - Configuration errors are reported with the same `::error::` surface as run failures
  - The GitHub token is never printed
- Failure:
  - Invalid arguments raise Typer exit/error
"""

from __future__ import annotations

import asyncio
import shlex
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ActionConfig, describe, load_config
from .doctor import doctor_report
from .errors import StewardActionError
from .launch_args import build_launch_args, options_from_config
from .orchestrator import run_action
from .repos import read_repos_file, resolve_repos_source, to_bytes
from .schemas import AuthUser
from .util import actions
from .workspace import APP_KEY_FILE

app = typer.Typer(add_completion=False, help="Prepare and launch Scala Steward in a CI runner.")
console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"steward-action version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    )
):
    pass


_INPUTS_FILE_OPTION = typer.Option(
    None,
    "--inputs-file",
    help="YAML file of action inputs (INPUT_* variables take precedence).",
)
_WORKSPACE_ROOT_OPTION = typer.Option(
    None,
    "--workspace-root",
    help="Workspace root (default: ~/scala-steward).",
)
_CACHE_DIR_OPTION = typer.Option(
    None,
    "--cache-dir",
    help="Workspace cache store (default: tool cache).",
)
_BIN_DIR_OPTION = typer.Option(
    None,
    "--bin-dir",
    help="Install dir for cs, scalafmt, scalafix and mill.",
)
_VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    help="Show debug logs.",
)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    level = "DEBUG" if verbose or actions.is_debug() else "INFO"
    logger.add(sys.stderr, level=level, format="<level>{level: <7}</level> | {message}")


def _load(
    inputs_file: Path | None,
    workspace_root: Path | None,
    cache_dir: Path | None,
    bin_dir: Path | None,
    *,
    require_token: bool = True,
) -> ActionConfig:
    try:
        return load_config(
            inputs_file=inputs_file,
            workspace_root=workspace_root,
            cache_dir=cache_dir,
            bin_dir=bin_dir,
            require_token=require_token,
        )
    except StewardActionError as exc:
        actions.set_failed(str(exc))
        raise typer.Exit(code=1) from exc


@app.command()
def run(
    inputs_file: Path | None = _INPUTS_FILE_OPTION,
    workspace_root: Path | None = _WORKSPACE_ROOT_OPTION,
    cache_dir: Path | None = _CACHE_DIR_OPTION,
    bin_dir: Path | None = _BIN_DIR_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Check, install, authenticate, prepare the workspace and launch Scala Steward."""
    _configure_logging(verbose)
    cfg = _load(inputs_file, workspace_root, cache_dir, bin_dir)
    logger.debug(f"Configuration: {describe(cfg)}")

    result = asyncio.run(run_action(cfg))
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    if not result.ok:
        console.print(f"[red]Run failed:[/red] {result.message}")
        raise typer.Exit(code=1)
    console.print(f"[green]{result.message}[/green]")


@app.command()
def doctor(
    bin_dir: Path | None = _BIN_DIR_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Environment and preflight checks."""
    _configure_logging(verbose)
    cfg = _load(None, None, None, bin_dir, require_token=False)
    report = asyncio.run(doctor_report(cfg.bin_dir))
    table = Table(title="steward-action doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)


@app.command()
def repos(
    inputs_file: Path | None = _INPUTS_FILE_OPTION,
) -> None:
    """Print the repos.md content this run would use."""
    _configure_logging(False)
    cfg = _load(inputs_file, None, None, None, require_token=False)
    try:
        source = resolve_repos_source(
            read_repos_file(cfg.repos_file), cfg.github_app, cfg.github_repository
        )
    except StewardActionError as exc:
        actions.set_failed(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(to_bytes(source).decode("utf-8", errors="replace"))


@app.command()
def args(
    inputs_file: Path | None = _INPUTS_FILE_OPTION,
    workspace_root: Path | None = _WORKSPACE_ROOT_OPTION,
    login: str = typer.Option("<login>", "--login", help="VCS login to show (no API call is made)."),
) -> None:
    """Print the Scala Steward arguments built from the inputs."""
    _configure_logging(False)
    cfg = _load(inputs_file, workspace_root, None, None, require_token=False)
    user = AuthUser(login=login, name=login, email=f"{login}@users.noreply.github.com")
    key_file = cfg.workspace_root / APP_KEY_FILE if cfg.github_app else None
    options = options_from_config(cfg, cfg.workspace_root, user, key_file)
    typer.echo(shlex.join(build_launch_args(options)))


if __name__ == "__main__":
    app()
