from __future__ import annotations

"""Run orchestration.

CONTRACT
- Inputs: ActionConfig
- Outputs (required):
  - RunResult (status, message, errors, warnings, workspace_dir)
  - Workflow commands: `::error::` on failure, `::warning::` on cache save failure
- Invariants:
  - Steps run strictly in order: connectivity, coursier, identity, repos list,
    workspace, cache restore, arguments, tool installs, launch, cache save
  - Once the launch step is reached the cache save runs exactly once
  - The first failure is the run's failure message; a cache save failure is
    reported after it and never replaces it
- Failure:
  - Returns RunResult(status="FAIL"); never raises
"""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .cache import WorkspaceCache
from .config import ActionConfig
from .connectivity import check_artifact_registry
from .errors import StewardActionError
from .github import get_auth_user
from .launch_args import LaunchEnv, build_launch_args, options_from_config
from .repos import describe_source, read_repos_file, resolve_repos_source, to_bytes
from .tools.coursier import Coursier
from .tools.mill import Mill
from .util import actions
from .util.redaction import Redactor
from .workspace import CacheSaveReport, WorkspaceManager

SCALA_STEWARD_APP = "scala-steward"


@dataclass(frozen=True)
class RunResult:
    status: str
    message: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    workspace_dir: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"


def workspace_manager_for(cfg: ActionConfig) -> WorkspaceManager:
    cache = WorkspaceCache(cfg.cache_dir, cfg.cache_key, cfg.cache_ttl_seconds)
    return WorkspaceManager(root=cfg.workspace_root, cache=cache)


async def run_action(cfg: ActionConfig) -> RunResult:
    redactor = Redactor().with_secrets(
        cfg.github_token, cfg.github_app.key if cfg.github_app else None
    )
    actions.set_secret(cfg.github_token)

    workspace_dir: Path | None = None
    save: CacheSaveReport | None = None
    failure: str | None = None

    try:
        with actions.group("Checking connection with Maven Central"):
            await check_artifact_registry()

        coursier = Coursier(bin_dir=cfg.bin_dir, logs_dir=cfg.logs_dir())
        with actions.group("Installing Coursier"):
            await coursier.self_install()
        actions.add_path(cfg.bin_dir)

        user = await get_auth_user(cfg.github_token, api_url=cfg.github_api_url)

        source = resolve_repos_source(
            read_repos_file(cfg.repos_file), cfg.github_app, cfg.github_repository
        )
        logger.info(f"Repositories come from {describe_source(source)}")

        ws = workspace_manager_for(cfg)
        workspace_dir = ws.prepare(to_bytes(source), cfg.github_token)
        app_key_file = ws.write_app_key(cfg.github_app.key) if cfg.github_app else None

        with actions.group("Restoring workspace cache"):
            ws.restore_workspace_cache(workspace_dir)

        options = options_from_config(cfg, workspace_dir, user, app_key_file)
        launch_env = LaunchEnv(debug=cfg.debug, bin_dir=cfg.bin_dir)
        if cfg.debug:
            actions.debug("Debug mode activated for Scala Steward")

        with actions.group("Installing scalafmt, scalafix and mill"):
            coursier.install("scalafmt")
            coursier.install("scalafix")
            await Mill(bin_dir=cfg.bin_dir).install()

        with ws.saving_cache(workspace_dir) as save:
            await coursier.launch(
                SCALA_STEWARD_APP,
                cfg.scala_steward_version,
                build_launch_args(options),
                env=launch_env.as_env(),
            )
    except StewardActionError as exc:
        failure = redactor.redact(str(exc))
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected error")
        failure = redactor.redact(str(exc) or type(exc).__name__)

    warnings: list[str] = []
    if failure is not None:
        actions.set_failed(failure)
    if save is not None and save.error is not None:
        warning = redactor.redact(str(save.error))
        actions.warning(warning)
        warnings.append(warning)

    if failure is not None:
        return RunResult(
            status="FAIL",
            message=failure,
            errors=[failure],
            warnings=warnings,
            workspace_dir=workspace_dir,
        )
    return RunResult(
        status="OK",
        message="Scala Steward finished",
        warnings=warnings,
        workspace_dir=workspace_dir,
    )
