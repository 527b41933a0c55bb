"""steward_action package.

Simple API for CI scripts:

    import steward_action

    # Run Scala Steward with inputs taken from INPUT_* variables
    result = steward_action.run()

    # Or from an inputs file, outside of a runner
    result = steward_action.run(inputs_file="steward.yaml")
"""

import asyncio
from collections.abc import Mapping
from pathlib import Path

from .config import ActionConfig, load_config
from .errors import StewardActionError
from .orchestrator import RunResult, run_action

__version__ = "0.1.0"


def run(
    *,
    env: Mapping[str, str] | None = None,
    inputs_file: str | Path | None = None,
    workspace_root: str | Path | None = None,
) -> dict:
    """Run the whole action. Returns a structured result.

    Args:
        env: Environment to read inputs from (default: os.environ)
        inputs_file: Optional YAML file of inputs
        workspace_root: Optional workspace root (default: ~/scala-steward)

    Returns:
        dict with keys: status, message, errors, warnings, workspace_dir
    """
    try:
        cfg = load_config(
            env,
            inputs_file=Path(inputs_file) if inputs_file else None,
            workspace_root=Path(workspace_root) if workspace_root else None,
        )
    except StewardActionError as exc:
        return {
            "status": "FAIL",
            "message": str(exc),
            "errors": [str(exc)],
            "warnings": [],
            "workspace_dir": None,
        }

    result = asyncio.run(run_action(cfg))
    return {
        "status": result.status,
        "message": result.message,
        "errors": result.errors,
        "warnings": result.warnings,
        "workspace_dir": str(result.workspace_dir) if result.workspace_dir else None,
    }


__all__ = [
    "run",
    "ActionConfig",
    "RunResult",
    "load_config",
    "run_action",
    "__version__",
]
