from __future__ import annotations

"""Error taxonomy.

CONTRACT
- Every failure a run can report derives from StewardActionError
- Fatal: ConnectivityError, AuthError, ConfigError, WorkspaceIOError,
  ToolInstallError, LaunchFailure
- Non-fatal: CacheError (restore: treated as a miss; save: reported as warning)
"""


class StewardActionError(Exception):
    """Base class for errors reported as the run's failure message."""


class ConnectivityError(StewardActionError):
    """Raised when the artifact registry cannot be reached."""

    def __init__(self, host: str, cause: str) -> None:
        self.host = host
        self.cause = cause
        super().__init__(f"Unable to connect to Maven Central ({host}): {cause}")


class AuthError(StewardActionError):
    """Raised when the GitHub token is missing, invalid or expired."""


class ConfigError(StewardActionError):
    """Raised on a malformed combination of inputs."""


class WorkspaceIOError(StewardActionError, OSError):
    """Raised when the workspace cannot be created or written."""


class CacheError(StewardActionError):
    """Raised when the workspace cache cannot be read or written."""


class ToolInstallError(StewardActionError):
    """Raised when Coursier or a tool it installs cannot be prepared."""


class LaunchFailure(StewardActionError):
    """Raised when a launched tool exits with a non-zero code."""

    def __init__(self, tool: str, exit_code: int) -> None:
        self.tool = tool
        self.exit_code = exit_code
        super().__init__(f"{tool} exited with code {exit_code}")
