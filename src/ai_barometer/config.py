"""Key/value configuration at repository and global scope.

The pipeline only needs ``get`` and ``set``; the production implementation
stores values in git config so they travel with the repository, while tests
substitute an in-memory provider.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Union

from git import Git
from git.exc import GitCommandError

from ai_barometer.errors import ConfigError, git_error_message

ENABLED_KEY = "ai.barometer.enabled"
AUTOPUSH_KEY = "ai.barometer.autopush"
ORG_KEY = "ai.barometer.org"


class Scope(str, Enum):
    """Where a configuration value lives."""

    REPO = "repo"
    GLOBAL = "global"


class ConfigProvider(Protocol):
    """Narrow configuration interface consumed by the pipeline."""

    def get(self, scope: Scope, key: str) -> Optional[str]: ...

    def set(self, scope: Scope, key: str, value: str) -> None: ...


class GitConfigProvider:
    """ConfigProvider backed by ``git config`` for one repository."""

    def __init__(self, repo_root: Union[str, Path, None] = None):
        self.git = Git(str(repo_root) if repo_root else None)

    def _scope_flag(self, scope: Scope) -> str:
        return "--global" if scope == Scope.GLOBAL else "--local"

    def get(self, scope: Scope, key: str) -> Optional[str]:
        """Return the value for ``key``, or None when it is unset."""
        try:
            value = self.git.config(self._scope_flag(scope), "--get", key)
        except GitCommandError as e:
            # git config exits 1 when the key is simply missing
            if e.status == 1:
                return None
            raise ConfigError(f"failed to read {key}: {git_error_message(e)}") from e
        return value.strip() or None

    def set(self, scope: Scope, key: str, value: str) -> None:
        try:
            self.git.config(self._scope_flag(scope), key, value)
        except GitCommandError as e:
            raise ConfigError(f"failed to write {key}: {git_error_message(e)}") from e
