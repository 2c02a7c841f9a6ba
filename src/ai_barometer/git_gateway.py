"""GitPython-backed access to the repository the hook runs in."""

import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set, Union
from urllib.parse import urlparse

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from loguru import logger

from ai_barometer.config import ConfigProvider, GitConfigProvider, Scope
from ai_barometer.errors import GitGatewayError, git_error_message
from ai_barometer.models.session import Commit
from ai_barometer.settings import NOTES_REF

_SCP_LIKE = re.compile(r"^(?:[\w.-]+@)?[\w.-]+:(?!//)(?P<path>.+)$")


def canonical_path(path: Union[str, Path]) -> Path:
    """Resolve symlinks and relative segments without requiring existence."""
    return Path(os.path.realpath(os.path.expanduser(str(path))))


def parse_remote_org(url: str) -> Optional[str]:
    """Extract the organization (first path segment) from a remote URL.

    Handles ``https://host/org/repo.git``, ``ssh://git@host/org/repo`` and
    scp-like ``git@host:org/repo.git``. Local paths yield None.
    """
    url = url.strip()
    if "://" in url:
        parsed = urlparse(url)
        if parsed.scheme == "file" or not parsed.netloc:
            return None
        path = parsed.path
    else:
        match = _SCP_LIKE.match(url)
        if not match or url.startswith(("/", ".")):
            return None
        path = match.group("path")

    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) < 2:
        return None
    return parts[0]


class GitGateway:
    """Every git interaction the pipeline performs goes through here."""

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        config: Optional[ConfigProvider] = None,
        notes_ref: str = NOTES_REF,
    ):
        start = str(path) if path else os.getcwd()
        try:
            self.repo = Repo(start, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitGatewayError(f"not a git repository: {start}") from e
        if self.repo.bare or not self.repo.working_tree_dir:
            raise GitGatewayError(f"bare repositories are not supported: {start}")

        self.config = config or GitConfigProvider(self.repo.working_tree_dir)
        self.notes_ref = notes_ref

    # Commit identity

    def repo_root(self) -> Path:
        return canonical_path(self.repo.working_tree_dir)

    def head_hash(self) -> str:
        try:
            return self.repo.head.commit.hexsha
        except ValueError as e:
            # Unborn branch: HEAD does not point at a commit yet
            raise GitGatewayError("HEAD does not point at a commit") from e

    def head_timestamp(self) -> int:
        try:
            return int(self.repo.head.commit.committed_date)
        except ValueError as e:
            raise GitGatewayError("HEAD does not point at a commit") from e

    def head_commit(self) -> Commit:
        return Commit(hash=self.head_hash(), timestamp=self.head_timestamp(), repo_root=self.repo_root())

    def iter_commits_since(self, since: datetime) -> List[Commit]:
        """Commits reachable from HEAD committed at or after ``since``."""
        root = self.repo_root()
        try:
            commits = list(self.repo.iter_commits("HEAD", max_age=int(since.timestamp())))
        except (ValueError, GitCommandError) as e:
            raise GitGatewayError(f"failed to list commits: {e}") from e
        return [Commit(hash=c.hexsha, timestamp=int(c.committed_date), repo_root=root) for c in commits]

    # Notes

    def note_exists(self, commit_hash: str) -> bool:
        """Check whether ``commit_hash`` already carries a note in our namespace."""
        try:
            listing = self.repo.git.notes("--ref", self.notes_ref, "list")
        except GitCommandError as e:
            raise GitGatewayError(f"failed to list notes: {git_error_message(e)}") from e

        for line in listing.splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1] == commit_hash:
                return True
        return False

    def add_note(self, commit_hash: str, body: str) -> None:
        """Attach ``body`` verbatim as the note for ``commit_hash``.

        The body is stored as a blob first and attached with ``-C`` so git does
        not run its message cleanup over the transcript.
        """
        fd, tmp_path = tempfile.mkstemp(prefix="ai-barometer-", suffix=".note")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(body)
            blob = self.repo.git.hash_object("-w", tmp_path)
            self.repo.git.notes("--ref", self.notes_ref, "add", "-C", blob, commit_hash)
        except GitCommandError as e:
            raise GitGatewayError(
                f"failed to add note to {commit_hash[:7]}: {git_error_message(e)}"
            ) from e
        finally:
            os.unlink(tmp_path)

    def read_note(self, commit_hash: str) -> Optional[str]:
        if not self.note_exists(commit_hash):
            return None
        try:
            return self.repo.git.notes("--ref", self.notes_ref, "show", commit_hash, strip_newline_in_stdout=False)
        except GitCommandError as e:
            raise GitGatewayError(f"failed to read note: {git_error_message(e)}") from e

    # Configuration

    def config_get(self, key: str) -> Optional[str]:
        return self.config.get(Scope.REPO, key)

    def config_get_global(self, key: str) -> Optional[str]:
        return self.config.get(Scope.GLOBAL, key)

    def config_set(self, key: str, value: str) -> None:
        self.config.set(Scope.REPO, key, value)

    def config_set_global(self, key: str, value: str) -> None:
        self.config.set(Scope.GLOBAL, key, value)

    # Remotes

    def has_upstream(self) -> bool:
        return len(self.repo.remotes) > 0

    def remote_orgs(self) -> Set[str]:
        """Organizations of every URL of every configured remote."""
        orgs = set()
        for remote in self.repo.remotes:
            try:
                urls = list(remote.urls)
            except GitCommandError as e:
                raise GitGatewayError(
                    f"failed to read URLs of remote {remote.name}: {git_error_message(e)}"
                ) from e
            for url in urls:
                org = parse_remote_org(url)
                if org:
                    orgs.add(org)
        return orgs

    def push_remote(self) -> Optional[str]:
        names = [remote.name for remote in self.repo.remotes]
        if not names:
            return None
        return "origin" if "origin" in names else names[0]

    def push_notes(self) -> None:
        remote = self.push_remote()
        if remote is None:
            raise GitGatewayError("no remote configured")
        logger.debug(f"Pushing {self.notes_ref} to {remote}")
        try:
            self.repo.git.push(remote, self.notes_ref)
        except GitCommandError as e:
            raise GitGatewayError(f"push to {remote} failed: {git_error_message(e)}") from e

    # Hooks

    def hooks_dir(self) -> Path:
        """Directory git reads hooks from (honours ``core.hooksPath``)."""
        hooks = Path(self.repo.git.rev_parse("--git-path", "hooks"))
        if not hooks.is_absolute():
            hooks = Path(self.repo.working_tree_dir) / hooks
        return hooks
