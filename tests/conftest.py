"""Shared fixtures: isolated HOME, temporary repositories, transcripts."""

import json
import os
from pathlib import Path

import pytest
from git import Repo
from loguru import logger

from ai_barometer.agents.claude import encode_repo_path
from ai_barometer.git_gateway import GitGateway, canonical_path
from ai_barometer.pending import PendingStore


class InMemoryConfig:
    """ConfigProvider fake keyed by (scope, key)."""

    def __init__(self):
        self.values = {}

    def get(self, scope, key):
        return self.values.get((scope, key))

    def set(self, scope, key, value):
        self.values[(scope, key)] = value


def create_commit(repo: Repo, name: str, content: str, message: str):
    """Helper function to create a commit in the test repository."""
    file_path = Path(repo.working_dir) / name
    file_path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message)


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch):
    """Point HOME and git's global config at a throwaway directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for name, value in {
        "GIT_AUTHOR_NAME": "Test User",
        "GIT_AUTHOR_EMAIL": "test@test.com",
        "GIT_COMMITTER_NAME": "Test User",
        "GIT_COMMITTER_EMAIL": "test@test.com",
    }.items():
        monkeypatch.setenv(name, value)
    for name in (
        "CLAUDE_CONFIG_DIR",
        "CODEX_HOME",
        "AI_BAROMETER_HOME",
        "AI_BAROMETER_WINDOW_SECONDS",
        "AI_BAROMETER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def repo(tmp_path):
    """Create a temporary Git repository with one commit."""
    repo_path = tmp_path / "project"
    repo_path.mkdir()
    repo = Repo.init(repo_path)
    create_commit(repo, "README.md", "hello", "Initial commit")
    return repo


@pytest.fixture
def repo_root(repo):
    return canonical_path(repo.working_dir)


@pytest.fixture
def fake_config():
    return InMemoryConfig()


@pytest.fixture
def gateway(repo, fake_config):
    return GitGateway(repo.working_dir, config=fake_config)


@pytest.fixture
def store(tmp_path):
    return PendingStore(tmp_path / "barometer" / "pending")


@pytest.fixture
def claude_project(home, repo_root):
    """Claude Code project directory for the test repository."""
    project = home / ".claude" / "projects" / encode_repo_path(repo_root)
    project.mkdir(parents=True)
    return project


@pytest.fixture
def write_transcript():
    """Factory writing a JSONL transcript with a given mtime."""

    def _write(directory: Path, name: str, lines, mtime=None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
        path.write_text("\n".join(rendered) + "\n")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write


@pytest.fixture
def session_lines():
    """Lines of a Claude Code session that committed ``commit_hash`` in ``cwd``."""

    def _lines(commit_hash: str, cwd, session_id: str = "test-session-id"):
        return [
            {"type": "user", "sessionId": session_id, "cwd": str(cwd), "message": "commit this"},
            {"type": "tool_result", "content": f"[main {commit_hash[:7]}] Initial commit\n 1 file changed"},
            {"type": "assistant", "message": "Done"},
        ]

    return _lines


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    try:
        logger.remove(handler_id)
    except ValueError:
        pass


@pytest.fixture
def make_commit(repo):
    """Factory adding another commit to the test repository."""

    def _commit(name: str, content: str = "content", message: str = "Another commit"):
        return create_commit(repo, name, content, message)

    return _commit
