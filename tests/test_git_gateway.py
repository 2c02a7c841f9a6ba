"""Tests for the GitPython gateway and git-config provider."""

import time
from datetime import datetime, timedelta, timezone

import pytest
from git import Repo

from ai_barometer.config import GitConfigProvider, Scope
from ai_barometer.errors import GitGatewayError
from ai_barometer.git_gateway import GitGateway, parse_remote_org


@pytest.mark.parametrize(
    "url, org",
    [
        ("git@github.com:my-org/my-repo.git", "my-org"),
        ("https://github.com/Org-Two/repo2.git", "Org-Two"),
        ("ssh://git@github.com:22/acme/tool", "acme"),
        ("https://gitlab.example.com/group/sub/project.git", "group"),
        ("github.com:org/repo", "org"),
        ("/srv/git/repo.git", None),
        ("file:///srv/git/repo.git", None),
        ("../sibling", None),
        ("https://github.com/lonely", None),
    ],
)
def test_parse_remote_org(url, org):
    assert parse_remote_org(url) == org


def test_not_a_repository(tmp_path):
    outside = tmp_path / "plain"
    outside.mkdir()

    with pytest.raises(GitGatewayError):
        GitGateway(outside)


def test_unborn_head(tmp_path, fake_config):
    Repo.init(tmp_path / "empty")
    gateway = GitGateway(tmp_path / "empty", config=fake_config)

    with pytest.raises(GitGatewayError):
        gateway.head_hash()


def test_head_identity(repo, gateway, repo_root):
    head = repo.head.commit

    commit = gateway.head_commit()

    assert commit.hash == head.hexsha
    assert commit.timestamp == head.committed_date
    assert commit.repo_root == repo_root


def test_subdirectory_resolves_to_root(repo, fake_config, repo_root):
    sub = repo_root / "pkg"
    sub.mkdir()

    assert GitGateway(sub, config=fake_config).repo_root() == repo_root


def test_note_exists_after_add(gateway):
    commit = gateway.head_hash()
    assert not gateway.note_exists(commit)

    gateway.add_note(commit, "hello")

    assert gateway.note_exists(commit)


def test_notes_use_dedicated_namespace(repo, gateway):
    commit = gateway.head_hash()
    repo.git.notes("add", "-m", "user note", commit)

    assert not gateway.note_exists(commit)


def test_remote_orgs_multiple_remotes(repo, gateway):
    repo.create_remote("origin", "git@github.com:org-one/repo1.git")
    repo.create_remote("upstream", "https://github.com/org-two/repo2.git")
    repo.create_remote("fork", "https://github.com/org-one/repo3.git")

    assert gateway.has_upstream()
    assert gateway.remote_orgs() == {"org-one", "org-two"}


def test_no_remotes(gateway):
    assert not gateway.has_upstream()
    assert gateway.remote_orgs() == set()
    assert gateway.push_remote() is None
    with pytest.raises(GitGatewayError):
        gateway.push_notes()


def test_push_remote_prefers_origin(repo, gateway):
    repo.create_remote("backup", "https://github.com/a/b.git")
    repo.create_remote("origin", "https://github.com/a/c.git")

    assert gateway.push_remote() == "origin"


def test_iter_commits_since(tmp_path, fake_config):
    repo = Repo.init(tmp_path / "history")
    old = int(time.time()) - 10 * 24 * 3600
    (tmp_path / "history" / "a.txt").write_text("a")
    repo.index.add(["a.txt"])
    repo.index.commit("backdated", commit_date=f"{old} +0000", author_date=f"{old} +0000")
    recent = [repo.index.commit("second").hexsha, repo.index.commit("third").hexsha]
    gateway = GitGateway(repo.working_dir, config=fake_config)

    found = gateway.iter_commits_since(datetime.now(timezone.utc) - timedelta(days=7))

    assert {c.hash for c in found} == set(recent)


def test_hooks_dir(repo, gateway, repo_root):
    assert gateway.hooks_dir() == repo_root / ".git" / "hooks"


def test_git_config_provider_repo_scope(repo, home):
    config = GitConfigProvider(repo.working_dir)
    assert config.get(Scope.REPO, "ai.barometer.enabled") is None

    config.set(Scope.REPO, "ai.barometer.enabled", "false")

    assert config.get(Scope.REPO, "ai.barometer.enabled") == "false"
    assert config.get(Scope.GLOBAL, "ai.barometer.enabled") is None


def test_git_config_provider_global_scope(repo, home):
    config = GitConfigProvider(repo.working_dir)

    config.set(Scope.GLOBAL, "ai.barometer.org", "acme")

    assert config.get(Scope.GLOBAL, "ai.barometer.org") == "acme"
    assert "acme" in (home / ".gitconfig").read_text()


def test_gateway_config_helpers(gateway, fake_config):
    gateway.config_set("ai.barometer.autopush", "true")
    gateway.config_set_global("ai.barometer.org", "acme")

    assert gateway.config_get("ai.barometer.autopush") == "true"
    assert gateway.config_get_global("ai.barometer.org") == "acme"
    assert fake_config.values[(Scope.GLOBAL, "ai.barometer.org")] == "acme"
