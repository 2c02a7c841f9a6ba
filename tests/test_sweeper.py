"""Tests for the pending retry sweep."""

from unittest.mock import patch

from ai_barometer.errors import GitGatewayError
from ai_barometer.sweeper import sweep_pending

OTHER_REPO_COMMIT = "0123456789abcdef0123456789abcdef01234567"


def test_out_of_band_note_clears_record(gateway, store, repo_root):
    commit = gateway.head_commit()
    store.write_pending(commit.hash, str(repo_root), commit.timestamp)
    gateway.add_note(commit.hash, "added by someone else")

    result = sweep_pending(gateway, store, repo_root)

    assert result.resolved == [commit.hash]
    assert store.get(commit.hash) is None
    assert gateway.read_note(commit.hash) == "added by someone else"


def test_late_transcript_is_attached(gateway, store, repo_root, claude_project, write_transcript, session_lines):
    commit = gateway.head_commit()
    store.write_pending(commit.hash, str(repo_root), commit.timestamp)
    write_transcript(claude_project, "late.jsonl", session_lines(commit.hash, repo_root), mtime=commit.timestamp + 120)

    result = sweep_pending(gateway, store, repo_root)

    assert result.attached == [commit.hash]
    assert store.get(commit.hash) is None
    assert "session_id: test-session-id" in gateway.read_note(commit.hash)


def test_unresolved_record_is_left_untouched(gateway, store, repo_root):
    commit = gateway.head_commit()
    store.write_pending(commit.hash, str(repo_root), commit.timestamp)
    before = (store.directory / f"{commit.hash}.json").read_text()

    result = sweep_pending(gateway, store, repo_root)

    assert result.remaining == [commit.hash]
    assert (store.directory / f"{commit.hash}.json").read_text() == before
    assert not gateway.note_exists(commit.hash)


def test_other_repositories_are_ignored(gateway, store, repo_root, tmp_path):
    store.write_pending(OTHER_REPO_COMMIT, str(tmp_path / "elsewhere"), 1)

    result = sweep_pending(gateway, store, repo_root)

    assert result.remaining == [] and result.resolved == [] and result.failed == []
    assert store.get(OTHER_REPO_COMMIT) is not None


def test_excluded_commits_are_skipped(gateway, store, repo_root):
    commit = gateway.head_commit()
    store.write_pending(commit.hash, str(repo_root), commit.timestamp)

    result = sweep_pending(gateway, store, repo_root, exclude={commit.hash})

    assert result.remaining == []
    assert store.get(commit.hash) is not None


def test_failure_on_one_record_does_not_stop_the_sweep(gateway, store, repo_root):
    head = gateway.head_commit()
    store.write_pending(OTHER_REPO_COMMIT, str(repo_root), 1)
    store.write_pending(head.hash, str(repo_root), head.timestamp)
    real_note_exists = gateway.note_exists

    def flaky(commit_hash):
        if commit_hash == OTHER_REPO_COMMIT:
            raise GitGatewayError("boom")
        return real_note_exists(commit_hash)

    with patch.object(gateway, "note_exists", side_effect=flaky):
        result = sweep_pending(gateway, store, repo_root)

    assert result.failed == [OTHER_REPO_COMMIT]
    assert result.remaining == [head.hash]
