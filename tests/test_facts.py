from datetime import datetime, timezone

from gobench import facts
from gobench.facts import GitFacts, find_vcs_root, git_facts, vcs_facts


def _runner(outputs):
    calls = []

    def run(cmd, cwd=None):
        calls.append((tuple(cmd), cwd))
        return outputs.get(cmd[0])

    run.calls = calls
    return run


def test_git_facts_parses_log_line():
    run = _runner({"git": "0123abcd 1646092800 Fix: handle  spaces in subject"})
    got = git_facts("/src", run)
    assert got == GitFacts(
        commit="0123abcd",
        subject="Fix: handle  spaces in subject",
        committer_date=datetime(2022, 3, 1, tzinfo=timezone.utc),
    )
    assert run.calls == [(("git", "log", "-1", "--format=%H %ct %s"), "/src")]


def test_git_facts_bad_timestamp_keeps_commit():
    got = git_facts("/src", _runner({"git": "abc notatime subject"}))
    assert got.commit == "abc"
    assert got.committer_date is None


def test_git_facts_failures_are_none():
    assert git_facts("/src", _runner({})) is None
    assert git_facts("/src", _runner({"git": "abc 123"})) is None


def test_vcs_facts_requires_git_checkout(tmp_path):
    repo = tmp_path / "repo"
    pkg_dir = repo / "internal" / "enc"
    pkg_dir.mkdir(parents=True)
    (repo / ".git").mkdir()
    run = _runner({"go": str(pkg_dir), "git": "abc 1646092800 subject"})
    got = vcs_facts("example.com/repo/internal/enc", run)
    assert got is not None and got.commit == "abc"
    assert find_vcs_root(str(pkg_dir)) == ("git", repo.resolve())


def test_vcs_facts_other_vcs_or_none(tmp_path):
    hg = tmp_path / "hgrepo"
    hg.mkdir()
    (hg / ".hg").mkdir()
    run = _runner({"go": str(hg), "git": "abc 1 s"})
    assert vcs_facts("example.com/hg", run) is None
    assert vcs_facts("", run) is None
    assert vcs_facts("example.com/missing", _runner({})) is None


def test_run_cmd_missing_binary_is_none():
    assert facts.run_cmd(["definitely-not-a-real-binary-xyz"]) is None


def test_no_facts_reports_nothing():
    p = facts.no_facts()
    host = p.host_facts()
    assert (host.hostname, host.os_version, host.go_version) == (None, None, None)
    assert p.git("github.com/x/y") is None
