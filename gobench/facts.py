"""
Best-effort host, toolchain and version-control facts.

Every provider returns None instead of raising: a missing fact only means the
corresponding document field is omitted.
"""

from __future__ import annotations

import platform
import socket
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional


VCS_MARKERS = (".git", ".hg", ".svn", ".bzr", ".fossil")

Runner = Callable[[List[str], Optional[str]], Optional[str]]


@dataclass(frozen=True)
class GitFacts:
    commit: str
    subject: str
    committer_date: Optional[datetime] = None


@dataclass(frozen=True)
class HostFacts:
    hostname: Optional[str] = None
    os_version: Optional[str] = None
    go_version: Optional[str] = None


def run_cmd(cmd: List[str], cwd: Optional[str] = None) -> Optional[str]:
    """Run a command and return its stripped stdout, or None on any failure."""
    try:
        out = subprocess.check_output(cmd, cwd=cwd, stderr=subprocess.DEVNULL, text=True)
    except (OSError, subprocess.CalledProcessError):
        return None
    return str(out).strip()


def hostname() -> Optional[str]:
    try:
        name = socket.gethostname()
    except OSError:
        return None
    return name or None


def os_version() -> Optional[str]:
    # Kernel release, as `uname -r` reports it; only meaningful on Linux.
    if not sys.platform.startswith("linux"):
        return None
    return platform.release() or None


def go_version(run: Runner = run_cmd) -> Optional[str]:
    return run(["go", "env", "GOVERSION"], None) or None


def resolve_package_dir(pkg: str, run: Runner = run_cmd) -> Optional[str]:
    if not pkg:
        return None
    return run(["go", "list", "-find", "-f", "{{.Dir}}", pkg], None) or None


def find_vcs_root(directory: str) -> Optional[tuple[str, Path]]:
    """Walk up from `directory` and return (vcs_name, root) for the first marker found."""
    d = Path(directory).resolve()
    for cand in [d, *d.parents]:
        for marker in VCS_MARKERS:
            if (cand / marker).exists():
                return marker.lstrip("."), cand
    return None


def git_facts(directory: str, run: Runner = run_cmd) -> Optional[GitFacts]:
    out = run(["git", "log", "-1", "--format=%H %ct %s"], directory)
    if not out:
        return None
    parts = out.split(" ", 2)
    if len(parts) != 3:
        return None
    commit, ct, subject = parts
    committer_date: Optional[datetime] = None
    try:
        committer_date = datetime.fromtimestamp(int(ct), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        committer_date = None
    return GitFacts(commit=commit, subject=subject, committer_date=committer_date)


def vcs_facts(pkg: str, run: Runner = run_cmd) -> Optional[GitFacts]:
    directory = resolve_package_dir(pkg, run)
    if directory is None:
        return None
    found = find_vcs_root(directory)
    if found is None or found[0] != "git":
        return None
    return git_facts(directory, run)


@dataclass
class FactProviders:
    """
    Injectable fact lookups used by DocumentAssembler.

    Host facts are looked up once; VCS facts once per package.
    """

    hostname: Callable[[], Optional[str]] = hostname
    os_version: Callable[[], Optional[str]] = os_version
    go_version: Callable[[], Optional[str]] = go_version
    vcs: Callable[[str], Optional[GitFacts]] = vcs_facts
    _vcs_cache: Dict[str, Optional[GitFacts]] = field(default_factory=dict, init=False, repr=False)

    def host_facts(self) -> HostFacts:
        return HostFacts(
            hostname=self.hostname(),
            os_version=self.os_version(),
            go_version=self.go_version(),
        )

    def git(self, pkg: str) -> Optional[GitFacts]:
        if pkg not in self._vcs_cache:
            self._vcs_cache[pkg] = self.vcs(pkg)
        return self._vcs_cache[pkg]


def no_facts() -> FactProviders:
    """Providers that report nothing; useful for deterministic output."""
    return FactProviders(
        hostname=lambda: None,
        os_version=lambda: None,
        go_version=lambda: None,
        vcs=lambda pkg: None,
    )


__all__ = [
    "VCS_MARKERS",
    "GitFacts",
    "HostFacts",
    "run_cmd",
    "hostname",
    "os_version",
    "go_version",
    "resolve_package_dir",
    "find_vcs_root",
    "git_facts",
    "vcs_facts",
    "FactProviders",
    "no_facts",
]
