"""
Assembly of bulk-indexing documents from parsed benchmark results.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from esbulk.compat import LEGACY_TYPE_NAME, CompatPolicy
from gobench.facts import FactProviders, GitFacts, HostFacts
from gobench.parse import BenchmarkRecord, Measured

if TYPE_CHECKING:
    from gobench.stream import RunContext


def format_timestamp(ts: datetime) -> str:
    """RFC 3339 in UTC with a `Z` suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class IndexAction:
    index: str
    doc_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {"_index": self.index}
        if self.doc_type:
            meta["_type"] = self.doc_type
        return {"index": meta}


@dataclass(frozen=True)
class Document:
    executed_at: datetime
    name: str
    iterations: int
    pkg: str = ""
    goos: str = ""
    goarch: str = ""
    hostname: Optional[str] = None
    go_version: Optional[str] = None
    os_version: Optional[str] = None
    ns_per_op: Optional[float] = None
    mb_per_s: Optional[float] = None
    alloced_bytes_per_op: Optional[int] = None
    allocs_per_op: Optional[int] = None
    extra_metrics: Optional[Dict[str, float]] = None
    git: Optional[GitFacts] = None
    tags: Dict[str, str] = field(default_factory=dict)

    def to_source(self) -> Dict[str, Any]:
        src: Dict[str, Any] = {
            "executed_at": format_timestamp(self.executed_at),
            "name": self.name,
            "iterations": self.iterations,
            "pkg": self.pkg,
            "goos": self.goos,
            "goarch": self.goarch,
        }
        optional = {
            "hostname": self.hostname,
            "go_version": self.go_version,
            "os_version": self.os_version,
            "ns_per_op": self.ns_per_op,
            "mb_per_s": self.mb_per_s,
            "alloced_bytes_per_op": self.alloced_bytes_per_op,
            "allocs_per_op": self.allocs_per_op,
        }
        for k, v in optional.items():
            if v is not None:
                src[k] = v
        if self.extra_metrics:
            src["extra_metrics"] = dict(self.extra_metrics)
        if self.git is not None:
            git: Dict[str, Any] = {"commit": self.git.commit, "subject": self.git.subject}
            if self.git.committer_date is not None:
                git["committer"] = {"date": format_timestamp(self.git.committer_date)}
            src["git"] = git
        # Tags go last and win on key collisions.
        src.update(self.tags)
        return src


def encode_pair(action: IndexAction, doc: Document) -> str:
    """Two NDJSON lines: the action header, then the document source."""
    lines = [
        json.dumps(action.to_dict(), separators=(",", ":"), allow_nan=False),
        json.dumps(doc.to_source(), separators=(",", ":"), allow_nan=False),
    ]
    return "\n".join(lines) + "\n"


class DocumentAssembler:
    def __init__(
        self,
        index: str,
        *,
        policy: CompatPolicy,
        tags: Optional[Mapping[str, str]] = None,
        facts: Optional[FactProviders] = None,
    ) -> None:
        self.index = str(index)
        self.policy = policy
        self.tags: Dict[str, str] = dict(tags or {})
        self.facts = facts if facts is not None else FactProviders()
        self._host: Optional[HostFacts] = None

    def host(self) -> HostFacts:
        if self._host is None:
            self._host = self.facts.host_facts()
        return self._host

    def index_action(self) -> IndexAction:
        return IndexAction(self.index, LEGACY_TYPE_NAME if self.policy.action_doc_type else None)

    def assemble(
        self,
        record: BenchmarkRecord,
        extra: Optional[Dict[str, float]],
        ctx: "RunContext",
        executed_at: datetime,
    ) -> Tuple[IndexAction, Document]:
        host = self.host()
        doc = Document(
            executed_at=executed_at,
            name=record.name,
            iterations=record.iterations,
            pkg=ctx.pkg,
            goos=ctx.goos,
            goarch=ctx.goarch,
            hostname=host.hostname,
            go_version=host.go_version,
            os_version=host.os_version,
            ns_per_op=record.ns_per_op if record.has(Measured.NS_PER_OP) else None,
            mb_per_s=record.mb_per_s if record.has(Measured.MB_PER_S) else None,
            alloced_bytes_per_op=(
                record.alloced_bytes_per_op if record.has(Measured.ALLOCED_BYTES_PER_OP) else None
            ),
            allocs_per_op=record.allocs_per_op if record.has(Measured.ALLOCS_PER_OP) else None,
            extra_metrics=dict(extra) if extra else None,
            git=self.facts.git(ctx.pkg),
            tags=dict(self.tags),
        )
        return self.index_action(), doc


__all__ = ["format_timestamp", "IndexAction", "Document", "encode_pair", "DocumentAssembler"]
