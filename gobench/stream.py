"""
Single-pass driver: benchmark text in, bulk-indexing NDJSON out.

Input is processed strictly in arrival order. `pkg:`, `goos:` and `goarch:`
lines update the run context; every other line is either a benchmark result
(one action + document pair) or noise that is dropped.
"""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Protocol, TextIO, Tuple

from gobench.document import Document, DocumentAssembler, IndexAction, encode_pair
from gobench.parse import BenchmarkParseError, BenchmarkRecord, parse_extra_metrics, parse_line


CONTEXT_PREFIXES = ("pkg:", "goos:", "goarch:")


class LineKind(enum.Enum):
    CONTEXT = "context"
    BENCHMARK = "benchmark"
    NOISE = "noise"


@dataclass
class RunContext:
    pkg: str = ""
    goos: str = ""
    goarch: str = ""


def classify_line(line: str, ctx: RunContext) -> Tuple[LineKind, Optional[BenchmarkRecord]]:
    """
    Update `ctx` for context lines; parse benchmark lines.

    Returns (CONTEXT, None), (BENCHMARK, record) or (NOISE, None).
    """
    for prefix in CONTEXT_PREFIXES:
        if line.startswith(prefix):
            setattr(ctx, prefix[:-1], line[len(prefix):].strip())
            return LineKind.CONTEXT, None
    try:
        return LineKind.BENCHMARK, parse_line(line)
    except BenchmarkParseError:
        return LineKind.NOISE, None


class Sink(Protocol):
    def write(self, action: IndexAction, doc: Document) -> None: ...

    def close(self) -> None: ...


class PassthroughSink:
    """Writes each pair straight to a text stream (normally stdout)."""

    def __init__(self, out: TextIO) -> None:
        self.out = out

    def write(self, action: IndexAction, doc: Document) -> None:
        self.out.write(encode_pair(action, doc))

    def close(self) -> None:
        self.out.flush()


class BulkSink:
    """
    Buffers pairs and sends them in one `_bulk` request on close.

    With `echo`, the encoded stream is mirrored there as it is produced.
    """

    def __init__(self, client: Any, *, echo: Optional[TextIO] = None) -> None:
        self.client = client
        self.echo = echo
        self.buf = io.StringIO()
        self.count = 0
        self.response: Optional[dict] = None

    def write(self, action: IndexAction, doc: Document) -> None:
        chunk = encode_pair(action, doc)
        self.buf.write(chunk)
        self.count += 1
        if self.echo is not None:
            self.echo.write(chunk)

    def close(self) -> None:
        if self.echo is not None:
            self.echo.flush()
        if self.count == 0:
            return
        self.response = self.client.bulk(self.buf.getvalue())


def run_stream(
    lines: Iterable[str],
    assembler: DocumentAssembler,
    sink: Sink,
    *,
    executed_at: Optional[datetime] = None,
) -> int:
    """
    Drive `lines` through classification, parsing and assembly into `sink`.

    All documents share one `executed_at`, fixed before the first line is read.
    The sink is closed (flushing any buffered bulk request) only after the
    input is exhausted without error. Returns the number of documents written.
    """
    ts = executed_at if executed_at is not None else datetime.now(timezone.utc)
    ctx = RunContext()
    n = 0
    for raw in lines:
        line = raw.rstrip("\r\n")
        kind, record = classify_line(line, ctx)
        if kind is not LineKind.BENCHMARK or record is None:
            continue
        action, doc = assembler.assemble(record, parse_extra_metrics(line), ctx, ts)
        sink.write(action, doc)
        n += 1
    sink.close()
    return n


__all__ = [
    "CONTEXT_PREFIXES",
    "LineKind",
    "RunContext",
    "classify_line",
    "Sink",
    "PassthroughSink",
    "BulkSink",
    "run_stream",
]
