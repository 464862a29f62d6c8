"""
Parsers for `go test -bench` result lines.

A result line looks like:

  BenchmarkName-8 <TAB> 1000 <TAB> 1234 ns/op <TAB> 56 B/op <TAB> 3 allocs/op <TAB> 42.5 events/sec

`parse_line` recovers the harness-native measurements (ns/op, MB/s, B/op,
allocs/op). `parse_extra_metrics` recovers any custom `<value> <unit>`
columns reported through `b.ReportMetric`.
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import Dict, Optional


class BenchmarkParseError(ValueError):
    """Raised when a line is not a benchmark result line."""


class Measured(enum.IntFlag):
    NONE = 0
    NS_PER_OP = 1
    MB_PER_S = 2
    ALLOCED_BYTES_PER_OP = 4
    ALLOCS_PER_OP = 8


STANDARD_UNITS = {
    "ns/op": Measured.NS_PER_OP,
    "MB/s": Measured.MB_PER_S,
    "B/op": Measured.ALLOCED_BYTES_PER_OP,
    "allocs/op": Measured.ALLOCS_PER_OP,
}

_INT_RE = re.compile(r"^[0-9]+$")

MAX_INT64 = 2**63 - 1
MAX_UINT64 = 2**64 - 1


@dataclass(frozen=True)
class BenchmarkRecord:
    name: str
    iterations: int
    measured: Measured = Measured.NONE
    ns_per_op: float = 0.0
    mb_per_s: float = 0.0
    alloced_bytes_per_op: int = 0
    allocs_per_op: int = 0

    def has(self, flag: Measured) -> bool:
        return bool(self.measured & flag)


def _parse_float(token: str) -> Optional[float]:
    # float() also accepts digit separators; the harness never emits them.
    if "_" in token:
        return None
    try:
        v = float(token)
    except ValueError:
        return None
    # Out-of-range literals such as 1e400 overflow to inf; only an explicit inf is infinite.
    if math.isinf(v) and "inf" not in token.lower():
        return None
    return v


def _parse_uint(token: str, limit: int = MAX_UINT64) -> Optional[int]:
    if not _INT_RE.match(token):
        return None
    v = int(token)
    return v if v <= limit else None


def parse_line(line: str) -> BenchmarkRecord:
    fields = line.split()
    if len(fields) < 2:
        raise BenchmarkParseError(f"two fields required, have {len(fields)}")
    if not fields[0].startswith("Benchmark"):
        raise BenchmarkParseError('first field does not start with "Benchmark"')
    iterations = _parse_uint(fields[1], MAX_INT64)
    if iterations is None:
        raise BenchmarkParseError(f"invalid iteration count {fields[1]!r}")

    values: Dict[str, float | int] = {}
    measured = Measured.NONE
    # Remaining fields come in <value> <unit> pairs; a dangling value is ignored.
    for i in range(1, len(fields) // 2):
        quant, unit = fields[i * 2], fields[i * 2 + 1]
        flag = STANDARD_UNITS.get(unit)
        if flag is None:
            continue
        if flag in (Measured.NS_PER_OP, Measured.MB_PER_S):
            v: float | int | None = _parse_float(quant)
        else:
            v = _parse_uint(quant)
        if v is None:
            continue
        values[flag.name.lower()] = v
        measured |= flag

    return BenchmarkRecord(name=fields[0], iterations=iterations, measured=measured, **values)


def parse_extra_metrics(line: str) -> Optional[Dict[str, float]]:
    """
    Collect custom metrics from the tab-separated columns of a result line.

    The first three columns (name, iterations, ns/op) are skipped. Columns that
    are not `<number> <unit>` pairs, and the four standard units, are ignored.
    Returns None rather than an empty dict when nothing usable was found.
    """
    entries = line.split("\t")
    if len(entries) < 3:
        return None

    result: Dict[str, float] = {}
    for entry in entries[3:]:
        parts = entry.strip().split(" ")
        if len(parts) < 2:
            continue
        key = parts[1].strip()
        value = _parse_float(parts[0].strip())
        if value is None:
            continue
        if key in STANDARD_UNITS:
            continue
        result[key.replace("/", "_")] = value
    return result or None


__all__ = [
    "BenchmarkParseError",
    "Measured",
    "STANDARD_UNITS",
    "BenchmarkRecord",
    "parse_line",
    "parse_extra_metrics",
]
