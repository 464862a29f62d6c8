from .document import Document, DocumentAssembler, IndexAction, encode_pair, format_timestamp
from .facts import FactProviders, GitFacts, HostFacts, no_facts
from .parse import BenchmarkParseError, BenchmarkRecord, Measured, parse_extra_metrics, parse_line
from .stream import BulkSink, LineKind, PassthroughSink, RunContext, classify_line, run_stream

__all__ = [
    "Document",
    "DocumentAssembler",
    "IndexAction",
    "encode_pair",
    "format_timestamp",
    "FactProviders",
    "GitFacts",
    "HostFacts",
    "no_facts",
    "BenchmarkParseError",
    "BenchmarkRecord",
    "Measured",
    "parse_extra_metrics",
    "parse_line",
    "BulkSink",
    "LineKind",
    "PassthroughSink",
    "RunContext",
    "classify_line",
    "run_stream",
]
