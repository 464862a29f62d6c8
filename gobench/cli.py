"""
gobench: index `go test -bench` output into Elasticsearch.

Typical usage:
  go test -run=NONE -bench=. ./... | gobench --es http://localhost:9200 --tag branch=main
  go test -run=NONE -bench=. ./... | gobench > bulk.ndjson
"""

from __future__ import annotations

import io
import sys
from typing import Any, List, NoReturn, Optional, TextIO

from esbulk.client import StoreClient
from esbulk.compat import CompatPolicy
from esbulk.errors import StoreClientError, VersionError
from gobench.config import ConfigError, IndexerConfig, config_from_args
from gobench.document import DocumentAssembler
from gobench.facts import FactProviders
from gobench.stream import BulkSink, PassthroughSink, Sink, run_stream


def _log(msg: str) -> None:
    print(str(msg), file=sys.stderr, flush=True)


def _fatal(msg: str, code: int = 1) -> NoReturn:
    _log(f"error: {msg}")
    raise SystemExit(code)


def _stdin_text(stream: TextIO) -> TextIO:
    # Undecodable bytes become U+FFFD so a stray byte on a noise line is dropped with it.
    buf = getattr(stream, "buffer", None)
    if buf is None:
        return stream
    return io.TextIOWrapper(buf, encoding="utf-8", errors="replace")


def make_client(cfg: IndexerConfig, *, session: Any = None) -> StoreClient:
    return StoreClient(
        cfg.es_url,
        index=cfg.index,
        username=cfg.username or None,
        password=cfg.password or None,
        timeout=cfg.timeout_s,
        verify=not cfg.skip_tls_verify,
        verbose=cfg.verbose,
        session=session,
    )


def prepare_store(client: StoreClient) -> CompatPolicy:
    """Fetch the store version and ensure the index mapping exists."""
    version = client.get_version()
    policy = CompatPolicy.for_version(version)
    if client.verbose:
        _log(f"store version {version}: {policy}")
    client.create_index(policy)
    return policy


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    facts: Optional[FactProviders] = None,
    session: Any = None,
) -> None:
    try:
        cfg = config_from_args(argv)
    except ConfigError as e:
        _fatal(str(e), code=2)

    stdin = stdin if stdin is not None else _stdin_text(sys.stdin)
    stdout = stdout if stdout is not None else sys.stdout

    sink: Sink
    if cfg.direct_send:
        client = make_client(cfg, session=session)
        try:
            policy = prepare_store(client)
        except StoreClientError as e:
            _fatal(f"error creating/updating mapping: {e}")
        sink = BulkSink(client, echo=stdout if cfg.verbose else None)
    else:
        try:
            policy = CompatPolicy.for_version_string(cfg.target_version)
        except VersionError as e:
            _fatal(str(e), code=2)
        sink = PassthroughSink(stdout)

    assembler = DocumentAssembler(cfg.index, policy=policy, tags=cfg.tags, facts=facts)
    try:
        n = run_stream(stdin, assembler, sink)
    except StoreClientError as e:
        _fatal(f"error executing bulk updates: {e}")
    except (OSError, UnicodeDecodeError) as e:
        _fatal(f"error reading input: {e}")
    except ValueError as e:
        _fatal(f"error encoding document: {e}")

    if cfg.verbose:
        target = f"{cfg.es_url}/{cfg.index}" if cfg.direct_send else "stdout"
        _log(f"wrote {n} benchmark document(s) to {target}")


if __name__ == "__main__":
    main()
