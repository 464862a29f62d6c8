"""
Command-line configuration for the indexer.

The configuration is parsed once into an immutable `IndexerConfig` and passed
explicitly to the store client, the document assembler and the driver.
Credentials and the store URL may also come from the environment:
  - GOBENCH_ES_URL
  - GOBENCH_ES_USERNAME
  - GOBENCH_ES_PASSWORD
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlsplit

from esbulk.client import DEFAULT_TIMEOUT_S


DEFAULT_INDEX = "gobench"


class ConfigError(ValueError):
    """Raised for invalid command-line values (usage errors)."""


class TagParseError(ConfigError):
    pass


@dataclass(frozen=True)
class IndexerConfig:
    es_url: str = ""
    index: str = DEFAULT_INDEX
    username: str = ""
    password: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    skip_tls_verify: bool = False
    tags: Dict[str, str] = field(default_factory=dict)
    target_version: Optional[str] = None
    verbose: bool = False

    @property
    def direct_send(self) -> bool:
        return bool(self.es_url)


def parse_tags(text: str) -> Dict[str, str]:
    """Parse `k=v,k2=v2`; empty entries are skipped, keys and values trimmed."""
    tags: Dict[str, str] = {}
    for entry in str(text or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep:
            raise TagParseError(f"invalid key-value pair {entry!r} in --tag: missing '='")
        tags[key.strip()] = value.strip()
    return tags


def validate_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(f"invalid Elasticsearch URL {url!r}")
    return url


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gobench",
        description="Convert `go test -bench` output on stdin into Elasticsearch bulk documents.",
    )
    ap.add_argument(
        "--es",
        default=None,
        help="Elasticsearch URL to index into, e.g. http://localhost:9200 (default: print NDJSON to stdout)",
    )
    ap.add_argument("--index", default=DEFAULT_INDEX, help="index into which the benchmarks are stored")
    ap.add_argument("--es-username", default=None, help="username for basic authentication")
    ap.add_argument("--es-password", default=None, help="password for basic authentication")
    ap.add_argument("--request-timeout", type=float, default=DEFAULT_TIMEOUT_S, help="HTTP timeout in seconds")
    ap.add_argument("--tls-skip-verify", action="store_true", help="skip TLS certificate verification")
    ap.add_argument("--tag", default="", help="comma-separated key=value pairs added to each document")
    ap.add_argument(
        "--target-version",
        default=None,
        help="stdout mode only: shape index actions for this Elasticsearch version (e.g. 7.17.0)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="be verbose")
    return ap


def config_from_args(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None) -> IndexerConfig:
    env = os.environ if env is None else env
    args = build_arg_parser().parse_args(argv)

    es_url = str(args.es if args.es is not None else env.get("GOBENCH_ES_URL", "")).strip()
    if es_url:
        validate_url(es_url)
    if args.request_timeout <= 0:
        raise ConfigError("--request-timeout must be positive")

    return IndexerConfig(
        es_url=es_url,
        index=str(args.index),
        username=str(args.es_username or env.get("GOBENCH_ES_USERNAME", "")),
        password=str(args.es_password or env.get("GOBENCH_ES_PASSWORD", "")),
        timeout_s=float(args.request_timeout),
        skip_tls_verify=bool(args.tls_skip_verify),
        tags=parse_tags(args.tag),
        target_version=(str(args.target_version) if args.target_version else None),
        verbose=bool(args.verbose),
    )


__all__ = [
    "DEFAULT_INDEX",
    "ConfigError",
    "TagParseError",
    "IndexerConfig",
    "parse_tags",
    "validate_url",
    "build_arg_parser",
    "config_from_args",
]
