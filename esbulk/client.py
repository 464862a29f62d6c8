"""
Thin `requests` wrapper around the three store endpoints the indexer uses:

  GET  /                 -> server version
  PUT  /<index>          -> create index with the benchmark mapping
  POST /_bulk            -> NDJSON bulk indexing

The session is injectable so tests can drive the client without a network.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional, Tuple

import requests

from esbulk.compat import CompatPolicy, StoreVersion, parse_version
from esbulk.errors import (
    RESOURCE_ALREADY_EXISTS,
    BulkItemError,
    StoreClientError,
    StoreError,
    VersionError,
)
from esbulk.mapping import mapping_body


DEFAULT_TIMEOUT_S = 600
NDJSON_CONTENT_TYPE = "application/x-ndjson"


def _log(msg: str) -> None:
    print(str(msg), file=sys.stderr, flush=True)


def check_response(resp: Any) -> Dict[str, Any]:
    """
    Decode a store response once and map failures to typed errors.

    2xx: returns the decoded JSON object ({} for an empty body).
    otherwise: raises StoreError when the body carries `error.type`, else
    StoreClientError naming the HTTP status.
    """
    status = int(resp.status_code)
    text = resp.text or ""
    body: Any = None
    if text.strip():
        try:
            body = resp.json()
        except ValueError:
            body = None
    else:
        body = {}

    if 200 <= status < 300:
        if not isinstance(body, dict):
            raise StoreClientError(f"invalid JSON response ({status}): {text[:160]}")
        return body

    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("type"):
        raise StoreError(str(err.get("type")), str(err.get("reason") or ""), status=status)
    reason = str(getattr(resp, "reason", "") or "").strip()
    raise StoreClientError(f"{status} {reason}".strip())


def _first_bulk_failure(body: Dict[str, Any]) -> Tuple[int, str, str]:
    failed = 0
    kind, reason = "unknown", ""
    for item in body.get("items") or []:
        if not isinstance(item, dict):
            continue
        for result in item.values():
            err = result.get("error") if isinstance(result, dict) else None
            if err is None:
                continue
            if failed == 0:
                if isinstance(err, dict):
                    kind = str(err.get("type") or kind)
                    reason = str(err.get("reason") or "")
                else:
                    reason = str(err)
            failed += 1
    return failed, kind, reason


class StoreClient:
    def __init__(
        self,
        base_url: str,
        *,
        index: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        verify: bool = True,
        verbose: bool = False,
        session: Any = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.index = str(index)
        self.auth = (username or "", password or "") if (username or password) else None
        self.timeout = float(timeout)
        self.verify = bool(verify)
        self.verbose = bool(verbose)
        self.session = session if session is not None else requests.Session()

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            return self.session.request(
                method,
                url,
                auth=self.auth,
                timeout=self.timeout,
                verify=self.verify,
                **kwargs,
            )
        except requests.Timeout as e:
            raise StoreClientError(f"{method} {url}: timeout after {self.timeout:g}s") from e
        except requests.RequestException as e:
            raise StoreClientError(f"{method} {url}: request failed: {e}") from e

    def get_version(self) -> StoreVersion:
        try:
            resp = self._request("GET", self.base_url)
        except StoreClientError as e:
            raise VersionError(f"cannot determine store version: {e}") from e
        if resp.status_code != 200:
            raise VersionError(f"received unexpected {resp.status_code} status code")
        try:
            data = resp.json()
        except ValueError as e:
            raise VersionError(f"invalid version response: {e}") from e
        version = data.get("version") if isinstance(data, dict) else None
        number = version.get("number") if isinstance(version, dict) else None
        if not isinstance(number, str):
            raise VersionError("version.number missing from store response")
        return parse_version(number)

    def create_index(self, policy: CompatPolicy) -> bool:
        """
        Create the index with the benchmark mapping.

        Returns False when the index already exists (not an error).
        """
        url = f"{self.base_url}/{self.index}"
        resp = self._request(
            "PUT",
            url,
            data=json.dumps(mapping_body(policy)).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        try:
            body = check_response(resp)
        except StoreError as e:
            if e.kind == RESOURCE_ALREADY_EXISTS:
                if self.verbose:
                    _log(f"index {self.index!r} already exists")
                return False
            raise
        if self.verbose:
            _log(json.dumps(body, indent=2, sort_keys=True))
        return True

    def bulk(self, payload: str) -> Dict[str, Any]:
        url = f"{self.base_url}/_bulk"
        resp = self._request(
            "POST",
            url,
            data=payload.encode("utf-8"),
            headers={"Content-Type": NDJSON_CONTENT_TYPE},
        )
        body = check_response(resp)
        if self.verbose:
            _log(json.dumps(body, indent=2, sort_keys=True))
        if body.get("errors"):
            failed, kind, reason = _first_bulk_failure(body)
            raise BulkItemError(max(1, failed), kind, reason)
        return body


__all__ = ["DEFAULT_TIMEOUT_S", "NDJSON_CONTENT_TYPE", "StoreClient", "check_response"]
