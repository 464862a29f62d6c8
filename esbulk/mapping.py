"""
Index mapping for benchmark documents.
"""

from __future__ import annotations

from typing import Any, Dict

from esbulk.compat import LEGACY_TYPE_NAME, CompatPolicy


FIELD_PROPERTIES: Dict[str, Any] = {
    "executed_at": {"type": "date"},
    "name": {"type": "keyword"},
    "iterations": {"type": "long"},
    "pkg": {"type": "keyword"},
    "hostname": {"type": "keyword"},
    "go_version": {"type": "keyword"},
    "os_version": {"type": "keyword"},
    "goos": {"type": "keyword"},
    "goarch": {"type": "keyword"},
    "ns_per_op": {"type": "double"},
    "mb_per_s": {"type": "double"},
    "alloced_bytes_per_op": {"type": "long"},
    "allocs_per_op": {"type": "long"},
    "git": {
        "properties": {
            "commit": {"type": "text"},
            "subject": {"type": "text"},
            "committer": {
                "properties": {
                    "date": {"type": "date"},
                },
            },
        },
    },
}

EXTRA_METRICS_TEMPLATE: Dict[str, Any] = {
    "extra_metrics": {
        "path_match": "extra_metrics.*",
        "mapping": {"type": "float"},
    },
}


def mapping_body(policy: CompatPolicy) -> Dict[str, Any]:
    """Request body for `PUT /<index>`."""
    mappings: Dict[str, Any] = {
        "properties": FIELD_PROPERTIES,
        "dynamic_templates": [EXTRA_METRICS_TEMPLATE],
    }
    if policy.mapping_type_name:
        mappings = {LEGACY_TYPE_NAME: mappings}
    return {"mappings": mappings}


__all__ = ["FIELD_PROPERTIES", "EXTRA_METRICS_TEMPLATE", "mapping_body"]
