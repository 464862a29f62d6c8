from .client import DEFAULT_TIMEOUT_S, NDJSON_CONTENT_TYPE, StoreClient, check_response
from .compat import LEGACY_TYPE_NAME, CompatPolicy, StoreVersion, parse_version
from .errors import (
    RESOURCE_ALREADY_EXISTS,
    BulkItemError,
    StoreClientError,
    StoreError,
    VersionError,
)
from .mapping import EXTRA_METRICS_TEMPLATE, FIELD_PROPERTIES, mapping_body

__all__ = [
    "DEFAULT_TIMEOUT_S",
    "NDJSON_CONTENT_TYPE",
    "StoreClient",
    "check_response",
    "LEGACY_TYPE_NAME",
    "CompatPolicy",
    "StoreVersion",
    "parse_version",
    "RESOURCE_ALREADY_EXISTS",
    "BulkItemError",
    "StoreClientError",
    "StoreError",
    "VersionError",
    "EXTRA_METRICS_TEMPLATE",
    "FIELD_PROPERTIES",
    "mapping_body",
]
