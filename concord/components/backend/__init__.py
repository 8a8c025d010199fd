"""
Backend package.
"""

from .backend_client_comp import (
    ANALYSIS_FREQUENCY_FIELDS,
    BackendClient,
    BackendPaths,
    HttpBackendClient,
    build_callback_payload,
    parse_composer,
    parse_join_record,
)

__all__ = [
    "ANALYSIS_FREQUENCY_FIELDS",
    "BackendClient",
    "BackendPaths",
    "HttpBackendClient",
    "build_callback_payload",
    "parse_composer",
    "parse_join_record",
]
