"""Utility functions for stateflow."""

from stateflow.utils.identifiers import (
    format_timestamp,
    parse_int_id,
    utc_timestamp,
)
from stateflow.utils.pagination import MAX_PAGE_SIZE, Page
from stateflow.utils.request_fields import (
    RequestFields,
    extract_label,
    extract_request_fields,
    merge_request_fields,
)

__all__ = [
    "format_timestamp",
    "parse_int_id",
    "utc_timestamp",
    "MAX_PAGE_SIZE",
    "Page",
    "RequestFields",
    "extract_label",
    "extract_request_fields",
    "merge_request_fields",
]
