"""Pull the request-shape fields out of a node's opaque data blob.

The designer stores arbitrary attributes on a node. Only a handful of
top-level string fields matter at run time, so they are mirrored into
their own columns when the graph is saved. Extraction never fails: a
missing key, a non-string value or a blob that is not a JSON object all
yield empty strings.
"""

import json
from dataclasses import dataclass
from typing import Any

LABEL_KEY = "label"
REQUEST_PATH_KEY = "requestPath"
REQUEST_METHOD_KEY = "requestMethod"
REQUEST_DATA_KEY = "requestData"


@dataclass(frozen=True)
class RequestFields:
    """Denormalized request shape of a node."""

    request_path: str = ""
    request_method: str = ""
    request_data: str = ""


def _as_mapping(data: Any) -> dict:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return {}
    if isinstance(data, dict):
        return data
    return {}


def _string_field(mapping: dict, key: str) -> str:
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def extract_label(data: Any) -> str:
    """Return the top-level ``label`` of a node data blob, or ``""``."""
    return _string_field(_as_mapping(data), LABEL_KEY)


def extract_request_fields(data: Any) -> RequestFields:
    """Return requestPath/requestMethod/requestData of a node data blob."""
    mapping = _as_mapping(data)
    return RequestFields(
        request_path=_string_field(mapping, REQUEST_PATH_KEY),
        request_method=_string_field(mapping, REQUEST_METHOD_KEY),
        request_data=_string_field(mapping, REQUEST_DATA_KEY),
    )


def merge_request_fields(data: dict, fields: RequestFields) -> dict:
    """Copy non-empty request fields back into a node data dict (in place)."""
    if fields.request_path:
        data[REQUEST_PATH_KEY] = fields.request_path
    if fields.request_method:
        data[REQUEST_METHOD_KEY] = fields.request_method
    if fields.request_data:
        data[REQUEST_DATA_KEY] = fields.request_data
    return data
