"""Typed access to OTLP attribute maps.

OTLP attributes arrive as a list of ``KeyValue`` messages whose values are
``AnyValue`` tagged unions:

    [KeyValue(key="net.peer.port", value=AnyValue(int_value=5432)), ...]

The helpers here unwrap those into plain Python values and read individual
keys with a fixed expected type. Reads never raise: a missing key and a key
holding the wrong type both come back as ``None`` so a single malformed
attribute cannot fail a whole batch.
"""

import base64
from typing import Any, Iterable, Mapping

from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue


def hex_id(raw: bytes) -> str:
    """Render a binary trace/span ID as lowercase hex.

    Args:
        raw: 16-byte trace ID or 8-byte span ID. Empty or all zeros for a
            missing ID.

    Returns:
        Hex string, or "" when the ID is empty or all zero bytes.
    """
    return raw.hex() if any(raw) else ""


def any_value_to_python(value: AnyValue) -> Any:
    """Extract the actual value from an OTLP ``AnyValue`` wrapper.

    Arrays become lists and key-value lists become dicts, recursively.
    Bytes are base64 encoded so the result is always JSON serializable.

    Args:
        value: OTLP attribute value message

    Returns:
        The unwrapped value, or None when no variant is set
    """
    kind = value.WhichOneof("value")
    if kind == "string_value":
        return value.string_value
    elif kind == "bool_value":
        return value.bool_value
    elif kind == "int_value":
        return value.int_value
    elif kind == "double_value":
        return value.double_value
    elif kind == "array_value":
        return [any_value_to_python(v) for v in value.array_value.values]
    elif kind == "kvlist_value":
        return attributes_to_dict(value.kvlist_value.values)
    elif kind == "bytes_value":
        return base64.b64encode(value.bytes_value).decode("ascii")
    else:
        return None


def attributes_to_dict(attributes: Iterable[KeyValue]) -> dict[str, Any]:
    """Convert an OTLP attribute list to a simple dict.

    Insertion order follows the source list; a repeated key keeps its last value.

    Args:
        attributes: Repeated ``KeyValue`` field

    Returns:
        Dict mapping keys to unwrapped values
    """
    return {kv.key: any_value_to_python(kv.value) for kv in attributes}


def get_str(attrs: Mapping[str, Any], key: str) -> str | None:
    """Return ``attrs[key]`` if it is a string, else None."""
    value = attrs.get(key)
    return value if isinstance(value, str) else None


def get_int(attrs: Mapping[str, Any], key: str) -> int | None:
    """Return ``attrs[key]`` if it is an integer, else None.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    """
    value = attrs.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
