"""Test utilities for Site24x7 exporter tests."""

import gzip
import json
import threading
from typing import Any, Callable

import httpx
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.common.v1.common_pb2 import (
    AnyValue,
    ArrayValue,
    InstrumentationScope,
    KeyValue,
    KeyValueList,
)
from opentelemetry.proto.logs.v1.logs_pb2 import LogRecord, ResourceLogs, ScopeLogs
from opentelemetry.proto.resource.v1.resource_pb2 import Resource
from opentelemetry.proto.trace.v1.trace_pb2 import ResourceSpans, ScopeSpans, Span, Status

TRACE_ID = bytes.fromhex("0123456789abcdef0123456789abcdef")
OTHER_TRACE_ID = bytes.fromhex("aaaabbbbccccddddeeeeffffaaaabbbb")
ROOT_SPAN_ID = bytes.fromhex("1111222233334444")
CHILD_SPAN_ID = bytes.fromhex("5555666677778888")

START_NANOS = 1700000000000000000


def any_value(value: Any) -> AnyValue:
    """Wrap a Python value in an OTLP AnyValue."""
    if isinstance(value, bool):
        return AnyValue(bool_value=value)
    if isinstance(value, int):
        return AnyValue(int_value=value)
    if isinstance(value, float):
        return AnyValue(double_value=value)
    if isinstance(value, str):
        return AnyValue(string_value=value)
    if isinstance(value, bytes):
        return AnyValue(bytes_value=value)
    if isinstance(value, (list, tuple)):
        return AnyValue(array_value=ArrayValue(values=[any_value(v) for v in value]))
    if isinstance(value, dict):
        return AnyValue(kvlist_value=KeyValueList(values=key_values(value)))
    raise TypeError(f"Unsupported attribute value: {value!r}")


def key_values(attributes: dict[str, Any] | None) -> list[KeyValue]:
    """Convert a dict to a list of OTLP KeyValue messages."""
    return [KeyValue(key=k, value=any_value(v)) for k, v in (attributes or {}).items()]


def make_span(
    name: str = "test-span",
    trace_id: bytes = TRACE_ID,
    span_id: bytes = ROOT_SPAN_ID,
    parent_span_id: bytes = b"",
    start: int = START_NANOS,
    end: int = START_NANOS + 1_000_000_000,
    kind: int = Span.SPAN_KIND_INTERNAL,
    status_code: int = Status.STATUS_CODE_UNSET,
    attributes: dict[str, Any] | None = None,
    events: list[Span.Event] | None = None,
    links: list[Span.Link] | None = None,
) -> Span:
    """Create an OTLP span."""
    return Span(
        trace_id=trace_id,
        span_id=span_id,
        parent_span_id=parent_span_id,
        name=name,
        kind=kind,
        start_time_unix_nano=start,
        end_time_unix_nano=end,
        status=Status(code=status_code),
        attributes=key_values(attributes),
        events=events or [],
        links=links or [],
    )


def make_event(name: str, attributes: dict[str, Any] | None = None, time: int = START_NANOS) -> Span.Event:
    return Span.Event(name=name, time_unix_nano=time, attributes=key_values(attributes))


def make_trace_request(
    spans: list[Span],
    resource_attributes: dict[str, Any] | None = None,
    scope_name: str = "test-scope",
    scope_version: str = "1.0.0",
) -> ExportTraceServiceRequest:
    """Create a request with one resource and one scope holding ``spans``."""
    if resource_attributes is None:
        resource_attributes = {"service.name": "checkout"}
    return ExportTraceServiceRequest(
        resource_spans=[
            ResourceSpans(
                resource=Resource(attributes=key_values(resource_attributes)),
                scope_spans=[
                    ScopeSpans(
                        scope=InstrumentationScope(name=scope_name, version=scope_version),
                        spans=spans,
                    )
                ],
            )
        ]
    )


def make_log_record(
    body: Any = None,
    trace_id: bytes = b"",
    span_id: bytes = b"",
    event_name: str = "",
    severity_text: str = "INFO",
    time: int = START_NANOS,
    attributes: dict[str, Any] | None = None,
) -> LogRecord:
    """Create an OTLP log record. ``body=None`` leaves the body unset."""
    record = LogRecord(
        time_unix_nano=time,
        severity_text=severity_text,
        event_name=event_name,
        trace_id=trace_id,
        span_id=span_id,
        attributes=key_values(attributes),
    )
    if body is not None:
        record.body.CopyFrom(any_value(body))
    return record


def make_logs_request(
    records: list[LogRecord],
    resource_attributes: dict[str, Any] | None = None,
) -> ExportLogsServiceRequest:
    if resource_attributes is None:
        resource_attributes = {"service.name": "checkout"}
    return ExportLogsServiceRequest(
        resource_logs=[
            ResourceLogs(
                resource=Resource(attributes=key_values(resource_attributes)),
                scope_logs=[ScopeLogs(log_records=records)],
            )
        ]
    )


class RecordingEndpoint:
    """Fake Site24x7 endpoint capturing every request it receives."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self._handler = handler
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return httpx.Response(200, headers={"x-uploadid": "upload-1"})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def payload(self, index: int = -1) -> list[dict]:
        """Decoded JSON body of a captured request."""
        request = self.requests[index]
        body = request.content
        if request.headers.get("Content-Encoding") == "gzip":
            body = gzip.decompress(body)
        return json.loads(body)


def reset_site24x7() -> None:
    """Reset the global client between tests."""
    import site24x7_exporter

    if site24x7_exporter.get_client():
        site24x7_exporter.shutdown()
    site24x7_exporter._client = None
