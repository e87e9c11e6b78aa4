"""Transform OTLP trace batches to Site24x7 APM spans.

Converts an ``ExportTraceServiceRequest`` into the flat span records expected
by the Site24x7 AppLogs upload API.

OTLP structure:
    ExportTraceServiceRequest
      resource_spans[]
        resource.attributes[]      service.name, telemetry.sdk.*
        scope_spans[]
          scope.name / scope.version
          spans[]
            trace_id, span_id, parent_span_id (empty for the root span)
            name, kind, start/end_time_unix_nano, status
            attributes[], events[], links[]

Every output span carries the name of its trace's root span. The root can
appear anywhere in the batch, so root names are resolved over the whole
request before any span is projected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.trace.v1.trace_pb2 import Span, Status

from site24x7_exporter.attributes import attributes_to_dict, get_int, get_str, hex_id
from site24x7_exporter.constants import SemanticAttributes
from site24x7_exporter.models import CustomParam, FlatSpan, SpanEvent, SpanLink

logger = logging.getLogger(__name__)

NANOS_PER_MILLI = 1_000_000

SPAN_KIND_NAMES: dict[int, str] = {
    Span.SPAN_KIND_UNSPECIFIED: "UNSPECIFIED",
    Span.SPAN_KIND_INTERNAL: "INTERNAL",
    Span.SPAN_KIND_SERVER: "SERVER",
    Span.SPAN_KIND_CLIENT: "CLIENT",
    Span.SPAN_KIND_PRODUCER: "PRODUCER",
    Span.SPAN_KIND_CONSUMER: "CONSUMER",
}


@dataclass(frozen=True)
class ResourceContext:
    """Resource-level fields shared by every span of a ``ResourceSpans``."""

    attributes: dict[str, Any] = field(default_factory=dict)
    service_name: str = ""
    sdk_name: str = ""
    sdk_language: str = ""

    @classmethod
    def from_attributes(cls, attributes: dict[str, Any]) -> "ResourceContext":
        return cls(
            attributes=attributes,
            service_name=get_str(attributes, SemanticAttributes.SERVICE_NAME) or "",
            sdk_name=get_str(attributes, SemanticAttributes.TELEMETRY_SDK_NAME) or "",
            sdk_language=get_str(attributes, SemanticAttributes.TELEMETRY_SDK_LANGUAGE) or "",
        )


def span_kind_name(kind: int) -> str:
    """Map an OTLP span kind to its display name; unknown kinds are UNSPECIFIED."""
    return SPAN_KIND_NAMES.get(kind, "UNSPECIFIED")


def status_code_name(code: int) -> str:
    """Return the OTLP enum name for a status code, e.g. ``STATUS_CODE_ERROR``."""
    try:
        return Status.StatusCode.Name(code)
    except ValueError:
        return f"STATUS_CODE_{code}"


def iter_spans(request: ExportTraceServiceRequest) -> Iterator[Span]:
    """Yield every span of the request in resource -> scope -> span order."""
    for resource_spans in request.resource_spans:
        for scope_spans in resource_spans.scope_spans:
            yield from scope_spans.spans


def count_spans(request: ExportTraceServiceRequest) -> int:
    """Count the spans in a request."""
    return sum(
        len(scope_spans.spans)
        for resource_spans in request.resource_spans
        for scope_spans in resource_spans.scope_spans
    )


def resolve_root_span_names(request: ExportTraceServiceRequest) -> dict[str, str]:
    """Map each trace ID to the name of its root span.

    A root span is a span whose parent span ID is empty or all zeros. When a
    trace has more than one root in the batch, the one with the earliest start
    time wins and ties go to the first one in traversal order.

    Args:
        request: The complete trace batch

    Returns:
        Dict of hex trace ID -> root span name. Traces without a root in this
        batch are absent.
    """
    roots: dict[str, tuple[int, str]] = {}
    for span in iter_spans(request):
        if any(span.parent_span_id):
            continue
        trace_id = hex_id(span.trace_id)
        current = roots.get(trace_id)
        if current is None:
            roots[trace_id] = (span.start_time_unix_nano, span.name)
        elif span.start_time_unix_nano < current[0]:
            logger.debug(f"Trace {trace_id} has several root spans, keeping '{span.name}'")
            roots[trace_id] = (span.start_time_unix_nano, span.name)
    return {trace_id: name for trace_id, (_, name) in roots.items()}


def _exception_fields(events: list[SpanEvent]) -> tuple[list[str], list[str], list[str]]:
    messages: list[str] = []
    stacktraces: list[str] = []
    types: list[str] = []
    for event in events:
        message = get_str(event.attributes, SemanticAttributes.EXCEPTION_MESSAGE)
        if message is not None:
            messages.append(message)
        stacktrace = get_str(event.attributes, SemanticAttributes.EXCEPTION_STACKTRACE)
        if stacktrace is not None:
            stacktraces.append(stacktrace)
        exception_type = get_str(event.attributes, SemanticAttributes.EXCEPTION_TYPE)
        if exception_type is not None:
            types.append(exception_type)
    return messages, stacktraces, types


def project_span(
    span: Span,
    resource: ResourceContext,
    scope_name: str,
    scope_version: str,
    root_span_name: str,
) -> FlatSpan:
    """Convert one OTLP span into a Site24x7 span.

    Named fields (host, thread, db, http) are denormalized copies of span
    attributes; every attribute is also carried in ``custom_params``. Missing
    or wrongly typed attributes leave their field at the zero value.

    Args:
        span: The OTLP span
        resource: Fields of the enclosing resource
        scope_name: Instrumentation scope name
        scope_version: Instrumentation scope version
        root_span_name: Name of this span's trace root, "" if unknown

    Returns:
        The flat span record
    """
    attrs = attributes_to_dict(span.attributes)
    start_time = span.start_time_unix_nano
    end_time = span.end_time_unix_nano

    events = [
        SpanEvent(
            timestamp=event.time_unix_nano // NANOS_PER_MILLI,
            name=event.name,
            attributes=attributes_to_dict(event.attributes),
        )
        for event in span.events
    ]
    exception_messages, exception_stacktraces, exception_types = _exception_fields(events)

    links = [
        SpanLink(span_id=hex_id(link.span_id), trace_id=hex_id(link.trace_id))
        for link in span.links
    ]

    parent_id = hex_id(span.parent_span_id)

    return FlatSpan(
        timestamp=start_time // NANOS_PER_MILLI,
        trace_id=hex_id(span.trace_id),
        span_id=hex_id(span.span_id),
        parent_id=parent_id,
        root_span_id=root_span_name,
        name=span.name,
        kind=span_kind_name(span.kind),
        start_time=start_time,
        end_time=end_time,
        # Float division so sub-millisecond spans keep their duration
        duration=(end_time - start_time) / NANOS_PER_MILLI,
        service_name=resource.service_name,
        exception_messages=exception_messages,
        exception_stacktraces=exception_stacktraces,
        exception_types=exception_types,
        instrumentation_name=scope_name,
        instrumentation_version=scope_version,
        sdk_language=resource.sdk_language,
        sdk_name=resource.sdk_name,
        host_ip=get_str(attrs, SemanticAttributes.NET_PEER_IP) or "",
        host_name=get_str(attrs, SemanticAttributes.NET_PEER_NAME) or "",
        host_port=get_int(attrs, SemanticAttributes.NET_PEER_PORT) or 0,
        thread_id=get_int(attrs, SemanticAttributes.THREAD_ID) or 0,
        thread_name=get_str(attrs, SemanticAttributes.THREAD_NAME) or "",
        db_system=get_str(attrs, SemanticAttributes.DB_SYSTEM) or "",
        db_statement=get_str(attrs, SemanticAttributes.DB_STATEMENT) or "",
        db_name=get_str(attrs, SemanticAttributes.DB_NAME) or "",
        db_connection_string=get_str(attrs, SemanticAttributes.DB_CONNECTION_STRING) or "",
        http_url=get_str(attrs, SemanticAttributes.HTTP_URL) or "",
        http_method=get_str(attrs, SemanticAttributes.HTTP_METHOD) or "",
        http_status_code=get_int(attrs, SemanticAttributes.HTTP_STATUS_CODE) or 0,
        is_root=parent_id == "",
        has_error=span.status.code == Status.STATUS_CODE_ERROR,
        custom_params=[CustomParam(key=key, value=value) for key, value in attrs.items()],
        resource_attributes=resource.attributes,
        span_attributes=attrs,
        trace_state=span.trace_state,
        events=events,
        links=links,
        status_code=status_code_name(span.status.code),
        status_message=span.status.message,
        dropped_attributes_count=span.dropped_attributes_count,
        dropped_links_count=span.dropped_links_count,
        dropped_events_count=span.dropped_events_count,
    )


def assemble_spans(request: ExportTraceServiceRequest) -> list[FlatSpan]:
    """Transform a whole OTLP trace batch into Site24x7 spans.

    Output order is the request's resource -> scope -> span order.

    Args:
        request: Decoded OTLP trace batch

    Returns:
        One flat span per input span
    """
    root_span_names = resolve_root_span_names(request)
    spans: list[FlatSpan] = []

    for resource_spans in request.resource_spans:
        resource = ResourceContext.from_attributes(
            attributes_to_dict(resource_spans.resource.attributes)
        )
        for scope_spans in resource_spans.scope_spans:
            scope_name = scope_spans.scope.name
            scope_version = scope_spans.scope.version
            for span in scope_spans.spans:
                root_span_name = root_span_names.get(hex_id(span.trace_id), "")
                spans.append(
                    project_span(span, resource, scope_name, scope_version, root_span_name)
                )

    logger.debug(f"Transformed {len(spans)} spans across {len(root_span_names)} rooted traces")
    return spans
