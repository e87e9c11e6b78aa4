"""Tests for OTLP span -> Site24x7 span projection."""

import pytest
from opentelemetry.proto.trace.v1.trace_pb2 import Span, Status

from site24x7_exporter.models import FlatSpan
from site24x7_exporter.transform.spans import (
    ResourceContext,
    assemble_spans,
    count_spans,
    project_span,
    resolve_root_span_names,
    span_kind_name,
    status_code_name,
)
from tests.utils import (
    CHILD_SPAN_ID,
    OTHER_TRACE_ID,
    ROOT_SPAN_ID,
    START_NANOS,
    TRACE_ID,
    make_event,
    make_span,
    make_trace_request,
)


def project(span: Span, root_span_name: str = "") -> FlatSpan:
    resource = ResourceContext.from_attributes({"service.name": "checkout"})
    return project_span(span, resource, "test-scope", "1.0.0", root_span_name)


class TestRootSpans:
    """Root detection and root-name back references."""

    def test_single_root_span(self):
        """A parentless span is a root and names its own trace."""
        request = make_trace_request([make_span(name="root-op")])

        [span] = assemble_spans(request)

        assert span.is_root is True
        assert span.parent_id == ""
        assert span.root_span_id == "root-op"
        assert span.service_name == "checkout"

    def test_all_zero_parent_id_marks_root(self):
        """A parent id of zero bytes is the same as no parent."""
        request = make_trace_request([
            make_span(name="root-op", parent_span_id=bytes(8)),
            make_span(name="child-op", span_id=CHILD_SPAN_ID, parent_span_id=ROOT_SPAN_ID),
        ])

        root, child = assemble_spans(request)

        assert root.is_root is True
        assert root.parent_id == ""
        assert child.root_span_id == "root-op"
        assert resolve_root_span_names(request) == {TRACE_ID.hex(): "root-op"}

    def test_child_references_root_name(self):
        request = make_trace_request([
            make_span(name="root-op"),
            make_span(name="child-op", span_id=CHILD_SPAN_ID, parent_span_id=ROOT_SPAN_ID),
        ])

        root, child = assemble_spans(request)

        assert child.is_root is False
        assert child.parent_id == ROOT_SPAN_ID.hex()
        assert child.root_span_id == "root-op"
        assert root.root_span_id == "root-op"

    def test_child_before_root_in_batch(self):
        """The root can come after its children; resolution covers the whole batch."""
        request = make_trace_request([
            make_span(name="child-op", span_id=CHILD_SPAN_ID, parent_span_id=ROOT_SPAN_ID),
            make_span(name="root-op"),
        ])

        child, root = assemble_spans(request)

        assert child.root_span_id == "root-op"
        assert root.is_root is True

    def test_root_in_other_resource(self):
        first = make_trace_request([
            make_span(name="child-op", span_id=CHILD_SPAN_ID, parent_span_id=ROOT_SPAN_ID),
        ], resource_attributes={"service.name": "payments"})
        second = make_trace_request([make_span(name="root-op")])
        first.resource_spans.extend(second.resource_spans)

        child, _ = assemble_spans(first)

        assert child.service_name == "payments"
        assert child.root_span_id == "root-op"

    def test_trace_without_root_gets_empty_reference(self):
        request = make_trace_request([
            make_span(name="orphan", span_id=CHILD_SPAN_ID, parent_span_id=ROOT_SPAN_ID),
        ])

        [span] = assemble_spans(request)

        assert span.root_span_id == ""
        assert span.is_root is False

    def test_roots_are_per_trace(self):
        request = make_trace_request([
            make_span(name="root-a"),
            make_span(name="root-b", trace_id=OTHER_TRACE_ID, span_id=CHILD_SPAN_ID),
        ])

        assert resolve_root_span_names(request) == {
            TRACE_ID.hex(): "root-a",
            OTHER_TRACE_ID.hex(): "root-b",
        }

    def test_multiple_roots_earliest_start_wins(self):
        request = make_trace_request([
            make_span(name="late-root", start=START_NANOS + 10),
            make_span(name="early-root", span_id=CHILD_SPAN_ID, start=START_NANOS),
        ])

        assert resolve_root_span_names(request) == {TRACE_ID.hex(): "early-root"}

    def test_multiple_roots_same_start_first_wins(self):
        request = make_trace_request([
            make_span(name="first-root"),
            make_span(name="second-root", span_id=CHILD_SPAN_ID),
        ])

        assert resolve_root_span_names(request) == {TRACE_ID.hex(): "first-root"}


class TestErrorFlag:

    @pytest.mark.parametrize(
        "code, expected",
        [
            (Status.STATUS_CODE_ERROR, True),
            (Status.STATUS_CODE_OK, False),
            (Status.STATUS_CODE_UNSET, False),
            (7, False),
        ],
    )
    def test_error_only_for_error_status(self, code, expected):
        span = project(make_span(status_code=code))

        assert span.has_error is expected

    def test_status_code_names(self):
        assert status_code_name(Status.STATUS_CODE_ERROR) == "STATUS_CODE_ERROR"
        assert status_code_name(7) == "STATUS_CODE_7"


class TestDuration:

    def test_duration_in_milliseconds(self):
        span = project(make_span(start=START_NANOS, end=START_NANOS + 1_500_000_000))

        assert span.start_time == START_NANOS
        assert span.end_time == START_NANOS + 1_500_000_000
        assert span.duration_nanos == 1_500_000_000
        assert span.duration == 1500.0

    def test_sub_millisecond_duration_not_truncated(self):
        span = project(make_span(start=START_NANOS, end=START_NANOS + 250_000))

        assert span.duration == 0.25

    def test_timestamp_is_start_in_milliseconds(self):
        span = project(make_span(start=START_NANOS))

        assert span.timestamp == START_NANOS // 1_000_000


@pytest.mark.parametrize(
    "kind, expected",
    [
        (Span.SPAN_KIND_UNSPECIFIED, "UNSPECIFIED"),
        (Span.SPAN_KIND_INTERNAL, "INTERNAL"),
        (Span.SPAN_KIND_SERVER, "SERVER"),
        (Span.SPAN_KIND_CLIENT, "CLIENT"),
        (Span.SPAN_KIND_PRODUCER, "PRODUCER"),
        (Span.SPAN_KIND_CONSUMER, "CONSUMER"),
        (42, "UNSPECIFIED"),
    ],
)
def test_span_kind_names(kind, expected):
    assert span_kind_name(kind) == expected


def test_exception_events_collected():
    """Exception fields are gathered per field; events lacking a field add nothing to it."""
    span = project(make_span(events=[
        make_event("exception", {
            "exception.message": "division by zero",
            "exception.type": "ZeroDivisionError",
            "exception.stacktrace": "Traceback ...",
        }),
        make_event("exception", {"exception.message": "second failure"}),
        make_event("cache-miss", {"key": "user:1"}),
        make_event("exception", {"exception.type": 500}),
    ]))

    assert span.exception_messages == ["division by zero", "second failure"]
    assert span.exception_types == ["ZeroDivisionError"]
    assert span.exception_stacktraces == ["Traceback ..."]
    assert [event.name for event in span.events] == ["exception", "exception", "cache-miss", "exception"]
    assert span.events[0].timestamp == START_NANOS // 1_000_000


def test_links_projected():
    link = Span.Link(trace_id=OTHER_TRACE_ID, span_id=CHILD_SPAN_ID)

    span = project(make_span(links=[link]))

    assert len(span.links) == 1
    assert span.links[0].trace_id == OTHER_TRACE_ID.hex()
    assert span.links[0].span_id == CHILD_SPAN_ID.hex()


def test_named_fields_extracted():
    span = project(make_span(
        kind=Span.SPAN_KIND_CLIENT,
        attributes={
            "net.peer.ip": "10.0.0.5",
            "net.peer.name": "db.local",
            "net.peer.port": 5432,
            "thread.id": 17,
            "thread.name": "worker-1",
            "db.system": "postgresql",
            "db.statement": "SELECT 1",
            "db.name": "orders",
            "db.connection_string": "postgresql://db.local:5432",
            "http.url": "https://shop.example/cart",
            "http.method": "POST",
            "http.status_code": 201,
        },
    ))

    assert span.host_ip == "10.0.0.5"
    assert span.host_name == "db.local"
    assert span.host_port == 5432
    assert span.thread_id == 17
    assert span.thread_name == "worker-1"
    assert span.db_system == "postgresql"
    assert span.db_statement == "SELECT 1"
    assert span.db_name == "orders"
    assert span.db_connection_string == "postgresql://db.local:5432"
    assert span.http_url == "https://shop.example/cart"
    assert span.http_method == "POST"
    assert span.http_status_code == 201
    assert span.kind == "CLIENT"


def test_wrong_typed_attributes_default_to_zero_values():
    span = project(make_span(attributes={
        "net.peer.port": "5432",
        "thread.id": 1.5,
        "db.system": 7,
        "http.status_code": "200",
        "http.method": ["GET"],
    }))

    assert span.host_port == 0
    assert span.thread_id == 0
    assert span.db_system == ""
    assert span.http_status_code == 0
    assert span.http_method == ""
    # Still carried verbatim
    assert {p.key: p.value for p in span.custom_params}["net.peer.port"] == "5432"


def test_custom_params_hold_every_attribute_in_order():
    span = project(make_span(attributes={"http.method": "GET", "user.id": "u-1", "retries": 2}))

    assert [(p.key, p.value) for p in span.custom_params] == [
        ("http.method", "GET"),
        ("user.id", "u-1"),
        ("retries", 2),
    ]
    assert span.http_method == "GET"


def test_resource_and_scope_context():
    request = make_trace_request(
        [make_span()],
        resource_attributes={
            "service.name": "checkout",
            "telemetry.sdk.name": "opentelemetry",
            "telemetry.sdk.language": "python",
        },
        scope_name="opentelemetry.instrumentation.flask",
        scope_version="0.45b0",
    )

    [span] = assemble_spans(request)

    assert span.sdk_name == "opentelemetry"
    assert span.sdk_language == "python"
    assert span.instrumentation_name == "opentelemetry.instrumentation.flask"
    assert span.instrumentation_version == "0.45b0"
    assert span.resource_attributes["telemetry.sdk.language"] == "python"


def test_missing_service_name_is_empty():
    [span] = assemble_spans(make_trace_request([make_span()], resource_attributes={}))

    assert span.service_name == ""


def test_assembly_preserves_traversal_order():
    request = make_trace_request([make_span(name="a"), make_span(name="b")])
    request.resource_spans[0].scope_spans.add().spans.extend([make_span(name="c")])
    request.resource_spans.extend(make_trace_request([make_span(name="d")]).resource_spans)

    spans = assemble_spans(request)

    assert [s.name for s in spans] == ["a", "b", "c", "d"]
    assert count_spans(request) == 4


def test_empty_request():
    request = make_trace_request([])

    assert assemble_spans(request) == []
    assert count_spans(request) == 0


def test_wire_names():
    span = project(make_span(name="root-op", status_code=Status.STATUS_CODE_ERROR), root_span_name="root-op")

    wire = span.model_dump(by_alias=True)

    assert wire["_zl_timestamp"] == START_NANOS // 1_000_000
    assert wire["s247agentuid"] == "otel-s247exporter"
    assert wire["root_span_id"] == "root-op"
    assert wire["span_kind"] == "INTERNAL"
    assert wire["root"] is True
    assert wire["error"] is True
    assert wire["service_name"] == "checkout"
    assert "span_attributes" not in wire
    assert "events" not in wire
    assert "status_code" not in wire
