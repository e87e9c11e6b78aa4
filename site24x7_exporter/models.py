"""Flat Site24x7 record schemas.

Each model is one denormalized upload record. Field names are Pythonic; the
aliases are the AppLogs wire names and are what ``dump_json(by_alias=True)``
emits. Fields marked ``exclude=True`` are kept on the record for callers and
tests but are not part of the upload payload.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from site24x7_exporter.constants import AGENT_UID


class _FlatRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CustomParam(_FlatRecord):
    """One span attribute carried verbatim."""

    key: str
    value: Any


class SpanEvent(_FlatRecord):
    """Span event, timestamp in epoch milliseconds."""

    timestamp: int
    name: str
    attributes: dict[str, Any] = Field(default_factory=dict, alias="eventAttributes")


class SpanLink(_FlatRecord):
    """Link to a span in another (or the same) trace."""

    span_id: str = Field(alias="link.spanID")
    trace_id: str = Field(alias="link.traceID")


class FlatSpan(_FlatRecord):
    """Single span in Site24x7 APM format."""

    timestamp: int = Field(alias="_zl_timestamp")
    agent_uid: str = Field(default=AGENT_UID, alias="s247agentuid")

    trace_id: str
    span_id: str
    parent_id: str
    root_span_id: str
    name: str
    kind: str = Field(alias="span_kind")
    start_time: int
    end_time: int
    duration: float

    service_name: str = ""
    exception_messages: list[str] = Field(default_factory=list, alias="exception_message")
    exception_stacktraces: list[str] = Field(default_factory=list, alias="stack_trace")
    exception_types: list[str] = Field(default_factory=list, alias="exception_class")

    instrumentation_name: str = ""
    instrumentation_version: str = ""
    sdk_language: str = Field(default="", alias="service_type")
    sdk_name: str = Field(default="", alias="log_sub_type")

    host_ip: str = ""
    host_name: str = ""
    host_port: int = 0
    thread_id: int = 0
    thread_name: str = ""
    db_system: str = Field(default="", alias="type")
    db_statement: str = ""
    db_name: str = ""
    db_connection_string: str = Field(default="", alias="connection_string")
    http_url: str = Field(default="", alias="url")
    http_method: str = ""
    http_status_code: int = 0

    is_root: bool = Field(alias="root")
    has_error: bool = Field(alias="error")

    custom_params: list[CustomParam] = Field(default_factory=list, alias="custom_param")

    # Not uploaded
    resource_attributes: dict[str, Any] = Field(default_factory=dict, exclude=True)
    span_attributes: dict[str, Any] = Field(default_factory=dict, exclude=True)
    trace_state: str = Field(default="", exclude=True)
    events: list[SpanEvent] = Field(default_factory=list, exclude=True)
    links: list[SpanLink] = Field(default_factory=list, exclude=True)
    status_code: str = Field(default="", exclude=True)
    status_message: str = Field(default="", exclude=True)
    dropped_attributes_count: int = Field(default=0, exclude=True)
    dropped_links_count: int = Field(default=0, exclude=True)
    dropped_events_count: int = Field(default=0, exclude=True)

    @property
    def duration_nanos(self) -> int:
        """Duration in the source unit (nanoseconds)."""
        return self.end_time - self.start_time


class FlatLog(_FlatRecord):
    """Single log record in Site24x7 AppLogs format."""

    trace_id: str = Field(alias="TraceId")
    span_id: str = Field(alias="SpanId")
    timestamp: int = Field(alias="_zl_timestamp")
    agent_uid: str = Field(default=AGENT_UID, alias="s247agentuid")
    name: str = ""
    level: str = Field(default="", alias="LogLevel")
    message: str = Field(default="", alias="Message")
    attributes: dict[str, Any] = Field(default_factory=dict)
    resource_attributes: dict[str, Any] = Field(default_factory=dict, alias="ResourceAttributes")
    dropped_attributes_count: int = Field(default=0, alias="DroppedAttributesCount")
    flags: int = Field(default=0, alias="TraceFlag")


FLAT_SPANS_ADAPTER = TypeAdapter(list[FlatSpan])
FLAT_LOGS_ADAPTER = TypeAdapter(list[FlatLog])
