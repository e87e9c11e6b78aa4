"""Transform OTLP log batches to Site24x7 AppLogs records.

OTLP structure:
    ExportLogsServiceRequest
      resource_logs[]
        resource.attributes[]
        scope_logs[]
          log_records[]
            time_unix_nano, severity_text, event_name
            body (AnyValue: string or kvlist, usually)
            attributes[], trace_id, span_id, flags

Structured bodies emitted by JSON loggers often carry the real message and
the correlation IDs inside the body, e.g. ``{"msg": "...", "trace_id": "..."}``;
those take precedence over the record's own fields.
"""

import json
import logging

from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.logs.v1.logs_pb2 import LogRecord

from site24x7_exporter.attributes import (
    any_value_to_python,
    attributes_to_dict,
    get_str,
    hex_id,
)
from site24x7_exporter.constants import SemanticAttributes
from site24x7_exporter.models import FlatLog
from site24x7_exporter.transform.spans import NANOS_PER_MILLI

logger = logging.getLogger(__name__)


def count_logs(request: ExportLogsServiceRequest) -> int:
    """Count the log records in a request."""
    return sum(
        len(scope_logs.log_records)
        for resource_logs in request.resource_logs
        for scope_logs in resource_logs.scope_logs
    )


def project_log(record: LogRecord, resource_attributes: dict) -> FlatLog:
    """Convert one OTLP log record into a Site24x7 log.

    Message selection:
        - string body: the body itself
        - kvlist body: its "msg" entry if that is a string, else the record name
        - any other body: its JSON text
        - no body: the record name

    Args:
        record: The OTLP log record
        resource_attributes: Unwrapped attributes of the enclosing resource

    Returns:
        The flat log record
    """
    name = record.event_name
    trace_id = hex_id(record.trace_id)
    span_id = hex_id(record.span_id)
    timestamp = record.time_unix_nano or record.observed_time_unix_nano

    body_kind = record.body.WhichOneof("value")
    if body_kind == "string_value":
        message = record.body.string_value
    elif body_kind == "kvlist_value":
        body = attributes_to_dict(record.body.kvlist_value.values)
        message = get_str(body, SemanticAttributes.LOG_BODY_MESSAGE) or name
        trace_id = get_str(body, SemanticAttributes.LOG_BODY_TRACE_ID) or trace_id
        span_id = get_str(body, SemanticAttributes.LOG_BODY_SPAN_ID) or span_id
    elif body_kind is None:
        message = name
    else:
        message = json.dumps(any_value_to_python(record.body))

    return FlatLog(
        trace_id=trace_id,
        span_id=span_id,
        timestamp=timestamp // NANOS_PER_MILLI,
        name=name,
        level=record.severity_text,
        message=message,
        attributes=attributes_to_dict(record.attributes),
        resource_attributes=resource_attributes,
        dropped_attributes_count=record.dropped_attributes_count,
        flags=record.flags,
    )


def assemble_logs(request: ExportLogsServiceRequest) -> list[FlatLog]:
    """Transform a whole OTLP log batch, preserving resource -> scope -> record order."""
    logs: list[FlatLog] = []
    for resource_logs in request.resource_logs:
        resource_attributes = attributes_to_dict(resource_logs.resource.attributes)
        for scope_logs in resource_logs.scope_logs:
            for record in scope_logs.log_records:
                logs.append(project_log(record, resource_attributes))

    logger.debug(f"Transformed {len(logs)} log records")
    return logs
