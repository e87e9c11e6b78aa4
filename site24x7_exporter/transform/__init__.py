"""Projection of OTLP batches into flat Site24x7 records."""

from site24x7_exporter.transform.logs import assemble_logs, count_logs, project_log
from site24x7_exporter.transform.spans import (
    ResourceContext,
    assemble_spans,
    count_spans,
    project_span,
    resolve_root_span_names,
)

__all__ = [
    "ResourceContext",
    "assemble_logs",
    "assemble_spans",
    "count_logs",
    "count_spans",
    "project_log",
    "project_span",
    "resolve_root_span_names",
]
