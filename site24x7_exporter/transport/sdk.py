"""OpenTelemetry SDK exporters backed by ``Site24x7Exporter``.

These let an in-process ``TracerProvider`` / ``LoggerProvider`` ship to
Site24x7 directly. SDK spans and log records are first encoded into OTLP
requests with the standard OTLP encoders, then go through the same
transform and upload path as batches received from a collector.
"""

import logging
import threading
from typing import Any, Callable, Sequence

from opentelemetry.exporter.otlp.proto.common._log_encoder import encode_logs
from opentelemetry.exporter.otlp.proto.common.trace_encoder import encode_spans
from opentelemetry.sdk._logs.export import LogExporter, LogExportResult
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from site24x7_exporter.exceptions import Site24x7ExporterError
from site24x7_exporter.exporter import Site24x7Exporter
from site24x7_exporter.retry import call_with_retry

logger = logging.getLogger(__name__)


class _RetryingAdapter:
    """Shared retry and shutdown handling of the SDK exporters."""

    def __init__(self, exporter: Site24x7Exporter, close_exporter: bool) -> None:
        self.exporter = exporter
        self.close_exporter = close_exporter
        self._shutdown = False
        self._shutdown_in_progress = threading.Event()

    def interrupt(self) -> None:
        """Cut short any pending retry delay; the current attempt still completes."""
        self._shutdown_in_progress.set()

    def _export_with_retry(self, export: Callable[[], Any]) -> bool:
        try:
            call_with_retry(
                export,
                self.exporter.config.retry,
                sleep=self._shutdown_in_progress.wait,
                should_stop=self._shutdown_in_progress.is_set,
            )
        except Site24x7ExporterError:
            # Already logged by the exporter
            return False
        return True

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True

    def shutdown(self) -> None:
        self.interrupt()
        self._shutdown = True
        if self.close_exporter:
            self.exporter.shutdown()


class Site24x7SpanExporter(_RetryingAdapter, SpanExporter):
    """SpanExporter uploading SDK spans to Site24x7.

    Exporter errors are turned into ``SpanExportResult.FAILURE`` so the SDK
    worker thread does not log a traceback for every failed upload.
    """

    def __init__(self, exporter: Site24x7Exporter, *, close_exporter: bool = True) -> None:
        super().__init__(exporter, close_exporter)

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if self._shutdown:
            logger.warning("Exporter already shutdown, ignoring batch")
            return SpanExportResult.FAILURE

        request = encode_spans(spans)
        if self._export_with_retry(lambda: self.exporter.export_traces(request)):
            return SpanExportResult.SUCCESS
        return SpanExportResult.FAILURE


class Site24x7LogExporter(_RetryingAdapter, LogExporter):
    """LogExporter uploading SDK log records to Site24x7."""

    def __init__(self, exporter: Site24x7Exporter, *, close_exporter: bool = True) -> None:
        super().__init__(exporter, close_exporter)

    def export(self, batch: Sequence[Any]) -> LogExportResult:
        if self._shutdown:
            logger.warning("Exporter already shutdown, ignoring batch")
            return LogExportResult.FAILURE

        request = encode_logs(batch)
        if self._export_with_retry(lambda: self.exporter.export_logs(request)):
            return LogExportResult.SUCCESS
        return LogExportResult.FAILURE
