"""Batch processors for Site24x7 OpenTelemetry integration.

This module defines the Site24x7SpanProcessor and Site24x7LogProcessor
classes, which extend OpenTelemetry's batch processors with Site24x7-specific
defaults and environment variable fallbacks.
"""

import os

from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from site24x7_exporter.constants import DEFAULT_FLUSH_AT, DEFAULT_FLUSH_INTERVAL
from site24x7_exporter.env import SITE24X7_FLUSH_AT, SITE24X7_FLUSH_INTERVAL
from site24x7_exporter.exporter import Site24x7Exporter
from site24x7_exporter.transport.sdk import Site24x7LogExporter, Site24x7SpanExporter


def resolve_flush_settings(
    flush_at: int | None,
    flush_interval: float | None,
) -> tuple[int, float]:
    """Fill unset batching options from the environment, then the defaults."""
    if flush_at is None:
        env_flush_at = os.environ.get(SITE24X7_FLUSH_AT)
        flush_at = int(env_flush_at) if env_flush_at else DEFAULT_FLUSH_AT

    if flush_interval is None:
        env_flush_interval = os.environ.get(SITE24X7_FLUSH_INTERVAL)
        flush_interval = (
            float(env_flush_interval)
            if env_flush_interval
            else DEFAULT_FLUSH_INTERVAL
        )

    return flush_at, flush_interval


class Site24x7SpanProcessor(BatchSpanProcessor):
    """OpenTelemetry span processor that exports spans to Site24x7.

    Features:
    - Configurable batch size and flush interval via constructor or env vars
    - Automatic batching and periodic flushing
    - Graceful shutdown with final flush
    - Gzip-compressed AppLogs upload through Site24x7SpanExporter
    """

    def __init__(
        self,
        exporter: Site24x7Exporter,
        *,
        flush_at: int | None = None,
        flush_interval: float | None = None,
        close_exporter: bool = True,
    ):
        """Initialize the span processor.

        Args:
            exporter: Shared Site24x7 exporter.
            flush_at: Max batch size before flush. Falls back to SITE24X7_FLUSH_AT
                env var, then DEFAULT_FLUSH_AT.
            flush_interval: Seconds between automatic flushes. Falls back to
                SITE24X7_FLUSH_INTERVAL env var, then DEFAULT_FLUSH_INTERVAL.
            close_exporter: Shut the exporter down with the processor. Pass
                False when the exporter is shared with another processor.
        """
        flush_at, flush_interval = resolve_flush_settings(flush_at, flush_interval)

        self._adapter = Site24x7SpanExporter(exporter, close_exporter=close_exporter)
        super().__init__(
            span_exporter=self._adapter,
            max_export_batch_size=flush_at,
            schedule_delay_millis=int(flush_interval * 1000),
        )

        self._flush_at = flush_at
        self._flush_interval = flush_interval

    @property
    def flush_at(self) -> int:
        """Get the configured batch size."""
        return self._flush_at

    @property
    def flush_interval(self) -> float:
        """Get the configured flush interval in seconds."""
        return self._flush_interval

    def shutdown(self):
        # The batch worker is joined before the exporter is shut down, so
        # pending retry delays are cut short first.
        self._adapter.interrupt()
        return super().shutdown()


class Site24x7LogProcessor(BatchLogRecordProcessor):
    """Log record processor that exports logs to Site24x7 in batches."""

    def __init__(
        self,
        exporter: Site24x7Exporter,
        *,
        flush_at: int | None = None,
        flush_interval: float | None = None,
        close_exporter: bool = True,
    ):
        flush_at, flush_interval = resolve_flush_settings(flush_at, flush_interval)

        self._adapter = Site24x7LogExporter(exporter, close_exporter=close_exporter)
        super().__init__(
            exporter=self._adapter,
            max_export_batch_size=flush_at,
            schedule_delay_millis=int(flush_interval * 1000),
        )

        self._flush_at = flush_at
        self._flush_interval = flush_interval

    @property
    def flush_at(self) -> int:
        return self._flush_at

    @property
    def flush_interval(self) -> float:
        return self._flush_interval

    def shutdown(self):
        self._adapter.interrupt()
        return super().shutdown()
