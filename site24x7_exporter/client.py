"""Site24x7 client."""

import atexit
import logging
import os

from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

from site24x7_exporter.config import Site24x7Config, env_flag
from site24x7_exporter.env import SITE24X7_ENABLED
from site24x7_exporter.exporter import Site24x7Exporter
from site24x7_exporter.transport.span_processor import (
    Site24x7LogProcessor,
    Site24x7SpanProcessor,
)

logger = logging.getLogger(__name__)

_SELF_LOGGER_PREFIXES = ("site24x7_exporter", "opentelemetry", "httpx", "httpcore")


class ExporterRecordFilter(logging.Filter):
    """Drops records from the loggers of the export path (exporter, OTel SDK, httpx).

    Uploading captured logs must never produce more captured logs.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(
            record.name == prefix or record.name.startswith(f"{prefix}.")
            for prefix in _SELF_LOGGER_PREFIXES
        )


class Site24x7Client:
    """Main client for sending in-process traces and logs to Site24x7.

    The client initializes an OpenTelemetry TracerProvider and LoggerProvider
    whose batch processors upload through a single Site24x7Exporter, so
    trace and log uploads share one export gate and one debug log.
    """

    def __init__(
        self,
        config: Site24x7Config | None = None,
        *,
        resource: Resource | None = None,
        flush_interval: float | None = None,
        batch_size: int | None = None,
        enabled: bool | None = None,
        capture_logging: bool = False,
    ):
        """Initialize the Site24x7 client.

        Args:
            config: Exporter settings. Falls back to ``Site24x7Config.from_env()``.
            resource: OTel resource describing this service.
            flush_interval: Seconds between automatic flushes. Falls back to
                SITE24X7_FLUSH_INTERVAL env var, then 5.0.
            batch_size: Maximum items per batch before flush. Falls back to
                SITE24X7_FLUSH_AT env var, then 512.
            enabled: Whether exporting is enabled. Falls back to SITE24X7_ENABLED env var.
            capture_logging: Attach an OTel LoggingHandler to the root logger.
        """
        if enabled is None:
            enabled = env_flag(SITE24X7_ENABLED, True)

        self.config = config
        self.resource = resource or Resource.create()
        self.flush_interval = flush_interval
        self.batch_size = batch_size
        self.capture_logging = capture_logging

        self._enabled = enabled
        self._exporter: Site24x7Exporter | None = None
        self._span_processor: Site24x7SpanProcessor | None = None
        self._log_processor: Site24x7LogProcessor | None = None
        self._tracer_provider: TracerProvider | None = None
        self._logger_provider: LoggerProvider | None = None
        self._logging_handler: LoggingHandler | None = None
        self._initialized = False

        if self._enabled:
            self._initialize()

    def _initialize(self) -> None:
        """Initialize providers with Site24x7 processors."""
        if self._initialized:
            return

        if self.config is None:
            self.config = Site24x7Config.from_env()

        self._exporter = Site24x7Exporter(self.config)
        self._exporter.start()

        self._span_processor = Site24x7SpanProcessor(
            self._exporter,
            flush_at=self.batch_size,
            flush_interval=self.flush_interval,
            close_exporter=False,
        )
        self._log_processor = Site24x7LogProcessor(
            self._exporter,
            flush_at=self.batch_size,
            flush_interval=self.flush_interval,
            close_exporter=False,
        )

        self._tracer_provider = TracerProvider(resource=self.resource)
        self._tracer_provider.add_span_processor(self._span_processor)
        trace.set_tracer_provider(self._tracer_provider)

        self._logger_provider = LoggerProvider(resource=self.resource)
        self._logger_provider.add_log_record_processor(self._log_processor)
        set_logger_provider(self._logger_provider)

        if self.capture_logging:
            self._logging_handler = LoggingHandler(logger_provider=self._logger_provider)
            self._logging_handler.addFilter(ExporterRecordFilter())
            logging.getLogger().addHandler(self._logging_handler)

        # Register shutdown handler
        atexit.register(self.shutdown)

        self._initialized = True
        logger.debug(f"Site24x7 client initialized (pid {os.getpid()})")

    @property
    def enabled(self) -> bool:
        """Check if exporting is enabled."""
        return self._enabled

    @property
    def exporter(self) -> Site24x7Exporter | None:
        """The shared exporter, None when disabled."""
        return self._exporter

    @property
    def span_processor(self) -> Site24x7SpanProcessor | None:
        return self._span_processor

    def flush(self) -> None:
        """Flush all pending spans and logs."""
        if self._span_processor:
            self._span_processor.force_flush()
        if self._log_processor:
            self._log_processor.force_flush()

    def shutdown(self) -> None:
        """Shutdown the client gracefully."""
        if self._logging_handler:
            logging.getLogger().removeHandler(self._logging_handler)
            self._logging_handler = None
        if self._tracer_provider:
            self._tracer_provider.shutdown()
            self._tracer_provider = None
        if self._logger_provider:
            self._logger_provider.shutdown()
            self._logger_provider = None

        self._span_processor = None
        self._log_processor = None
        if self._exporter:
            self._exporter.shutdown()
            self._exporter = None
        self._initialized = False
        logger.debug("Site24x7 client shutdown")
