"""Site24x7 exporter - ship OpenTelemetry traces and logs to Site24x7 AppLogs.

Collector-style usage (OTLP batches already decoded):
    from site24x7_exporter import Site24x7Config, create_exporter

    exporter = create_exporter(Site24x7Config(url=..., api_key=...))
    exporter.export_traces(export_trace_service_request)
    exporter.export_logs(export_logs_service_request)
    exporter.shutdown()

In-process usage:
    import site24x7_exporter

    # Reads SITE24X7_URL / SITE24X7_API_KEY from env
    site24x7_exporter.initialize()
"""

from site24x7_exporter.client import Site24x7Client
from site24x7_exporter.config import RetrySettings, Site24x7Config
from site24x7_exporter.exceptions import (
    ConfigError,
    DeliveryError,
    HTTPStatusError,
    ResponseReadError,
    SerializationError,
    Site24x7ExporterError,
    TransportError,
)
from site24x7_exporter.exporter import Site24x7Exporter, create_exporter
from site24x7_exporter.file_exporter import Site24x7FileExporter
from site24x7_exporter.models import FlatLog, FlatSpan

__version__ = "0.1.0"

# =============================================================================
# Global Singleton Client
# =============================================================================
_client: Site24x7Client | None = None


def initialize(
    config: Site24x7Config | None = None,
    flush_interval: float | None = None,
    batch_size: int | None = None,
    enabled: bool | None = None,
    capture_logging: bool = False,
) -> Site24x7Client:
    """Initialize the global Site24x7 client.

    Call this once at application startup.

    Args:
        config: Exporter settings. Defaults to ``Site24x7Config.from_env()``.
        flush_interval: Seconds between automatic flushes.
        batch_size: Max batch size before flush.
        enabled: Whether exporting is enabled. Defaults to SITE24X7_ENABLED.
        capture_logging: Forward stdlib logging records to Site24x7.

    Returns:
        The Site24x7Client instance.
    """
    global _client
    _client = Site24x7Client(
        config,
        flush_interval=flush_interval,
        batch_size=batch_size,
        enabled=enabled,
        capture_logging=capture_logging,
    )
    return _client


def get_client() -> Site24x7Client | None:
    """Get the global Site24x7 client (internal use)."""
    return _client


def flush() -> None:
    """Flush all pending spans and logs."""
    if _client:
        _client.flush()


def shutdown() -> None:
    """Shutdown the exporter gracefully."""
    if _client:
        _client.shutdown()


__all__ = [
    # Core
    "initialize",
    "flush",
    "shutdown",
    "create_exporter",
    "Site24x7Client",
    "Site24x7Exporter",
    "Site24x7FileExporter",
    # Configuration
    "Site24x7Config",
    "RetrySettings",
    # Records
    "FlatSpan",
    "FlatLog",
    # Errors
    "Site24x7ExporterError",
    "ConfigError",
    "SerializationError",
    "DeliveryError",
    "TransportError",
    "ResponseReadError",
    "HTTPStatusError",
]
