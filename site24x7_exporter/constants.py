"""Constants used by the Site24x7 exporter.

This module defines constants used throughout the exporter including default
values, wire-level header values, and type definitions.
"""

from typing import Literal

# Re-export SemanticAttributes for convenience
from site24x7_exporter.attribute_keys import SemanticAttributes

# =============================================================================
# Exporter Identification
# =============================================================================

EXPORTER_NAME = "site24x7exporter"
"""Exporter name, also sent as the User-Agent of upload requests."""

EXPORTER_VERSION = "0.1.0"
"""Exporter version. Should match pyproject.toml version."""

AGENT_UID = "otel-s247exporter"
"""Synthetic source identifier stamped on every flat record (``s247agentuid``)."""

# =============================================================================
# Default Values
# =============================================================================

DEFAULT_TIMEOUT = 5.0
"""Default total HTTP request timeout in seconds."""

DEFAULT_FLUSH_AT = 512
"""Default maximum batch size before the span processor triggers a flush."""

DEFAULT_FLUSH_INTERVAL = 5.0
"""Default interval in seconds between automatic flushes."""

DEFAULT_RETRY_INITIAL_INTERVAL = 5.0
"""Seconds to wait after the first failed export before retrying."""

DEFAULT_RETRY_MAX_INTERVAL = 30.0
"""Upper bound in seconds for the delay between two retries."""

DEFAULT_RETRY_MAX_ELAPSED_TIME = 300.0
"""Seconds after which a failing export is abandoned."""

# =============================================================================
# Upload Protocol
# =============================================================================

LEGACY_ENDPOINT_MARKER = "catalyst"
"""Endpoints containing this substring use the legacy query-string upload."""

LEGACY_API_KEY_PARAM = "license.key"
"""Query parameter carrying the API key in legacy mode."""

UPLOAD_ID_HEADER = "x-uploadid"
"""Response header carrying the upload identifier assigned by Site24x7."""

SPANS_LOG_TYPE = "s247apmopentelemetrytracing"
"""``X-LogType`` value for span uploads."""

LOGS_LOG_TYPE = "otellogs"
"""``X-LogType`` value for log uploads."""

STREAM_MODE = "1"
"""``X-StreamMode`` value sent with every upload."""

RETRYABLE_STATUS_CODES = frozenset({408, 429})
"""Client-side status codes worth retrying; every 5xx is retryable as well."""

# =============================================================================
# Telemetry Kinds
# =============================================================================

TelemetryKind = Literal["spans", "logs"]
"""Which flat-record family a payload carries."""

LOG_TYPES: dict[str, str] = {
    "spans": SPANS_LOG_TYPE,
    "logs": LOGS_LOG_TYPE,
}
