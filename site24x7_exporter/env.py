"""Environment variable definitions for the Site24x7 exporter.

This module defines all environment variables used to configure the exporter.
Each variable includes documentation on its purpose, expected values, and defaults.

Usage:
    import os
    from site24x7_exporter.env import SITE24X7_API_KEY

    api_key = os.environ.get(SITE24X7_API_KEY)
"""

# =============================================================================
# Authentication
# =============================================================================

SITE24X7_API_KEY = "SITE24X7_API_KEY"
"""
.. envvar:: SITE24X7_API_KEY

Site24x7 device key, sent as ``X-DeviceKey`` (or ``license.key`` in legacy mode).
Required.
"""

# =============================================================================
# Connection
# =============================================================================

SITE24X7_URL = "SITE24X7_URL"
"""
.. envvar:: SITE24X7_URL

Upload endpoint URL. Endpoints containing ``catalyst`` use the legacy protocol.
Required.
"""

SITE24X7_INSECURE = "SITE24X7_INSECURE"
"""
.. envvar:: SITE24X7_INSECURE

Disable TLS certificate verification for the upload endpoint.
Accepts: "true", "false", "1", "0", "yes", "no", "on", "off" (case-insensitive)

**Default:** ``false``
"""

SITE24X7_TIMEOUT = "SITE24X7_TIMEOUT"
"""
.. envvar:: SITE24X7_TIMEOUT

Total HTTP request timeout in seconds.

**Default:** ``5``
"""

# =============================================================================
# Debug Output
# =============================================================================

SITE24X7_OUTPUT_PATH = "SITE24X7_OUTPUT_PATH"
"""
.. envvar:: SITE24X7_OUTPUT_PATH

Path of the debug log file receiving human-readable progress lines.
The file is truncated when the exporter starts. Unset disables the file.
"""

# =============================================================================
# Retry
# =============================================================================

SITE24X7_RETRY_ENABLED = "SITE24X7_RETRY_ENABLED"
"""
.. envvar:: SITE24X7_RETRY_ENABLED

Retry failed exports made through the OpenTelemetry SDK adapters.

**Default:** ``true``
"""

SITE24X7_RETRY_MAX_ELAPSED_TIME = "SITE24X7_RETRY_MAX_ELAPSED_TIME"
"""
.. envvar:: SITE24X7_RETRY_MAX_ELAPSED_TIME

Seconds after which a failing export is abandoned.

**Default:** ``300``
"""

# =============================================================================
# Batching & Flushing
# =============================================================================

SITE24X7_FLUSH_AT = "SITE24X7_FLUSH_AT"
"""
.. envvar:: SITE24X7_FLUSH_AT

Maximum number of spans or log records in a batch before triggering a flush.

**Default:** ``512``
"""

SITE24X7_FLUSH_INTERVAL = "SITE24X7_FLUSH_INTERVAL"
"""
.. envvar:: SITE24X7_FLUSH_INTERVAL

Maximum delay in seconds between automatic flushes.

**Default:** ``5.0``
"""

# =============================================================================
# Feature Flags
# =============================================================================

SITE24X7_ENABLED = "SITE24X7_ENABLED"
"""
.. envvar:: SITE24X7_ENABLED

Enable or disable the exporter client. When disabled, no providers are installed.

**Default:** ``true``
"""
