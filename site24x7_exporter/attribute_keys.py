"""Attribute keys read by the Site24x7 exporter.

This module defines the OpenTelemetry semantic-convention keys the projectors
pull out of resource, span and event attribute maps.
"""


class SemanticAttributes:
    """OTel attribute keys mapped onto Site24x7 fields."""

    # =========================================================================
    # Resource Attributes
    # =========================================================================
    SERVICE_NAME = "service.name"
    TELEMETRY_SDK_NAME = "telemetry.sdk.name"
    TELEMETRY_SDK_LANGUAGE = "telemetry.sdk.language"

    # =========================================================================
    # Host / Network Attributes
    # =========================================================================
    NET_PEER_IP = "net.peer.ip"
    NET_PEER_NAME = "net.peer.name"
    NET_PEER_PORT = "net.peer.port"

    # =========================================================================
    # Thread Attributes
    # =========================================================================
    THREAD_ID = "thread.id"
    THREAD_NAME = "thread.name"

    # =========================================================================
    # Database Attributes
    # =========================================================================
    DB_SYSTEM = "db.system"
    DB_STATEMENT = "db.statement"
    DB_NAME = "db.name"
    DB_CONNECTION_STRING = "db.connection_string"

    # =========================================================================
    # HTTP Attributes
    # =========================================================================
    HTTP_URL = "http.url"
    HTTP_METHOD = "http.method"
    HTTP_STATUS_CODE = "http.status_code"

    # =========================================================================
    # Exception Event Attributes
    # =========================================================================
    EXCEPTION_MESSAGE = "exception.message"
    EXCEPTION_STACKTRACE = "exception.stacktrace"
    EXCEPTION_TYPE = "exception.type"

    # =========================================================================
    # Structured Log Body Keys
    # =========================================================================
    LOG_BODY_MESSAGE = "msg"
    LOG_BODY_TRACE_ID = "trace_id"
    LOG_BODY_SPAN_ID = "span_id"
