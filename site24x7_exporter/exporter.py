"""Site24x7 exporter: transform OTLP batches and upload them.

One ``Site24x7Exporter`` instance owns one lock. Every export, traces or
logs, runs its whole transform -> serialize -> upload sequence while holding
that lock, so concurrent callers on the same instance queue up instead of
interleaving their requests or their debug log lines. The upload is blocking;
a slow endpoint delays every later export of the instance up to the
configured timeout.
"""

import logging
import threading
from typing import Sequence

import httpx
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from site24x7_exporter.config import Site24x7Config
from site24x7_exporter.constants import TelemetryKind
from site24x7_exporter.debug_log import DebugLog
from site24x7_exporter.exceptions import (
    DeliveryError,
    HTTPStatusError,
    ResponseReadError,
    SerializationError,
)
from site24x7_exporter.models import FLAT_LOGS_ADAPTER, FLAT_SPANS_ADAPTER
from site24x7_exporter.transform import assemble_logs, assemble_spans, count_logs, count_spans
from site24x7_exporter.transport.client import DeliveryClient, DeliveryResult

logger = logging.getLogger(__name__)


class Site24x7Exporter:
    """Exports OTLP traces and logs to Site24x7.

    An instance is single-use: once shut down it cannot be started again.
    """

    def __init__(self, config: Site24x7Config, *, http_client: httpx.Client | None = None):
        """Initialize the exporter.

        Args:
            config: Validated exporter settings.
            http_client: Optional pre-built HTTP client, mostly for tests.
        """
        self.config = config
        self._lock = threading.Lock()
        self._debug_log = DebugLog(config.path)
        self._client = DeliveryClient(
            config.url,
            config.api_key,
            insecure=config.insecure,
            timeout=config.timeout,
            http_client=http_client,
        )
        self._started = False
        self._closed = False

    @property
    def lock(self) -> threading.Lock:
        """The export gate."""
        return self._lock

    @property
    def legacy(self) -> bool:
        return self._client.legacy

    def start(self) -> None:
        """Open the debug log. Safe to call more than once.

        Raises:
            RuntimeError: The exporter was already shut down.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Site24x7 exporter was shut down; create a new instance")
            if self._started:
                return
            self._debug_log.open()
            self._started = True
            logger.debug(f"Site24x7 exporter started for {self.config.url}")

    def shutdown(self) -> None:
        """Close the debug log and the HTTP client."""
        with self._lock:
            self._debug_log.close()
            self._client.close()
            self._started = False
            self._closed = True
            logger.debug("Site24x7 exporter shutdown")

    def export_traces(self, request: ExportTraceServiceRequest) -> DeliveryResult:
        """Transform and upload a trace batch.

        Raises:
            SerializationError: The spans could not be encoded; nothing was sent.
            DeliveryError: The upload failed.
        """
        with self._lock:
            self._debug_log.write(f"Begin formatting spans {count_spans(request)}")
            spans = assemble_spans(request)
            self._debug_log.write("Transformed telemetry data to site24x7 format.")
            return self._deliver(spans, FLAT_SPANS_ADAPTER, "spans")

    def export_logs(self, request: ExportLogsServiceRequest) -> DeliveryResult:
        """Transform and upload a log batch.

        Raises:
            SerializationError: The logs could not be encoded; nothing was sent.
            DeliveryError: The upload failed.
        """
        with self._lock:
            self._debug_log.write(f"Begin formatting logs {count_logs(request)}")
            logs = assemble_logs(request)
            self._debug_log.write("Transformed telemetry logs to site24x7 format.")
            return self._deliver(logs, FLAT_LOGS_ADAPTER, "logs")

    def _deliver(self, records: Sequence, adapter: TypeAdapter, kind: TelemetryKind) -> DeliveryResult:
        # Caller holds self._lock.
        try:
            payload = adapter.dump_json(list(records), by_alias=True)
        except (PydanticSerializationError, ValueError, TypeError) as e:
            self._debug_log.write(f"Error in converting telemetry {kind}: {e}")
            logger.error(f"Failed to serialize {len(records)} {kind}: {e}")
            raise SerializationError(f"Failed to serialize {kind}: {e}") from e

        try:
            result = self._client.send(payload, kind, len(records))
        except ResponseReadError as e:
            self._debug_log.write(f"Error in reading upload response for {kind}: {e}")
            logger.error(f"Upload of {len(records)} {kind} may have succeeded but the response was unreadable: {e}")
            raise
        except HTTPStatusError as e:
            self._debug_log.write(f"Upload of {kind} rejected with HTTP {e.status_code}")
            logger.error(str(e))
            raise
        except DeliveryError as e:
            self._debug_log.write(f"Error in posting {kind} to url: {e}")
            logger.error(f"Failed to upload {len(records)} {kind}: {e}")
            raise

        self._debug_log.write(f"Posting telemetry {kind} to url.")
        if result.legacy:
            self._debug_log.write(result.body)
        else:
            self._debug_log.write(f"Upload ID: {' '.join(result.upload_ids)}")
        logger.info(f"Exported {len(records)} {kind} to Site24x7")
        return result


def create_exporter(
    config: Site24x7Config | None = None,
    *,
    http_client: httpx.Client | None = None,
    start: bool = True,
) -> Site24x7Exporter:
    """Build an exporter from ``config`` (or the environment) and start it."""
    exporter = Site24x7Exporter(config or Site24x7Config.from_env(), http_client=http_client)
    if start:
        exporter.start()
    return exporter
