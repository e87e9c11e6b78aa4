"""Write raw OTLP batches to a file as JSON lines.

Each traces, metrics or logs request becomes one line of OTLP/JSON (camelCase
field names, IDs as base64, the protobuf JSON mapping). Handy for capturing
what a pipeline would send to Site24x7 without uploading anything.
"""

import json
import logging
import threading
from pathlib import Path
from typing import TextIO

from google.protobuf.json_format import MessageToDict
from google.protobuf.message import Message
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import (
    ExportMetricsServiceRequest,
)
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)

logger = logging.getLogger(__name__)


class Site24x7FileExporter:
    """Appends one OTLP/JSON line per exported request."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._file: TextIO | None = None

    def start(self) -> None:
        """Open the output file, truncating previous content."""
        with self._lock:
            if self._file is None:
                self._file = self.path.open("w", encoding="utf-8")
                logger.debug(f"Writing OTLP JSON to {self.path}")

    def shutdown(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def export_traces(self, request: ExportTraceServiceRequest) -> None:
        self._write_line(request)

    def export_metrics(self, request: ExportMetricsServiceRequest) -> None:
        self._write_line(request)

    def export_logs(self, request: ExportLogsServiceRequest) -> None:
        self._write_line(request)

    def _write_line(self, request: Message) -> None:
        line = json.dumps(MessageToDict(request), separators=(",", ":"))
        with self._lock:
            if self._file is None:
                raise RuntimeError("File exporter is not started")
            self._file.write(line)
            self._file.write("\n")
            self._file.flush()
