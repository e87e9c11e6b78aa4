"""HTTP delivery of flat record batches to Site24x7.

Two upload protocols are supported, picked from the endpoint URL:

    AppLogs (current):
        POST <url>
        X-DeviceKey: <api key>
        Content-Encoding: gzip
        X-LogType / X-StreamMode / Log-Size / User-Agent
        body: gzip(JSON array)

    Catalyst (legacy, URL contains "catalyst"):
        POST <url>?license.key=<api key>
        body: JSON array, uncompressed

The client performs exactly one exchange per call. Retrying is left to the
caller (see ``site24x7_exporter.retry``).
"""

import gzip
import logging
from dataclasses import dataclass, field

import httpx

from site24x7_exporter.constants import (
    DEFAULT_TIMEOUT,
    EXPORTER_NAME,
    LEGACY_API_KEY_PARAM,
    LEGACY_ENDPOINT_MARKER,
    LOG_TYPES,
    RETRYABLE_STATUS_CODES,
    STREAM_MODE,
    UPLOAD_ID_HEADER,
    TelemetryKind,
)
from site24x7_exporter.exceptions import HTTPStatusError, ResponseReadError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a successful upload."""

    status_code: int
    upload_ids: list[str] = field(default_factory=list)
    body: str = ""
    legacy: bool = False


def is_legacy_endpoint(url: str) -> bool:
    """Check whether the endpoint speaks the legacy Catalyst protocol."""
    return LEGACY_ENDPOINT_MARKER in url


def is_retryable_status(status_code: int) -> bool:
    """Status codes worth retrying: 408, 429 and every 5xx."""
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


class DeliveryClient:
    """Posts serialized batches to a Site24x7 upload endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        insecure: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the delivery client.

        Args:
            url: Upload endpoint.
            api_key: Site24x7 device key.
            insecure: Skip TLS certificate verification.
            timeout: Total request timeout in seconds.
            http_client: Pre-built client, mostly for tests. Its TLS and
                timeout settings are used as-is.
        """
        self.url = url
        self.api_key = api_key
        self.legacy = is_legacy_endpoint(url)
        self._client = http_client or httpx.Client(
            verify=not insecure,
            timeout=httpx.Timeout(timeout),
        )

    def build_headers(self, kind: TelemetryKind, record_count: int) -> dict[str, str]:
        """Headers for an AppLogs upload."""
        return {
            "X-DeviceKey": self.api_key,
            "Content-Type": "application/json",
            "X-LogType": LOG_TYPES[kind],
            "X-StreamMode": STREAM_MODE,
            "Log-Size": str(record_count),
            "Content-Encoding": "gzip",
            "User-Agent": EXPORTER_NAME,
        }

    def send(self, payload: bytes, kind: TelemetryKind, record_count: int) -> DeliveryResult:
        """Upload one serialized batch.

        Args:
            payload: JSON array of flat records.
            kind: Which record family the payload holds.
            record_count: Number of records in the payload.

        Returns:
            The delivery result, including any upload IDs.

        Raises:
            TransportError: The request could not be built or sent.
            ResponseReadError: The response could not be read.
            HTTPStatusError: The endpoint answered 4xx/5xx.
        """
        if self.legacy:
            request = self._build_request(
                content=payload,
                headers={"Content-Type": "application/json"},
                params={LEGACY_API_KEY_PARAM: self.api_key},
            )
        else:
            request = self._build_request(
                content=gzip.compress(payload),
                headers=self.build_headers(kind, record_count),
            )

        response = self._exchange(request)
        body = response.text

        if response.status_code >= 400:
            raise HTTPStatusError(
                response.status_code,
                body,
                retryable=is_retryable_status(response.status_code),
            )

        upload_ids = response.headers.get_list(UPLOAD_ID_HEADER)
        logger.debug(f"Uploaded {record_count} {kind} (status {response.status_code}, upload id {upload_ids})")
        return DeliveryResult(
            status_code=response.status_code,
            upload_ids=upload_ids,
            body=body if self.legacy else "",
            legacy=self.legacy,
        )

    def _build_request(self, **kwargs) -> httpx.Request:
        try:
            return self._client.build_request("POST", self.url, **kwargs)
        except (httpx.InvalidURL, httpx.HTTPError) as e:
            raise TransportError(f"Error initializing upload request: {e}") from e

    def _exchange(self, request: httpx.Request) -> httpx.Response:
        try:
            response = self._client.send(request, stream=True)
        except (httpx.HTTPError, RuntimeError) as e:
            # RuntimeError: the client was already closed
            raise TransportError(f"Error posting to {self.url}: {e}") from e

        try:
            response.read()
        except httpx.HTTPError as e:
            raise ResponseReadError(f"Error reading response from {self.url}: {e}") from e
        finally:
            response.close()
        return response

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
