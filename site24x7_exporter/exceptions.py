"""Exceptions raised by the Site24x7 exporter."""


class Site24x7ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(Site24x7ExporterError, ValueError):
    """The exporter configuration is missing a required value."""


class SerializationError(Site24x7ExporterError):
    """The flat records could not be encoded to JSON. Nothing was sent."""


class DeliveryError(Site24x7ExporterError):
    """Base class for failures while talking to the upload endpoint."""

    retryable = True


class TransportError(DeliveryError):
    """The upload request could not be built or sent."""


class ResponseReadError(DeliveryError):
    """The request was sent but the endpoint's acknowledgment could not be read.

    The payload may already have been accepted by Site24x7.
    """


class HTTPStatusError(DeliveryError):
    """The endpoint answered with a 4xx/5xx status code."""

    def __init__(self, status_code: int, body: str, retryable: bool) -> None:
        super().__init__(f"Upload rejected with HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body
        self.retryable = retryable
