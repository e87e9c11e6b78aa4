"""Exporter configuration."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from site24x7_exporter.constants import (
    DEFAULT_RETRY_INITIAL_INTERVAL,
    DEFAULT_RETRY_MAX_ELAPSED_TIME,
    DEFAULT_RETRY_MAX_INTERVAL,
    DEFAULT_TIMEOUT,
)
from site24x7_exporter.env import (
    SITE24X7_API_KEY,
    SITE24X7_INSECURE,
    SITE24X7_OUTPUT_PATH,
    SITE24X7_RETRY_ENABLED,
    SITE24X7_RETRY_MAX_ELAPSED_TIME,
    SITE24X7_TIMEOUT,
    SITE24X7_URL,
)
from site24x7_exporter.exceptions import ConfigError

_FALSY = ("false", "0", "no", "off")


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable; unset or empty gives ``default``."""
    value = os.environ.get(name, "").lower()
    if not value:
        return default
    return value not in _FALSY


class RetrySettings(BaseModel):
    """Backoff policy for exports made through the OpenTelemetry SDK adapters.

    Attributes:
        enabled: Retry at all.
        initial_interval: Seconds before the first retry.
        max_interval: Upper bound for the delay between retries.
        max_elapsed_time: Give up once this many seconds have passed.
    """

    enabled: bool = True
    initial_interval: float = Field(default=DEFAULT_RETRY_INITIAL_INTERVAL, gt=0)
    max_interval: float = Field(default=DEFAULT_RETRY_MAX_INTERVAL, gt=0)
    max_elapsed_time: float = Field(default=DEFAULT_RETRY_MAX_ELAPSED_TIME, ge=0)


class Site24x7Config(BaseModel):
    """Settings for one exporter instance.

    Attributes:
        url: Upload endpoint. Required.
        api_key: Site24x7 device key. Required.
        insecure: Skip TLS certificate verification.
        path: Debug log file, truncated on start. None disables it.
        timeout: Total HTTP request timeout in seconds.
        retry: Backoff policy used by the SDK adapters.
    """

    url: str
    api_key: str
    insecure: bool = False
    path: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @field_validator("url")
    @classmethod
    def _url_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("url must be non-empty")
        return value.strip()

    @field_validator("api_key")
    @classmethod
    def _api_key_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API Key must be non-empty")
        return value.strip()

    @classmethod
    def create(cls, **kwargs) -> "Site24x7Config":
        """Build and validate a config, raising ConfigError instead of ValidationError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_env(cls, **overrides) -> "Site24x7Config":
        """Build a config from ``SITE24X7_*`` environment variables.

        A ``.env`` file in the working directory is loaded first. Keyword
        arguments that are not None take precedence over the environment.

        Raises:
            ConfigError: url or api key missing, or a value is malformed.
        """
        load_dotenv()

        values: dict = {
            "url": os.environ.get(SITE24X7_URL, ""),
            "api_key": os.environ.get(SITE24X7_API_KEY, ""),
            "insecure": env_flag(SITE24X7_INSECURE, False),
            "path": os.environ.get(SITE24X7_OUTPUT_PATH) or None,
        }
        env_timeout = os.environ.get(SITE24X7_TIMEOUT)
        if env_timeout:
            values["timeout"] = env_timeout

        retry: dict = {"enabled": env_flag(SITE24X7_RETRY_ENABLED, True)}
        env_max_elapsed = os.environ.get(SITE24X7_RETRY_MAX_ELAPSED_TIME)
        if env_max_elapsed:
            retry["max_elapsed_time"] = env_max_elapsed
        values["retry"] = retry

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.create(**values)
