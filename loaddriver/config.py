"""
Run configuration and logging setup.

Module constants hold the defaults; :class:`RunConfig` validates one run's
settings (as supplied by the CLI) and derives the final target URL.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from loaddriver.errors import ConfigError

# Defaults
DEFAULT_CONCURRENCY = 5
REQUEST_TIMEOUT_S = 15.0  # per request, not a retry boundary
API_ROUTE = "/api/find-service"
RESULT_LOG = Path("responses.txt")
CONTENT_TYPE = "application/json"

# Logging
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: int = LOG_LEVEL) -> None:
    """Route all ``loaddriver`` log records to stdout with :data:`LOG_FORMAT`."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)


class RunConfig(BaseModel):
    """Validated settings for a single run."""

    model_config = ConfigDict(frozen=True)

    payload_path: Path
    base_url: str
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = REQUEST_TIMEOUT_S
    output_path: Path = RESULT_LOG
    queue_size: Optional[int] = None  # None: sized to the payload count

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid target URL {value!r}: {exc}") from exc
        if url.scheme not in {"http", "https"} or not url.host:
            raise ValueError(f"target URL must be http(s)://host[:port], got {value!r}")
        return value

    @field_validator("concurrency")
    @classmethod
    def _check_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("concurrency must be >= 1")
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value

    @field_validator("queue_size")
    @classmethod
    def _check_queue_size(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("queue_size must be >= 1")
        return value

    @property
    def target_url(self) -> str:
        """Base URL without trailing slashes plus :data:`API_ROUTE`."""
        return self.base_url.rstrip("/") + API_ROUTE

    @classmethod
    def build(cls, **settings) -> "RunConfig":
        """Construct a config, turning pydantic validation errors into :class:`ConfigError`."""
        try:
            return cls(**settings)
        except ValidationError as exc:
            problems = "; ".join(err["msg"] for err in exc.errors())
            raise ConfigError(problems) from exc
