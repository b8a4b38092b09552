"""Explicit configuration for generation job clients and providers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from shared.config import DEFAULT_GEMINIGEN_BASE_URL, ServiceConfig

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 30


class JobClientConfig(BaseModel):
    """Provider access and polling parameters passed into a job client."""

    api_key: str | None = Field(None, description="GeminiGen API key")
    base_url: str = Field(default=DEFAULT_GEMINIGEN_BASE_URL)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, ge=0)
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    request_timeout: int = Field(default=120, gt=0)
    media_root: str = Field(default="./media", description="Root for local reference images")

    @property
    def timeout_ceiling(self) -> float:
        """Seconds spent waiting before a processing job is reported as timed out."""
        return self.poll_interval * self.max_attempts

    @classmethod
    def from_service_config(cls, service_config: ServiceConfig) -> "JobClientConfig":
        """Build a client configuration from environment values and the YAML catalog."""
        poll_interval = _first_set(
            service_config.get("generation_poll_interval"),
            service_config.get_catalog_value("polling.interval_seconds"),
            DEFAULT_POLL_INTERVAL,
        )
        max_attempts = _first_set(
            service_config.get("generation_max_attempts"),
            service_config.get_catalog_value("polling.max_attempts"),
            DEFAULT_MAX_ATTEMPTS,
        )
        return cls(
            api_key=service_config.get("geminigen_api_key"),
            base_url=service_config.get("geminigen_base_url", DEFAULT_GEMINIGEN_BASE_URL),
            poll_interval=float(poll_interval),
            max_attempts=int(max_attempts),
            request_timeout=int(service_config.get("generation_request_timeout", 120)),
            media_root=service_config.get("media_root", "./media"),
        )


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return None
