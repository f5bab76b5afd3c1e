r"""Retry configuration and coordination of HTTP requests."""

from __future__ import annotations

__all__ = ["RetryConfig", "RetryCoordinator", "no_delay", "retry_on_status"]

from afluent.retry.config import RetryConfig, no_delay, retry_on_status
from afluent.retry.coordinator import RetryCoordinator
