r"""Configuration dataclasses and defaults for FluentClient.

This module provides configuration constants and dataclass-based
configuration objects for the ``FluentClient`` and for individual
requests.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "TIMEOUT_STATUS_CODE",
    "ClientConfig",
    "RequestOptions",
]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from afluent.core.validation import validate_max_retries

if TYPE_CHECKING:
    from collections.abc import Callable

    from afluent.callbacks import FailureInfo, RetryInfo
    from afluent.retry.config import RetryConfig


# Default timeout in seconds for HTTP requests
# This is a reasonable default for most API calls
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retry attempts
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 3

# Internal status code of the synthetic response which stands for a
# transport-level timeout. It is outside every registry of real or
# proxy-specific status codes and is never sent by a server.
TIMEOUT_STATUS_CODE = 591

# HTTP status codes that should trigger automatic retry
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
# 591: Synthetic transport timeout
RETRY_STATUS_CODES = (429, 500, 502, 503, 504, TIMEOUT_STATUS_CODE)


@dataclass
class ClientConfig:
    """Configuration for FluentClient behavior.

    Note:
        The timeout parameter is NOT included in this config as it is used
        directly by httpx.AsyncClient, not by the request pipeline.

    Args:
        http_error_as_exception: Whether reading a response with an HTTP
            error status (4xx or 5xx) raises an ``ApiError``.
        ignore_null_arguments: Whether query arguments with a ``None``
            value are dropped.
        user_agent: Optional ``User-Agent`` header. If ``None``, the
            default ``afluent/<version>`` user agent is used.
        retry: Retry configurations applied to every request. The first
            config which wants to retry a result governs the retry. A
            single ``RetryConfig`` is accepted too.
        on_retry: Optional callback called before each retry delay.
        on_failure: Optional callback called when retries are exhausted.

    Example:
        ```pycon
        >>> from afluent.core.config import ClientConfig
        >>> config = ClientConfig()
        >>> config.http_error_as_exception
        True
        >>> merged = config.merge(http_error_as_exception=False)
        >>> merged.http_error_as_exception
        False
        >>> config.http_error_as_exception  # Original unchanged
        True

        ```
    """

    http_error_as_exception: bool = True
    ignore_null_arguments: bool = True
    user_agent: str | None = None
    retry: tuple[RetryConfig, ...] = ()
    on_retry: Callable[[RetryInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None

    def __post_init__(self) -> None:
        """Normalize and validate configuration parameters.

        Raises:
            ValueError: If a retry config has a negative ``max_retries``.
        """
        if self.retry is None:
            self.retry = ()
        elif not isinstance(self.retry, (tuple, list)):
            self.retry = (self.retry,)
        self.retry = tuple(config for config in self.retry if config is not None)
        for config in self.retry:
            validate_max_retries(config.max_retries)

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ClientConfig instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)


@dataclass
class RequestOptions:
    """Options of a single request.

    Fields set to ``None`` fall back on the client configuration.

    Args:
        ignore_http_errors: Whether HTTP error responses (e.g. HTTP 404)
            are returned instead of raised as ``ApiError``.
        ignore_null_arguments: Whether query arguments with a ``None``
            value are dropped.

    Example:
        ```pycon
        >>> from afluent.core.config import RequestOptions
        >>> options = RequestOptions(ignore_http_errors=True)
        >>> options.merge(RequestOptions(ignore_null_arguments=False))
        RequestOptions(ignore_http_errors=True, ignore_null_arguments=False)

        ```
    """

    ignore_http_errors: bool | None = None
    ignore_null_arguments: bool | None = None

    def merge(self, other: RequestOptions | None) -> RequestOptions:
        """Create new options with the non-None values of ``other``
        copied over.

        Args:
            other: The options to copy from.

        Returns:
            The merged options.
        """
        if other is None:
            return replace(self)
        return RequestOptions(
            ignore_http_errors=(
                other.ignore_http_errors
                if other.ignore_http_errors is not None
                else self.ignore_http_errors
            ),
            ignore_null_arguments=(
                other.ignore_null_arguments
                if other.ignore_null_arguments is not None
                else self.ignore_null_arguments
            ),
        )
