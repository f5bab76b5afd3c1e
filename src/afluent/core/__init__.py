r"""Core configuration and validation shared by the client and the
request pipeline."""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "TIMEOUT_STATUS_CODE",
    "ClientConfig",
    "RequestOptions",
    "validate_max_retries",
    "validate_retry_params",
    "validate_timeout",
]

from afluent.core.config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_STATUS_CODES,
    TIMEOUT_STATUS_CODE,
    ClientConfig,
    RequestOptions,
)
from afluent.core.validation import (
    validate_max_retries,
    validate_retry_params,
    validate_timeout,
)
