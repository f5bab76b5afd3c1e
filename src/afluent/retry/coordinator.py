r"""Retry coordinator driving the dispatch loop of a request.

This module provides the ``RetryCoordinator`` class which calls the
transport, asks the retry configs whether the result should be retried,
waits between attempts and gives up once the retry ceiling is reached.
"""

from __future__ import annotations

__all__ = ["RetryCoordinator", "is_caller_cancellation"]

import asyncio
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx

from afluent.callbacks import FailureInfo, RetryInfo
from afluent.exceptions import RetryExhaustedError
from afluent.retry.config import RetryConfig
from afluent.utils.response import create_timeout_response, is_timeout_response
from afluent.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from afluent.request import Request

logger: logging.Logger = logging.getLogger(__name__)

# Errors raised by a transport call which was cancelled or timed out
TRANSPORT_CANCELLATION_ERRORS = (httpx.TimeoutException, TimeoutError, asyncio.CancelledError)


def is_caller_cancellation(request: Request, exc: BaseException) -> bool:
    r"""Indicate whether a transport cancellation error comes from the
    caller.

    A cancellation belongs to the caller when the request cancellation
    token was cancelled, or when the current task itself is being
    cancelled.

    Args:
        request: The request being dispatched.
        exc: The cancellation error raised by the transport call.

    Returns:
        ``True`` if the error must propagate, ``False`` if it is a
        transport-level timeout.
    """
    token = request.cancellation_token
    if token is not None and token.is_cancellation_requested:
        return True
    if isinstance(exc, asyncio.CancelledError):
        task = asyncio.current_task()
        return task is not None and task.cancelling() > 0
    return False


def _to_seconds(delay: float | timedelta) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


class RetryCoordinator:
    """Dispatch requests and retry them according to retry configs.

    Each result is offered to the retry configs in order, and the first
    config which wants to retry it governs the retry ceiling and the
    delay of that attempt. Attempts are strictly sequential. The
    coordinator holds no per-request state, so one instance can serve
    concurrent requests.

    A transport timeout, or a cancellation which does not come from the
    caller, is turned into a synthetic response with the
    ``TIMEOUT_STATUS_CODE`` status, so retry predicates only deal with
    responses.

    Args:
        configs: A retry config or an ordered iterable of retry configs.
            ``None`` values are ignored. Without any config, results are
            never retried.
        on_retry: Optional callback called before each retry delay.
        on_failure: Optional callback called when retries are exhausted.

    Example:
        ```pycon
        >>> from afluent.retry import RetryConfig, RetryCoordinator, retry_on_status
        >>> coordinator = RetryCoordinator(
        ...     [
        ...         RetryConfig(max_retries=2, should_retry=retry_on_status([503])),
        ...         RetryConfig.with_intervals(retry_on_status([429]), 1.0, 5.0),
        ...     ]
        ... )
        >>> len(coordinator.configs)
        2

        ```
    """

    def __init__(
        self,
        configs: RetryConfig | Iterable[RetryConfig | None] | None = None,
        *,
        on_retry: Callable[[RetryInfo], None] | None = None,
        on_failure: Callable[[FailureInfo], None] | None = None,
    ) -> None:
        if configs is None:
            configs = ()
        elif isinstance(configs, RetryConfig):
            configs = (configs,)
        self.configs: tuple[RetryConfig, ...] = tuple(
            config for config in configs if config is not None
        )
        self.on_retry = on_retry
        self.on_failure = on_failure

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(configs={len(self.configs)})"

    def find_config(self, response: httpx.Response) -> RetryConfig | None:
        """Find the retry config which wants to retry a result.

        Args:
            response: The result of the last attempt.

        Returns:
            The first config whose predicate returns ``True``, or
            ``None`` if no config wants to retry.
        """
        for config in self.configs:
            if config.should_retry(response):
                return config
        return None

    async def execute(
        self,
        request: Request,
        dispatcher: Callable[[Request], Awaitable[httpx.Response]],
    ) -> httpx.Response:
        """Dispatch a request until no retry config wants to retry it.

        Args:
            request: The request to dispatch. The same request is passed
                to every attempt.
            dispatcher: Async function which sends the request through
                the transport.

        Returns:
            The result of the last attempt, whatever its status code.

        Raises:
            RetryExhaustedError: If the governing retry config still
                wants to retry after its maximum number of retries.
            asyncio.CancelledError: If the caller cancelled the request.
                It is never retried.
        """
        start_time = time.time()
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await dispatcher(request)
            except TRANSPORT_CANCELLATION_ERRORS as exc:
                if is_caller_cancellation(request, exc):
                    logger.debug(
                        f"{request.method} request to {request.url} was cancelled "
                        f"on attempt {attempt}"
                    )
                    raise
                logger.debug(
                    f"{request.method} request to {request.url} timed out on attempt "
                    f"{attempt} ({type(exc).__name__})"
                )
                response = create_timeout_response(request.build_message())

            config = self.find_config(response)
            if config is None:
                if attempt > 1:
                    logger.debug(
                        f"{request.method} request to {request.url} completed with status "
                        f"{response.status_code} after {attempt} attempts"
                    )
                return response

            max_attempts = 1 + config.max_retries
            if attempt >= max_attempts:
                self._give_up(request, response, attempt, config, start_time)

            delay = _to_seconds(config.get_delay(attempt, response))
            self._notify_retry(request, response, attempt, config, delay)
            await response.aclose()
            if delay > 0:
                await asyncio.sleep(delay)

    def _notify_retry(
        self,
        request: Request,
        response: httpx.Response,
        attempt: int,
        config: RetryConfig,
        delay: float,
    ) -> None:
        timed_out = is_timeout_response(response)
        log_structured(
            logger,
            logging.DEBUG,
            f"{request.method} request to {request.url} will be retried in {delay:.2f}s "
            f"(attempt {attempt}/{config.max_retries + 1}, status {response.status_code})",
            method=request.method,
            url=str(request.url),
            attempt=attempt,
            max_retries=config.max_retries,
            status_code=response.status_code,
            delay=delay,
            timed_out=timed_out,
        )
        if self.on_retry is not None:
            self.on_retry(
                RetryInfo(
                    url=str(request.url),
                    method=request.method,
                    attempt=attempt,
                    max_retries=config.max_retries,
                    wait_time=delay,
                    status_code=response.status_code,
                    timed_out=timed_out,
                )
            )

    def _give_up(
        self,
        request: Request,
        response: httpx.Response,
        attempt: int,
        config: RetryConfig,
        start_time: float,
    ) -> None:
        from afluent.response import Response

        outcome = "timed out" if is_timeout_response(response) else "failed"
        error = RetryExhaustedError(
            response=Response(request, response, http_error_as_exception=False),
            attempts=attempt,
            max_retries=config.max_retries,
            message=(
                f"The HTTP request {outcome}, and the retry coordinator gave up after "
                f"the maximum {config.max_retries} retries ({attempt} attempts)"
            ),
        )
        log_structured(
            logger,
            logging.DEBUG,
            f"{request.method} request to {request.url} {outcome} with status "
            f"{response.status_code} after {attempt} attempts",
            method=request.method,
            url=str(request.url),
            attempt=attempt,
            max_retries=config.max_retries,
            status_code=response.status_code,
        )
        if self.on_failure is not None:
            self.on_failure(
                FailureInfo(
                    url=str(request.url),
                    method=request.method,
                    attempt=attempt,
                    max_retries=config.max_retries,
                    error=error,
                    status_code=response.status_code,
                    total_time=time.time() - start_time,
                )
            )
        raise error
