r"""Backoff strategies for retry delays.

This package provides constant, linear and exponential backoff
strategies. Every strategy can be passed directly as the ``get_delay``
function of a ``RetryConfig``.
"""

from __future__ import annotations

__all__ = [
    "BaseBackoffStrategy",
    "ConstantBackoff",
    "ExponentialBackoff",
    "LinearBackoff",
]

from afluent.backoff.base import BaseBackoffStrategy
from afluent.backoff.constant import ConstantBackoff
from afluent.backoff.exponential import ExponentialBackoff
from afluent.backoff.linear import LinearBackoff
