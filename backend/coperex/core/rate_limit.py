"""Per-client request throttling.

Every route gets ``RATE_LIMIT`` requests per window, keyed by client address.
Exceeding it answers 429 through slowapi's handler.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from coperex.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
