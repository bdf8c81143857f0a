"""Rate limiting configuration using slowapi.

``DEFAULT_RATE_LIMIT`` applies to every route through ``SlowAPIMiddleware``
(wired in main.py). Routes decorated with ``@limiter.limit`` use their own
limit instead of the default.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

DEFAULT_RATE_LIMIT = "60/minute"
SIGNUP_HOOK_LIMIT = "20/minute"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[DEFAULT_RATE_LIMIT],
)
