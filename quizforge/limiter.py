from slowapi import Limiter
from slowapi.util import get_remote_address

from .settings import settings

# router endpoints need an explicit @limiter.limit; default_limits only reach app-level routes
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
