# src/common/rate_limit.py

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.common.config import settings

# Counters live in RATE_LIMIT_STORAGE_URI. The default memory:// store resets on
# restart and is per process; point it at redis:// when running several instances.
# Counters are keyed by endpoint so "/api/contact" and "/api/contact/" share one.
limiter = Limiter(
    key_func=get_remote_address,
    key_style="endpoint",
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

CONTACT_LIMIT = settings.CONTACT_RATE_LIMIT
