from slowapi import Limiter
from slowapi.util import get_remote_address

from venered.config import settings

limiter = Limiter(key_func=get_remote_address)

# Per-client limit for mutation endpoints
DEFAULT_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
