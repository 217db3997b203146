"""Rate limiting middleware using slowapi."""

from typing import Any

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from chicpic.config.settings import settings

# Initialize limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
)

# Model calls are expensive: tighter limit on generation endpoints
GENERATION_RATE_LIMIT = f"{settings.rate_limit_generation_per_minute}/minute"

__all__ = ["limiter", "setup_rate_limiting", "GENERATION_RATE_LIMIT"]


def setup_rate_limiting(app: Any) -> None:
    """Setup rate limiting for FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
