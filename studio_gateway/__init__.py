"""Rate-limited proxy for a generative-AI chat-completions gateway."""

from .config import Settings, get_settings
from .logging_config import configure_logging
from .rate_limit import FixedWindowRateLimiter, RateLimitResult, check_rate_limit

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "FixedWindowRateLimiter",
    "RateLimitResult",
    "check_rate_limit",
]
