"""Utility helpers."""
from .client import client_identifier, rate_limit_key  # noqa: F401
from .clock import Clock, SystemClock  # noqa: F401
from .validation import (  # noqa: F401
    optional_prompt,
    optional_text,
    require_choice,
    require_image_base64,
    require_images,
    require_messages,
    require_prompt,
)
