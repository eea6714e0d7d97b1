"""Request body validation helpers.

Every helper raises :class:`~studio_gateway.errors.ValidationError` with the
message shown to the user.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from studio_gateway.errors import ValidationError

DEFAULT_MAX_PROMPT_LENGTH = 5000
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_REMIX_IMAGES = 4

_BASE64_RE = re.compile(r"[A-Za-z0-9+/=]+")


def require_prompt(
    value: Any,
    max_length: int = DEFAULT_MAX_PROMPT_LENGTH,
    length_message: Optional[str] = None,
) -> str:
    """Return ``value`` if it is a usable prompt."""

    if not value:
        raise ValidationError("Prompt is required")
    if not isinstance(value, str):
        raise ValidationError("Invalid prompt format")
    if len(value) > max_length:
        raise ValidationError(
            length_message or f"Prompt exceeds maximum length of {max_length} characters"
        )
    return value


def optional_prompt(value: Any, max_length: int = DEFAULT_MAX_PROMPT_LENGTH) -> Optional[str]:
    """Like :func:`require_prompt` but lets a missing value through."""

    if value is None or value == "":
        return None
    return require_prompt(value, max_length)


def require_image_base64(value: Any, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> str:
    """Validate a raw (non data-URL) base64 image payload."""

    if not isinstance(value, str):
        raise ValidationError("Invalid input format")
    estimated_size = len(value) * 3 / 4
    if estimated_size > max_bytes:
        raise ValidationError(f"Image size exceeds {max_bytes // (1024 * 1024)}MB limit")
    if not _BASE64_RE.fullmatch(value):
        raise ValidationError("Invalid image format")
    return value


def require_choice(value: Any, choices: Iterable[str], message: str) -> Optional[str]:
    """Ensure ``value`` is one of ``choices``; ``None`` is accepted."""

    if value is None:
        return None
    if value not in tuple(choices):
        raise ValidationError(message)
    return value


def require_messages(value: Any) -> List[dict]:
    """Validate a chat transcript."""

    if not value or not isinstance(value, list):
        raise ValidationError("Messages array is required")
    for message in value:
        if (
            not isinstance(message, dict)
            or not isinstance(message.get("role"), str)
            or "content" not in message
        ):
            raise ValidationError("Invalid message format")
    return value


def require_images(value: Any, max_images: int = DEFAULT_MAX_REMIX_IMAGES) -> List[str]:
    """Validate the list of image URLs to remix."""

    if not value or not isinstance(value, list):
        raise ValidationError("At least one image is required")
    if len(value) > max_images:
        raise ValidationError(f"Maximum {max_images} images can be remixed at once")
    if any(not isinstance(image, str) or not image for image in value):
        raise ValidationError("Invalid image format")
    return value


def optional_text(value: Any, message: str = "Invalid input format") -> Optional[str]:
    """Accept ``None`` or a string; empty strings collapse to ``None``."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(message)
    return value or None
