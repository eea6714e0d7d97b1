"""Client identification helpers."""
from __future__ import annotations

from typing import Mapping

UNKNOWN_CLIENT = "unknown"


def client_identifier(headers: Mapping[str, str]) -> str:
    """Return the originating address from ``X-Forwarded-For``.

    Only the first hop is used. Requests without the header share the
    ``"unknown"`` bucket.
    """

    forwarded = headers.get("x-forwarded-for") or ""
    first_hop = forwarded.split(",", 1)[0].strip()
    return first_hop or UNKNOWN_CLIENT


def rate_limit_key(prefix: str, client_id: str) -> str:
    """Namespace ``client_id`` by endpoint category."""

    return f"{prefix}:{client_id}"
