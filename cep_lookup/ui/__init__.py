"""User interaction helpers."""

from .presenter import (
    envelope_payload,
    error_message,
    render_address,
    render_providers,
    timeout_message,
    timeout_payload,
)

__all__ = [
    "envelope_payload",
    "error_message",
    "render_address",
    "render_providers",
    "timeout_message",
    "timeout_payload",
]
