"""Public interface for the subscription server adapter."""

from __future__ import annotations

from .client import (
    HttpSubscriberRegistrar,
    associate_path,
    encode_subscriber_id,
    register_path,
)

__all__ = [
    "HttpSubscriberRegistrar",
    "associate_path",
    "encode_subscriber_id",
    "register_path",
]
