"""Public interface for portable subscriber identity records."""

from __future__ import annotations

from .schema import SubscriberIdentityRecord
from .translator import build_identity_record, parse_identity_record

__all__ = [
    "SubscriberIdentityRecord",
    "build_identity_record",
    "parse_identity_record",
]
