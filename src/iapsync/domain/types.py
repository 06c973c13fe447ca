"""Domain types for subscription entitlement and subscriber identities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

SUBSCRIBER_ID_LENGTH: Final[int] = 32
# Must match the product configured with the payment platform.
DEFAULT_PRODUCT_ID: Final[str] = "backups.mediatier"
_UINT64_MAX: Final[int] = 2**64 - 1


class SignatureStatus(StrEnum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class PurchaseResult(StrEnum):
    """Outcome of a purchase attempt.

    ``SUCCESS`` also covers a user who was already subscribed.
    """

    SUCCESS = "success"
    PENDING = "pending"
    USER_CANCELLED = "user_cancelled"


@dataclass(frozen=True, slots=True)
class OriginalTransactionId:
    """The ``originalTransactionId`` of a StoreKit subscription transaction."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _UINT64_MAX:
            raise ValueError(f"Original transaction id out of range: {self.value}")


@dataclass(frozen=True, slots=True)
class PurchaseToken:
    """A Play Store ``purchaseToken`` identifying an Android subscription."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Purchase token must not be empty")


type ExternalReference = OriginalTransactionId | PurchaseToken


@dataclass(frozen=True, slots=True, kw_only=True)
class EntitlementTransaction:
    """A payment-platform transaction as reported by the device."""

    id: int
    original_id: int
    product_id: str
    signature_status: SignatureStatus = SignatureStatus.VERIFIED

    @property
    def is_verified(self) -> bool:
        return self.signature_status is SignatureStatus.VERIFIED


@dataclass(frozen=True, slots=True, kw_only=True)
class SubscriberIdentity:
    """Client-generated subscriber id plus the external subscription it pays through.

    The subscriber id is not tied to an account. It may have been generated on
    this device, or on a former device and restored here.
    """

    subscriber_id: bytes = field(repr=False)
    external_reference: ExternalReference

    def __post_init__(self) -> None:
        if not self.subscriber_id:
            raise ValueError("Subscriber id must not be empty")

    def matches(self, transaction: EntitlementTransaction) -> bool:
        match self.external_reference:
            case OriginalTransactionId(value=original_id):
                return original_id == transaction.original_id
            case PurchaseToken():
                return False

    @property
    def redacted_id(self) -> str:
        return f"{self.subscriber_id[:4].hex()}..."
