"""Translate between identity records and domain subscriber identities."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from iapsync.adapters.registrar.client import encode_subscriber_id
from iapsync.domain.types import OriginalTransactionId, PurchaseToken, SubscriberIdentity

from .schema import SubscriberIdentityRecord

if TYPE_CHECKING:
    from collections.abc import Mapping


def _decode_subscriber_id(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError("Invalid identity record: subscriberId is not base64url") from exc
    if not decoded:
        raise ValueError("Invalid identity record: subscriberId is empty")
    return decoded


def parse_identity_record(
    payload: Mapping[str, object] | SubscriberIdentityRecord,
) -> SubscriberIdentity:
    record = (
        payload
        if isinstance(payload, SubscriberIdentityRecord)
        else SubscriberIdentityRecord.model_validate(payload)
    )
    subscriber_id = _decode_subscriber_id(record.subscriber_id)
    if record.original_transaction_id is not None:
        return SubscriberIdentity(
            subscriber_id=subscriber_id,
            external_reference=OriginalTransactionId(record.original_transaction_id),
        )
    if record.purchase_token is not None:
        return SubscriberIdentity(
            subscriber_id=subscriber_id,
            external_reference=PurchaseToken(record.purchase_token),
        )
    raise ValueError("Invalid identity record: missing external reference")


def build_identity_record(identity: SubscriberIdentity) -> SubscriberIdentityRecord:
    subscriber_id = encode_subscriber_id(identity.subscriber_id)
    match identity.external_reference:
        case OriginalTransactionId(value=original_transaction_id):
            return SubscriberIdentityRecord(
                subscriber_id=subscriber_id,
                original_transaction_id=original_transaction_id,
            )
        case PurchaseToken(value=purchase_token):
            return SubscriberIdentityRecord(
                subscriber_id=subscriber_id,
                purchase_token=purchase_token,
            )
