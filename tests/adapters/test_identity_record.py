from __future__ import annotations

import pytest
from pydantic import ValidationError

from iapsync.adapters.identity_record import (
    SubscriberIdentityRecord,
    build_identity_record,
    parse_identity_record,
)
from iapsync.adapters.registrar import encode_subscriber_id
from iapsync.domain.types import OriginalTransactionId, PurchaseToken, SubscriberIdentity

SUBSCRIBER_ID = bytes(range(32))
ENCODED_ID = encode_subscriber_id(SUBSCRIBER_ID)


def test_parse_record_with_original_transaction_id() -> None:
    identity = parse_identity_record(
        {"subscriberId": ENCODED_ID, "originalTransactionId": 2**64 - 1, "extra": True}
    )

    assert identity == SubscriberIdentity(
        subscriber_id=SUBSCRIBER_ID,
        external_reference=OriginalTransactionId(2**64 - 1),
    )


def test_parse_record_with_purchase_token() -> None:
    identity = parse_identity_record({"subscriberId": ENCODED_ID, "purchaseToken": "tok"})

    assert identity.external_reference == PurchaseToken("tok")


@pytest.mark.parametrize(
    "payload",
    [
        {"subscriberId": ENCODED_ID},
        {"subscriberId": ENCODED_ID, "originalTransactionId": 1, "purchaseToken": "tok"},
        {"subscriberId": "", "originalTransactionId": 1},
        {"subscriberId": ENCODED_ID, "originalTransactionId": -1},
        {"subscriberId": ENCODED_ID, "purchaseToken": ""},
        {"originalTransactionId": 1},
    ],
)
def test_invalid_records_are_rejected(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        parse_identity_record(payload)


def test_undecodable_subscriber_id_is_rejected() -> None:
    with pytest.raises(ValueError, match="base64url"):
        parse_identity_record({"subscriberId": "a", "originalTransactionId": 1})


def test_build_record_serialises_with_aliases() -> None:
    identity = SubscriberIdentity(
        subscriber_id=SUBSCRIBER_ID, external_reference=OriginalTransactionId(42)
    )

    record = build_identity_record(identity)

    assert record.model_dump(by_alias=True, exclude_none=True) == {
        "subscriberId": ENCODED_ID,
        "originalTransactionId": 42,
    }
    assert parse_identity_record(record) == identity


def test_record_accepts_field_names() -> None:
    record = SubscriberIdentityRecord(subscriber_id=ENCODED_ID, purchase_token="tok")

    assert record.purchase_token == "tok"
    assert record.original_transaction_id is None
