"""Persistence of the subscriber identity and redemption checkpoints."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from iapsync.domain.key_value import KeyValueStore
from iapsync.domain.ports.collaborators import RedemptionCheckpointStore
from iapsync.domain.types import (
    OriginalTransactionId,
    PurchaseToken,
    SubscriberIdentity,
)

if TYPE_CHECKING:
    from datetime import datetime

    from iapsync.domain.ports.unit_of_work import ReadTransaction, WriteTransaction

log = getLogger(__name__)

DEFAULT_COLLECTION: Final = "SubscriptionRedemption"


class _Keys:
    SUBSCRIBER_ID: Final = "subscriberId"
    ORIGINAL_TRANSACTION_ID: Final = "originalTransactionId"
    PURCHASE_TOKEN: Final = "purchaseToken"
    # Renewal date of the last subscription period we affirmatively redeemed.
    LAST_RENEWAL_REDEEMED: Final = "lastSubscriptionRenewalDate"
    # Last time the necessity checker evaluated whether redemption is due.
    LAST_NECESSITY_CHECK: Final = "lastRedemptionNecessaryCheck"


class SubscriberIdentityStore:
    """Reads and writes subscriber state inside caller-supplied transactions.

    Nothing is cached between calls; every read goes to the transaction.
    """

    def __init__(self, collection: str = DEFAULT_COLLECTION) -> None:
        self._kv = KeyValueStore(collection)

    def get(self, tx: ReadTransaction) -> SubscriberIdentity | None:
        subscriber_id = self._kv.get_bytes(_Keys.SUBSCRIBER_ID, tx)
        if not subscriber_id:
            return None

        original_transaction_id = self._kv.get_uint64(_Keys.ORIGINAL_TRANSACTION_ID, tx)
        if original_transaction_id is not None:
            return SubscriberIdentity(
                subscriber_id=subscriber_id,
                external_reference=OriginalTransactionId(original_transaction_id),
            )

        purchase_token = self._kv.get_string(_Keys.PURCHASE_TOKEN, tx)
        if purchase_token:
            return SubscriberIdentity(
                subscriber_id=subscriber_id,
                external_reference=PurchaseToken(purchase_token),
            )

        log.error("Had subscriber id, but missing external subscription reference")
        return None

    def set(self, identity: SubscriberIdentity, tx: WriteTransaction) -> None:
        self._kv.set_bytes(identity.subscriber_id, _Keys.SUBSCRIBER_ID, tx)

        match identity.external_reference:
            case OriginalTransactionId(value=original_transaction_id):
                self._kv.remove(_Keys.PURCHASE_TOKEN, tx)
                self._kv.set_uint64(original_transaction_id, _Keys.ORIGINAL_TRANSACTION_ID, tx)
            case PurchaseToken(value=purchase_token):
                self._kv.remove(_Keys.ORIGINAL_TRANSACTION_ID, tx)
                self._kv.set_string(purchase_token, _Keys.PURCHASE_TOKEN, tx)

    # Checkpoints -----------------------------------------------------------------

    def subscriber_id(self, tx: ReadTransaction) -> bytes | None:
        identity = self.get(tx)
        return identity.subscriber_id if identity is not None else None

    def get_renewal_checkpoint(self, tx: ReadTransaction) -> datetime | None:
        return self._kv.get_datetime(_Keys.LAST_RENEWAL_REDEEMED, tx)

    def set_renewal_checkpoint(self, value: datetime, tx: WriteTransaction) -> None:
        self._kv.set_datetime(value, _Keys.LAST_RENEWAL_REDEEMED, tx)

    def get_necessity_checkpoint(self, tx: ReadTransaction) -> datetime | None:
        return self._kv.get_datetime(_Keys.LAST_NECESSITY_CHECK, tx)

    def set_necessity_checkpoint(self, value: datetime, tx: WriteTransaction) -> None:
        self._kv.set_datetime(value, _Keys.LAST_NECESSITY_CHECK, tx)


if TYPE_CHECKING:
    _checkpoint_store_check: RedemptionCheckpointStore = SubscriberIdentityStore()
